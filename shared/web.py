"""aiohttp application serving liveness and readiness probes."""

from __future__ import annotations

import logging
import os
import time
from typing import Awaitable, Callable

from aiohttp import web

from shared import health as healthmod
from shared.logging import get_trace_id, set_trace_id

__all__ = ["create_app"]

log = logging.getLogger("secretariat.web")


def create_app(
    *,
    bot_name: str,
    env_name: str,
    access_logger: logging.Logger | None = None,
) -> web.Application:
    """Create the health application; ``access_logger`` receives one line per request."""

    access = access_logger or logging.getLogger("aiohttp.access")

    @web.middleware
    async def tracing_middleware(
        request: web.Request, handler: Callable[[web.Request], Awaitable[web.StreamResponse]]
    ) -> web.StreamResponse:
        trace = set_trace_id()
        started = time.perf_counter()
        status = 500
        try:
            response = await handler(request)
            status = getattr(response, "status", status)
            response.headers["X-Trace-Id"] = trace
            return response
        except web.HTTPException as exc:
            status = exc.status
            raise
        finally:
            duration_ms = int((time.perf_counter() - started) * 1000)
            access.info(
                "http_request",
                extra={
                    "trace": trace,
                    "path": request.path,
                    "method": request.method,
                    "status": status,
                    "ms": duration_ms,
                },
            )

    app = web.Application(middlewares=[tracing_middleware])

    async def root(_: web.Request) -> web.Response:
        payload = {
            "ok": True,
            "bot": bot_name,
            "env": env_name,
            "version": os.getenv("BOT_VERSION", "dev"),
            "trace": get_trace_id(),
        }
        return web.json_response(payload)

    async def ready(_: web.Request) -> web.Response:
        ok = healthmod.overall_ready()
        payload = {"ok": ok, "components": healthmod.components_snapshot()}
        return web.json_response(payload, status=200 if ok else 503)

    async def healthz(_: web.Request) -> web.Response:
        return web.json_response({"ok": True, "bot": bot_name, "endpoint": "healthz"})

    app.router.add_get("/", root)
    app.router.add_get("/ready", ready)
    app.router.add_get("/healthz", healthz)
    return app
