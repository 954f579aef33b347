"""Application runtime scaffolding for the bot process."""

from __future__ import annotations

import logging
from typing import Optional

from aiohttp import web
from discord.ext import commands

from cogs.roles import RolesCog, add_roles_cog
from modules.roles.remote import RemoteDirectory
from shared import health as healthmod
from shared.config import Settings
from shared.web import create_app

log = logging.getLogger("secretariat.runtime")


class Runtime:
    """Container object that wires the bot, the roles cog and the health server."""

    def __init__(
        self,
        bot: commands.Bot,
        settings: Settings,
        *,
        access_logger: logging.Logger | None = None,
        remote: RemoteDirectory | None = None,
    ) -> None:
        self.bot = bot
        self.settings = settings
        self._access_logger = access_logger
        self._remote = remote
        self.cog: Optional[RolesCog] = None
        self._web_runner: Optional[web.AppRunner] = None
        self._web_site: Optional[web.TCPSite] = None

    async def start_webserver(self) -> None:
        port = self.settings.health_port
        if port is None or self._web_site is not None:
            return
        app = create_app(
            bot_name=self.settings.display_name,
            env_name=self.settings.env_name,
            access_logger=self._access_logger,
        )
        self._web_runner = web.AppRunner(app)
        await self._web_runner.setup()
        self._web_site = web.TCPSite(self._web_runner, host="0.0.0.0", port=port)
        await self._web_site.start()
        log.info("web server listening", extra={"port": port})

    async def shutdown_webserver(self) -> None:
        site, runner = self._web_site, self._web_runner
        self._web_site = None
        self._web_runner = None
        if site is not None:
            await site.stop()
        if runner is not None:
            await runner.cleanup()

    async def load_extensions(self) -> RolesCog:
        if self.cog is None:
            self.cog = await add_roles_cog(self.bot, self.settings, remote=self._remote)
            log.info(
                "roles cog loaded",
                extra={
                    "public_roles": len(self.cog.directory),
                    "home_channel": self.settings.home_channel,
                    "owners": len(self.settings.owner_ids),
                },
            )
        return self.cog

    async def start(self) -> None:
        healthmod.set_component("runtime", True)
        await self.start_webserver()
        await self.load_extensions()
        await self.bot.start(self.settings.token)

    async def close(self) -> None:
        healthmod.set_component("runtime", False)
        await self.shutdown_webserver()
        if not self.bot.is_closed():
            await self.bot.close()
