"""Self-service role toggle: resolve, authorize, re-check membership, flip."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from modules.roles.directory import RoleDirectory, RoleEntry
from modules.roles.errors import (
    NoMatch,
    RemoteError,
    RemoteNotFound,
    RoleGatewayError,
    Unauthorized,
)
from modules.roles.matcher import MatchResult, match
from modules.roles.permissions import Caller, GateContext, Operation, PermissionGate
from modules.roles.remote import RemoteDirectory, find_role_by_name

__all__ = ["ToggleEngine", "ToggleOutcome", "ToggleResult"]

log = logging.getLogger("secretariat.roles.toggle")

# Remote ids are bound once per process; a role recreated under the same
# name keeps failing until the bot restarts.
_NOT_FOUND_HINTS = {
    "role": (
        "public role missing from remote directory; run a reconciliation check, "
        "and restart the bot if the role was recreated under the same name"
    ),
    "member": "caller is no longer a member of the guild",
    "guild": "guild is not reachable by the bot; check that it is still installed",
}


class ToggleOutcome(enum.Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    REMOTE_ERROR = "remote_error"

    @property
    def success(self) -> bool:
        return self in (ToggleOutcome.ENABLED, ToggleOutcome.DISABLED)


@dataclass(frozen=True, slots=True)
class ToggleResult:
    outcome: ToggleOutcome
    key: Optional[str] = None
    score: Optional[float] = None
    show_help: bool = False
    error: Optional[RoleGatewayError] = None


class ToggleEngine:
    """Runs one toggle invocation through its stages.

    Each stage either returns the value the next stage needs or raises a
    :class:`RoleGatewayError`; :meth:`toggle` maps the error to an outcome.
    The remote directory is the only source of truth for membership, so a
    failed call leaves membership unchanged and nothing is retried.
    """

    def __init__(self, directory: RoleDirectory, gate: PermissionGate, remote: RemoteDirectory) -> None:
        self._directory = directory
        self._gate = gate
        self._remote = remote

    def resolve(self, query: str) -> tuple[RoleEntry, MatchResult]:
        result = match(query, self._directory.keys())
        if result is None:
            raise NoMatch(query)
        entry = self._directory.get(result.key)
        if entry is None:  # pragma: no cover - keys() and get() share one mapping
            raise NoMatch(query)
        return entry, result

    def authorize(self, caller: Caller, key: str, channel_name: Optional[str]) -> None:
        context = GateContext(channel_name=channel_name, role_key=key)
        if not self._gate.authorize(caller, Operation.TOGGLE, context):
            raise Unauthorized(Operation.TOGGLE.value, caller_id=caller.id, reason=key)

    async def remote_id(self, entry: RoleEntry, guild_id: int) -> int:
        """Return the cached remote id, binding it by exact name on first use."""

        if entry.remote_id is not None:
            return entry.remote_id
        roles = await self._remote.get_roles(guild_id)
        found = find_role_by_name(roles, entry.key)
        if found is None:
            raise RemoteNotFound(entry.key)
        return entry.bind_remote_id(found.id)

    async def toggle(
        self,
        *,
        caller: Caller,
        guild_id: int,
        query: Optional[str],
        channel_name: Optional[str] = None,
    ) -> ToggleResult:
        if not self._gate.channel_allowed(channel_name):
            log.info(
                "toggle rejected outside home channel",
                extra={"user": caller.id, "channel": channel_name},
            )
            return ToggleResult(
                ToggleOutcome.UNAUTHORIZED,
                error=Unauthorized(Operation.TOGGLE.value, caller_id=caller.id, reason="channel"),
            )

        text = (query or "").strip()
        if not text:
            return ToggleResult(ToggleOutcome.NOT_FOUND, show_help=True)

        key: Optional[str] = None
        score: Optional[float] = None
        try:
            entry, result = self.resolve(text)
            key, score = entry.key, result.score
            self.authorize(caller, entry.key, channel_name)
            role_id = await self.remote_id(entry, guild_id)
            current = await self._remote.get_member_roles(guild_id, caller.id)
            if role_id in current:
                await self._remote.remove_role(guild_id, caller.id, role_id)
                outcome = ToggleOutcome.DISABLED
            else:
                await self._remote.add_role(guild_id, caller.id, role_id)
                outcome = ToggleOutcome.ENABLED
        except NoMatch as exc:
            log.info("toggle found no matching role", extra={"user": caller.id, "query": text})
            return ToggleResult(ToggleOutcome.NOT_FOUND, error=exc)
        except Unauthorized as exc:
            log.info("toggle not authorized", extra={"user": caller.id, "key": key})
            return ToggleResult(ToggleOutcome.UNAUTHORIZED, key=key, score=score, error=exc)
        except RemoteNotFound as exc:
            log.warning(
                _NOT_FOUND_HINTS.get(exc.kind, _NOT_FOUND_HINTS["role"]),
                extra={"user": caller.id, "key": key, "guild": guild_id, "missing": exc.kind},
            )
            return ToggleResult(ToggleOutcome.NOT_FOUND, key=key, score=score, error=exc)
        except RemoteError as exc:
            log.error(
                "toggle remote call failed",
                exc_info=exc,
                extra={"user": caller.id, "key": key, "guild": guild_id, "action": exc.action},
            )
            return ToggleResult(ToggleOutcome.REMOTE_ERROR, key=key, score=score, error=exc)

        log.info(
            "role toggled",
            extra={
                "user": caller.id,
                "key": key,
                "query": text,
                "score": round(score or 0.0, 3),
                "outcome": outcome.value,
            },
        )
        return ToggleResult(outcome, key=key, score=score)
