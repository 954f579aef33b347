"""Owner-only operations against the remote directory."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from modules.roles import reconcile
from modules.roles.directory import RoleDirectory
from modules.roles.errors import Unauthorized
from modules.roles.permissions import Caller, GateContext, Operation, PermissionGate
from modules.roles.remote import RemoteDirectory, RemoteRole

__all__ = ["AdminService", "rename"]

log = logging.getLogger("secretariat.roles.admin")


async def rename(remote: RemoteDirectory, guild_id: int, role_id: int, new_name: str) -> None:
    """Rename a remote role located by exact id; remote errors propagate."""

    await remote.rename_role(guild_id, role_id, new_name)


class AdminService:
    """Gates each administrative call on owner identity before touching the remote."""

    def __init__(self, directory: RoleDirectory, gate: PermissionGate, remote: RemoteDirectory) -> None:
        self._directory = directory
        self._gate = gate
        self._remote = remote

    def _require(self, caller: Caller, operation: Operation, channel_name: Optional[str]) -> None:
        if not self._gate.authorize(caller, operation, GateContext(channel_name=channel_name)):
            log.info(
                "admin operation rejected",
                extra={"user": caller.id, "operation": operation.value, "channel": channel_name},
            )
            raise Unauthorized(operation.value, caller_id=caller.id)

    async def list_remote_roles(
        self, caller: Caller, guild_id: int, *, channel_name: Optional[str] = None
    ) -> Sequence[RemoteRole]:
        self._require(caller, Operation.LIST_REMOTE, channel_name)
        return await self._remote.get_roles(guild_id)

    async def rename(
        self,
        caller: Caller,
        guild_id: int,
        role_id: int,
        new_name: str,
        *,
        channel_name: Optional[str] = None,
    ) -> None:
        self._require(caller, Operation.RENAME, channel_name)
        await rename(self._remote, guild_id, role_id, new_name)
        log.info(
            "role renamed by owner",
            extra={"user": caller.id, "guild": guild_id, "role": role_id, "new_name": new_name},
        )

    async def reconcile(
        self, caller: Caller, guild_id: int, *, channel_name: Optional[str] = None
    ) -> reconcile.ReconcileReport:
        self._require(caller, Operation.RECONCILE, channel_name)
        return await reconcile.check(self._directory, self._remote, guild_id)
