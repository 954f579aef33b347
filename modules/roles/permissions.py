"""Permission gate for self-service toggles and owner-only administration."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Optional

from modules.roles.directory import RoleDirectory

__all__ = ["Caller", "GateContext", "Operation", "PermissionGate"]


class Operation(enum.Enum):
    TOGGLE = "toggle"
    LIST_PUBLIC = "list_public"
    LIST_REMOTE = "list_remote"
    RENAME = "rename"
    RECONCILE = "reconcile"

    @property
    def admin(self) -> bool:
        return self in _ADMIN_OPERATIONS


_ADMIN_OPERATIONS = frozenset({Operation.LIST_REMOTE, Operation.RENAME, Operation.RECONCILE})


@dataclass(frozen=True, slots=True)
class Caller:
    id: int
    is_owner: bool = False
    roles: frozenset[int] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class GateContext:
    channel_name: Optional[str] = None
    role_key: Optional[str] = None


class PermissionGate:
    """Pure predicate over caller, operation and context.

    The owner list and home channel are fixed at construction; nothing here
    changes at runtime.
    """

    def __init__(
        self,
        directory: RoleDirectory,
        *,
        owner_ids: Iterable[int] = (),
        home_channel: Optional[str] = None,
    ) -> None:
        self._directory = directory
        self._owner_ids = frozenset(int(owner) for owner in owner_ids)
        self._home_channel = home_channel or None

    @classmethod
    def from_settings(cls, settings, directory: RoleDirectory) -> "PermissionGate":
        return cls(directory, owner_ids=settings.owner_ids, home_channel=settings.home_channel)

    @property
    def home_channel(self) -> Optional[str]:
        return self._home_channel

    def caller(self, user_id: int, roles: Iterable[int] = ()) -> Caller:
        return Caller(id=int(user_id), is_owner=int(user_id) in self._owner_ids, roles=frozenset(roles))

    def channel_allowed(self, channel_name: Optional[str]) -> bool:
        if self._home_channel is None:
            return True
        return channel_name == self._home_channel

    def authorize(self, caller: Caller, operation: Operation, context: GateContext) -> bool:
        if not self.channel_allowed(context.channel_name):
            return False
        if operation.admin:
            return caller.id in self._owner_ids
        if operation is Operation.TOGGLE:
            return context.role_key is not None and context.role_key in self._directory
        return True
