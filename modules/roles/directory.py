"""In-memory directory of public roles loaded from configuration."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from modules.roles.errors import ConfigError

__all__ = ["RoleDirectory", "RoleEntry"]


@dataclass(slots=True, eq=False)
class RoleEntry:
    """A whitelisted role and its lazily bound remote identifier.

    ``remote_id`` is advisory: the remote role may be deleted or renamed
    without the gateway noticing. It is bound at most once per process.
    """

    key: str
    description: str = ""
    remote_id: Optional[int] = None

    def bind_remote_id(self, remote_id: int) -> int:
        if self.remote_id is None:
            self.remote_id = remote_id
        return self.remote_id


class RoleDirectory:
    """Ordered, read-only mapping of role key to :class:`RoleEntry`."""

    __slots__ = ("_entries",)

    def __init__(self, roles: Iterable[tuple[str, str]]) -> None:
        entries: dict[str, RoleEntry] = {}
        for key, description in roles:
            if not key or not key.strip():
                raise ConfigError("role keys must be non-empty")
            if key in entries:
                raise ConfigError(f"duplicate role key: {key!r}")
            entries[key] = RoleEntry(key=key, description=description or "")
        self._entries: Mapping[str, RoleEntry] = MappingProxyType(entries)

    @classmethod
    def from_settings(cls, settings) -> "RoleDirectory":
        return cls(settings.public_roles)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[RoleEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[RoleEntry]:
        return self._entries.get(key)

    def keys(self) -> tuple[str, ...]:
        """Role keys in configuration order; this is the matcher's candidate order."""

        return tuple(self._entries)
