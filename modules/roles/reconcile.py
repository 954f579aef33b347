"""Read-only audit of configured public roles against the remote directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from modules.roles.directory import RoleDirectory
from modules.roles.remote import RemoteDirectory

__all__ = ["ReconcileEntry", "ReconcileReport", "check"]

log = logging.getLogger("secretariat.roles.reconcile")


@dataclass(frozen=True, slots=True)
class ReconcileEntry:
    key: str
    found: bool


@dataclass(frozen=True, slots=True)
class ReconcileReport:
    entries: tuple[ReconcileEntry, ...]

    @property
    def all_found(self) -> bool:
        return all(entry.found for entry in self.entries)

    @property
    def missing(self) -> tuple[str, ...]:
        return tuple(entry.key for entry in self.entries if not entry.found)


async def check(directory: RoleDirectory, remote: RemoteDirectory, guild_id: int) -> ReconcileReport:
    """Compare every configured key with the live remote role names.

    Names are compared exactly and case-sensitively. Cached remote ids on the
    directory entries are left untouched.
    """

    remote_names = {role.name for role in await remote.get_roles(guild_id)}
    report = ReconcileReport(
        entries=tuple(ReconcileEntry(key=entry.key, found=entry.key in remote_names) for entry in directory)
    )
    log.info(
        "reconciliation checked",
        extra={
            "guild": guild_id,
            "checked": len(report.entries),
            "missing": list(report.missing),
            "all_found": report.all_found,
        },
    )
    return report
