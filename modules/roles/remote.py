"""Remote directory interface and its Discord guild implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, runtime_checkable

import discord

from modules.roles.errors import RemoteError, RemoteNotFound

__all__ = ["DiscordRemoteDirectory", "RemoteDirectory", "RemoteRole", "find_role_by_name"]

log = logging.getLogger("secretariat.roles.remote")

TOGGLE_REASON = "self-service role toggle"
RENAME_REASON = "role reconciliation rename"


@dataclass(frozen=True, slots=True)
class RemoteRole:
    id: int
    name: str


@runtime_checkable
class RemoteDirectory(Protocol):
    async def get_member_roles(self, guild_id: int, user_id: int) -> set[int]: ...

    async def get_roles(self, guild_id: int) -> Sequence[RemoteRole]: ...

    async def add_role(self, guild_id: int, user_id: int, role_id: int) -> None: ...

    async def remove_role(self, guild_id: int, user_id: int, role_id: int) -> None: ...

    async def rename_role(self, guild_id: int, role_id: int, new_name: str) -> None: ...


def find_role_by_name(roles: Sequence[RemoteRole], name: str) -> Optional[RemoteRole]:
    """Exact, case-sensitive lookup; the first role with ``name`` wins."""

    for role in roles:
        if role.name == name:
            return role
    return None


class DiscordRemoteDirectory:
    """:class:`RemoteDirectory` backed by the Discord API via ``discord.py``.

    Members and roles are always fetched over HTTP rather than read from the
    gateway cache so that toggles act on current membership.
    """

    def __init__(self, client: discord.Client) -> None:
        self._client = client

    async def _guild(self, guild_id: int) -> discord.Guild:
        guild = self._client.get_guild(guild_id)
        if guild is not None:
            return guild
        try:
            return await self._client.fetch_guild(guild_id)
        except discord.NotFound as exc:
            raise RemoteNotFound(guild_id, kind="guild") from exc
        except discord.HTTPException as exc:
            raise RemoteError("fetch_guild", str(exc)) from exc

    async def _member(self, guild: discord.Guild, user_id: int) -> discord.Member:
        try:
            return await guild.fetch_member(user_id)
        except discord.NotFound as exc:
            raise RemoteNotFound(user_id, kind="member") from exc
        except discord.HTTPException as exc:
            raise RemoteError("fetch_member", str(exc)) from exc

    async def get_member_roles(self, guild_id: int, user_id: int) -> set[int]:
        guild = await self._guild(guild_id)
        member = await self._member(guild, user_id)
        return {role.id for role in member.roles}

    async def get_roles(self, guild_id: int) -> list[RemoteRole]:
        guild = await self._guild(guild_id)
        try:
            roles = await guild.fetch_roles()
        except discord.HTTPException as exc:
            raise RemoteError("fetch_roles", str(exc)) from exc
        ordered = sorted(roles, key=lambda role: role.position, reverse=True)
        return [RemoteRole(id=role.id, name=role.name) for role in ordered if not role.is_default()]

    async def add_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        guild = await self._guild(guild_id)
        member = await self._member(guild, user_id)
        try:
            await member.add_roles(discord.Object(id=role_id), reason=TOGGLE_REASON)
        except discord.NotFound as exc:
            raise RemoteNotFound(role_id) from exc
        except discord.HTTPException as exc:
            raise RemoteError("add_role", str(exc)) from exc

    async def remove_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        guild = await self._guild(guild_id)
        member = await self._member(guild, user_id)
        try:
            await member.remove_roles(discord.Object(id=role_id), reason=TOGGLE_REASON)
        except discord.NotFound as exc:
            raise RemoteNotFound(role_id) from exc
        except discord.HTTPException as exc:
            raise RemoteError("remove_role", str(exc)) from exc

    async def rename_role(self, guild_id: int, role_id: int, new_name: str) -> None:
        guild = await self._guild(guild_id)
        role = guild.get_role(role_id)
        if role is None:
            try:
                roles = await guild.fetch_roles()
            except discord.HTTPException as exc:
                raise RemoteError("fetch_roles", str(exc)) from exc
            role = next((item for item in roles if item.id == role_id), None)
        if role is None:
            raise RemoteNotFound(role_id)
        try:
            await role.edit(name=new_name, reason=RENAME_REASON)
        except discord.NotFound as exc:
            raise RemoteNotFound(role_id) from exc
        except discord.HTTPException as exc:
            raise RemoteError("rename_role", str(exc)) from exc
        log.info("remote role renamed", extra={"guild": guild_id, "role": role_id, "new_name": new_name})
