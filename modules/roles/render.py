"""Embed builders for help, role listings and admin reports."""

from __future__ import annotations

from typing import Optional, Sequence

import discord

from modules.roles.directory import RoleDirectory
from modules.roles.reconcile import ReconcileReport
from modules.roles.remote import RemoteRole
from shared.config import Settings
from shared.theme import EmbedCategory, get_embed_colour

__all__ = [
    "admin_error_embed",
    "help_embed",
    "public_roles_embed",
    "reconcile_embed",
    "remote_roles_embed",
]

_DESCRIPTION_LIMIT = 4000


def _clip(lines: Sequence[str]) -> str:
    out: list[str] = []
    used = 0
    for line in lines:
        if used + len(line) + 1 > _DESCRIPTION_LIMIT:
            out.append("…")
            break
        out.append(line)
        used += len(line) + 1
    return "\n".join(out)


def _base(settings: Settings, title: str, category: EmbedCategory) -> discord.Embed:
    embed = discord.Embed(title=title, colour=get_embed_colour(category))
    if settings.thumbnail_url:
        embed.set_thumbnail(url=settings.thumbnail_url)
    embed.set_footer(text=settings.display_name)
    return embed


def _role_lines(directory: RoleDirectory) -> list[str]:
    lines = []
    for entry in directory:
        if entry.description:
            lines.append(f"**{entry.key}** — {entry.description}")
        else:
            lines.append(f"**{entry.key}**")
    return lines


def public_roles_embed(settings: Settings, directory: RoleDirectory) -> discord.Embed:
    embed = _base(settings, "Public roles", "public")
    lines = _role_lines(directory)
    embed.description = _clip(lines) if lines else "No public roles are configured."
    return embed


def help_embed(settings: Settings, directory: RoleDirectory) -> discord.Embed:
    prefix = settings.prefix
    embed = _base(settings, settings.display_name, "public")
    usage = [
        f"`{prefix}role <name>` — join or leave a public role. Close spellings work.",
        f"`{prefix}roles` — list the public roles.",
    ]
    if settings.home_channel:
        usage.append(f"Commands are only accepted in #{settings.home_channel}.")
    embed.description = "\n".join(usage)
    lines = _role_lines(directory)
    if lines:
        embed.add_field(name="Public roles", value=_clip(lines)[:1024], inline=False)
    return embed


def remote_roles_embed(settings: Settings, roles: Sequence[RemoteRole]) -> discord.Embed:
    embed = _base(settings, "Server roles", "admin")
    lines = [f"{role.name} — `{role.id}`" for role in roles]
    embed.description = _clip(lines) if lines else "The server has no roles."
    return embed


def reconcile_embed(settings: Settings, report: ReconcileReport) -> discord.Embed:
    if report.all_found:
        embed = _base(settings, "✅ Public roles match the server", "success")
    else:
        embed = _base(settings, "❌ Public roles are missing on the server", "failure")
    lines = [f"{'✅' if entry.found else '❌'} {entry.key}" for entry in report.entries]
    embed.description = _clip(lines) if lines else "No public roles are configured."
    if not report.all_found:
        embed.add_field(
            name="Fix",
            value=f"Rename the server role with `{settings.prefix}rename <role_id> <name>`.",
            inline=False,
        )
    return embed


def admin_error_embed(settings: Settings, title: str, reason: Optional[str]) -> discord.Embed:
    embed = _base(settings, title, "failure")
    embed.description = reason or "The request could not be completed."
    return embed
