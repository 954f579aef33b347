"""Human-friendly log line templates for the role gateway."""

from __future__ import annotations

from typing import Optional, Sequence

import discord

from shared.redaction import sanitize_text

__all__ = [
    "LOG_EMOJI",
    "LogTemplates",
    "guild_label",
    "human_reason",
    "user_label",
]

LOG_EMOJI = {
    "success": "✅",
    "info": "📋",
    "lifecycle": "📘",
    "security": "🔐",
    "warning": "⚠️",
    "error": "❌",
}


def _clean_name(name: Optional[str], default: str) -> str:
    if not name:
        return default
    text = str(name).strip()
    return text or default


def user_label(guild: Optional[discord.Guild], uid: Optional[int]) -> str:
    """Return ``display_name (id)`` when the member is cached, else the bare id."""

    if uid is None:
        return "unknown"
    getter = getattr(guild, "get_member", None)
    member = getter(uid) if callable(getter) else None
    if member is None:
        return str(uid)
    display = _clean_name(getattr(member, "display_name", None), "unknown")
    return f"{display} ({uid})"


def guild_label(guild: Optional[discord.Guild]) -> str:
    if guild is None:
        return "dm"
    return _clean_name(getattr(guild, "name", None), str(getattr(guild, "id", "guild")))


_HTTP_ERROR_CODES = {
    10011: "Unknown Role",
    10007: "Unknown Member",
    50001: "Missing Access",
    50013: "Missing Permissions",
    50035: "Invalid Form Body",
}


def human_reason(exc_or_msg: object) -> str:
    """Normalize Discord HTTP errors and exceptions to short, redacted text."""

    if exc_or_msg is None:
        return "-"
    if isinstance(exc_or_msg, str):
        text = " ".join(exc_or_msg.split())
        return str(sanitize_text(text)) or "-"
    if isinstance(exc_or_msg, discord.HTTPException):
        status = getattr(exc_or_msg, "status", None)
        code = getattr(exc_or_msg, "code", None)
        base = _HTTP_ERROR_CODES.get(code, exc_or_msg.__class__.__name__)
        suffix = ""
        if status or code:
            suffix = f" ({status or '?'}" + (f"/{code}" if code else "") + ")"
        detail = " ".join(str(getattr(exc_or_msg, "text", "")).split())
        if detail:
            return str(sanitize_text(f"{base}{suffix}: {detail}"))
        return f"{base}{suffix}".strip()
    if isinstance(exc_or_msg, BaseException):
        cause = exc_or_msg.__cause__ or getattr(exc_or_msg, "original", None)
        text = " ".join(str(exc_or_msg).split())
        label = exc_or_msg.__class__.__name__
        reason = f"{label}: {text}" if text else label
        if isinstance(cause, BaseException) and cause is not exc_or_msg:
            reason = f"{reason} ← {human_reason(cause)}"
        return str(sanitize_text(reason))
    return "-"


class LogTemplates:
    """Factory helpers for humanized log messages."""

    @staticmethod
    def ready(*, user: str, env: str, prefix: str, roles: int) -> str:
        return (
            f"{LOG_EMOJI['lifecycle']} **Ready** — user={user} • env={env} "
            f"• prefix={prefix} • public_roles={roles}"
        )

    @staticmethod
    def toggle(*, user: str, key: Optional[str], outcome: str, query: str) -> str:
        emoji = LOG_EMOJI["success"] if outcome in {"enabled", "disabled"} else LOG_EMOJI["warning"]
        return (
            f"{emoji} **Role toggle** — user={user or '-'} • query={query or '-'} "
            f"• role={key or '-'} • outcome={outcome}"
        )

    @staticmethod
    def reconcile(*, guild: str, checked: int, missing: Sequence[str]) -> str:
        emoji = LOG_EMOJI["success"] if not missing else LOG_EMOJI["warning"]
        missing_text = ", ".join(missing) or "—"
        return (
            f"{emoji} **Reconcile** — guild={guild} • checked={checked} "
            f"• missing={missing_text}"
        )

    @staticmethod
    def rename(*, user: str, role_id: int, new_name: str, ok: bool, reason: str = "") -> str:
        emoji = LOG_EMOJI["security"] if ok else LOG_EMOJI["error"]
        line = f"{emoji} **Role rename** — user={user} • role={role_id} • name={new_name}"
        if not ok:
            line += f" • reason={reason or '-'}"
        return line

    @staticmethod
    def cmd_error(*, command: str, user: str, reason: str) -> str:
        return (
            f"{LOG_EMOJI['warning']} **Command error** — cmd={command or '-'} "
            f"• user={user or '-'} • reason={reason or '-'}"
        )
