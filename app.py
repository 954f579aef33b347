from __future__ import annotations

import asyncio
import logging

import discord
from discord.ext import commands

from modules.common.runtime import Runtime
from modules.roles.errors import ConfigError
from modules.roles.feedback import acknowledge
from shared import health as healthmod
from shared.config import Settings, load_settings
from shared.logfmt import LogTemplates, human_reason, user_label
from shared.logging import setup_logging

log = logging.getLogger("secretariat.app")


def build_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.message_content = True
    intents.members = True
    return intents


async def handle_command_error(ctx: commands.Context, error: Exception) -> bool:
    """Outer guard: every failed command still gets the failure mark.

    Returns ``False`` when the error is ignored (unknown commands).
    """

    if isinstance(error, commands.CommandNotFound):
        return False

    original = getattr(error, "original", error)
    command = getattr(ctx.command, "name", None) or "-"
    author_id = getattr(getattr(ctx, "author", None), "id", None)
    line = LogTemplates.cmd_error(
        command=command,
        user=user_label(getattr(ctx, "guild", None), author_id),
        reason=human_reason(original),
    )
    if isinstance(error, commands.CommandInvokeError):
        log.error(line, exc_info=original, extra={"command": command, "user": author_id})
    else:
        log.warning(line, extra={"command": command, "user": author_id})

    message = getattr(ctx, "message", None)
    if message is None:
        return True
    try:
        await acknowledge(message, False)
    except Exception:
        log.exception("failed to acknowledge command error", extra={"command": command})
    return True


def build_bot(settings: Settings) -> commands.Bot:
    bot = commands.Bot(
        command_prefix=commands.when_mentioned_or(settings.prefix),
        intents=build_intents(),
        help_command=None,
    )

    @bot.event
    async def on_ready() -> None:
        healthmod.set_component("discord", True)
        log.info(
            LogTemplates.ready(
                user=str(bot.user),
                env=settings.env_name,
                prefix=settings.prefix,
                roles=len(settings.public_roles),
            )
        )

    @bot.event
    async def on_disconnect() -> None:
        healthmod.set_component("discord", False)

    @bot.event
    async def on_command_error(ctx: commands.Context, error: Exception) -> None:
        await handle_command_error(ctx, error)

    return bot


async def main() -> None:
    try:
        settings = load_settings()
    except ConfigError as exc:
        raise SystemExit(f"secretariat: {exc}") from exc

    access_logger = setup_logging(
        level=settings.log_level,
        static_fields={"bot": settings.display_name, "env": settings.env_name},
    )
    log.info("config: %s", settings.snapshot())

    bot = build_bot(settings)
    runtime = Runtime(bot, settings, access_logger=access_logger)
    try:
        await runtime.start()
    except discord.LoginFailure as exc:
        log.critical("discord rejected the credential", extra={"reason": human_reason(exc)})
        raise SystemExit(f"secretariat: login failed: {human_reason(exc)}") from exc
    finally:
        await runtime.close()


if __name__ == "__main__":
    asyncio.run(main())
