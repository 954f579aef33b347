"""Self-service role toggles and owner-only reconciliation commands."""

from __future__ import annotations

import logging
from typing import Optional

from discord.ext import commands

from modules.roles.admin import AdminService
from modules.roles.directory import RoleDirectory
from modules.roles.errors import RemoteNotFound, RoleGatewayError, Unauthorized
from modules.roles.feedback import acknowledge
from modules.roles.permissions import Caller, GateContext, Operation, PermissionGate
from modules.roles.remote import DiscordRemoteDirectory, RemoteDirectory
from modules.roles.render import (
    admin_error_embed,
    help_embed,
    public_roles_embed,
    reconcile_embed,
    remote_roles_embed,
)
from modules.roles.toggle import ToggleEngine
from shared.config import Settings
from shared.logfmt import LogTemplates, guild_label, human_reason, user_label
from shared.logging import set_trace_id

log = logging.getLogger("secretariat.cogs.roles")


class HomeChannelOnly(commands.CheckFailure):
    """Raised when a command arrives outside the configured home channel."""


def _channel_name(ctx: commands.Context) -> Optional[str]:
    return getattr(ctx.channel, "name", None)


class RolesCog(commands.Cog, name="Roles"):
    """Toggle public roles by name and audit them against the server."""

    def __init__(
        self,
        bot: commands.Bot,
        *,
        settings: Settings,
        directory: RoleDirectory,
        gate: PermissionGate,
        remote: RemoteDirectory,
    ) -> None:
        self.bot = bot
        self.settings = settings
        self.directory = directory
        self.gate = gate
        self.engine = ToggleEngine(directory, gate, remote)
        self.admin = AdminService(directory, gate, remote)

    @classmethod
    def from_settings(
        cls,
        bot: commands.Bot,
        settings: Settings,
        *,
        remote: RemoteDirectory | None = None,
    ) -> "RolesCog":
        directory = RoleDirectory.from_settings(settings)
        gate = PermissionGate.from_settings(settings, directory)
        return cls(
            bot,
            settings=settings,
            directory=directory,
            gate=gate,
            remote=remote or DiscordRemoteDirectory(bot),
        )

    async def cog_check(self, ctx: commands.Context) -> bool:  # type: ignore[override]
        if self.gate.channel_allowed(_channel_name(ctx)):
            return True
        raise HomeChannelOnly(f"commands are only accepted in #{self.gate.home_channel}")

    async def cog_before_invoke(self, ctx: commands.Context) -> None:  # type: ignore[override]
        set_trace_id()

    def _caller(self, ctx: commands.Context) -> Caller:
        roles = [role.id for role in getattr(ctx.author, "roles", []) or []]
        return self.gate.caller(ctx.author.id, roles)

    @commands.command(name="role", aliases=["r"], help="Join or leave a public role by name.")
    @commands.guild_only()
    async def role(self, ctx: commands.Context, *, query: str = "") -> None:
        result = await self.engine.toggle(
            caller=self._caller(ctx),
            guild_id=ctx.guild.id,
            query=query,
            channel_name=_channel_name(ctx),
        )
        await acknowledge(ctx.message, result.outcome)
        if result.show_help:
            await ctx.send(embed=help_embed(self.settings, self.directory))
        log.info(
            LogTemplates.toggle(
                user=user_label(ctx.guild, ctx.author.id),
                key=result.key,
                outcome=result.outcome.value,
                query=query.strip(),
            )
        )

    @commands.command(name="roles", help="List the public roles.")
    async def roles(self, ctx: commands.Context) -> None:
        context = GateContext(channel_name=_channel_name(ctx))
        if not self.gate.authorize(self._caller(ctx), Operation.LIST_PUBLIC, context):
            await acknowledge(ctx.message, False)
            return
        await ctx.send(embed=public_roles_embed(self.settings, self.directory))

    @commands.command(name="help", help="Show how to use the role commands.")
    async def help_cmd(self, ctx: commands.Context) -> None:
        await ctx.send(embed=help_embed(self.settings, self.directory))

    async def _admin_failure(self, ctx: commands.Context, title: str, error: RoleGatewayError) -> None:
        await acknowledge(ctx.message, False)
        if isinstance(error, Unauthorized):
            return
        if isinstance(error, RemoteNotFound):
            reason = f"The {error.kind} `{error.role}` was not found on the server."
        else:
            reason = human_reason(error)
            log.error(
                "admin remote call failed",
                exc_info=error,
                extra={"command": getattr(ctx.command, "name", None)},
            )
        await ctx.reply(embed=admin_error_embed(self.settings, title, reason), mention_author=False)

    @commands.command(name="allroles", hidden=True, help="List every server role with its id.")
    @commands.guild_only()
    async def allroles(self, ctx: commands.Context) -> None:
        try:
            roles = await self.admin.list_remote_roles(
                self._caller(ctx), ctx.guild.id, channel_name=_channel_name(ctx)
            )
        except RoleGatewayError as exc:
            await self._admin_failure(ctx, "Could not list server roles", exc)
            return
        await acknowledge(ctx.message, True)
        await ctx.reply(embed=remote_roles_embed(self.settings, roles), mention_author=False)

    @commands.command(name="rename", hidden=True, help="Rename a server role: rename <role_id> <new name>.")
    @commands.guild_only()
    async def rename(self, ctx: commands.Context, role_id: int, *, new_name: str = "") -> None:
        caller = self._caller(ctx)
        name = new_name.strip()
        if not name and caller.is_owner:
            await acknowledge(ctx.message, False)
            await ctx.reply(
                embed=admin_error_embed(self.settings, "Rename skipped", "A new role name is required."),
                mention_author=False,
            )
            return
        try:
            await self.admin.rename(caller, ctx.guild.id, role_id, name, channel_name=_channel_name(ctx))
        except RoleGatewayError as exc:
            log.info(
                LogTemplates.rename(
                    user=user_label(ctx.guild, ctx.author.id),
                    role_id=role_id,
                    new_name=name,
                    ok=False,
                    reason=human_reason(exc),
                )
            )
            await self._admin_failure(ctx, "Rename failed", exc)
            return
        log.info(
            LogTemplates.rename(
                user=user_label(ctx.guild, ctx.author.id), role_id=role_id, new_name=name, ok=True
            )
        )
        await acknowledge(ctx.message, True)

    @commands.command(name="check", aliases=["reconcile"], hidden=True, help="Compare public roles with the server.")
    @commands.guild_only()
    async def check_cmd(self, ctx: commands.Context) -> None:
        try:
            report = await self.admin.reconcile(
                self._caller(ctx), ctx.guild.id, channel_name=_channel_name(ctx)
            )
        except RoleGatewayError as exc:
            await self._admin_failure(ctx, "Reconciliation failed", exc)
            return
        log.info(
            LogTemplates.reconcile(
                guild=guild_label(ctx.guild), checked=len(report.entries), missing=report.missing
            )
        )
        await acknowledge(ctx.message, report.all_found)
        await ctx.reply(embed=reconcile_embed(self.settings, report), mention_author=False)


async def add_roles_cog(
    bot: commands.Bot,
    settings: Settings,
    *,
    remote: RemoteDirectory | None = None,
) -> RolesCog:
    cog = RolesCog.from_settings(bot, settings, remote=remote)
    await bot.add_cog(cog)
    return cog


__all__ = ["HomeChannelOnly", "RolesCog", "add_roles_cog"]
