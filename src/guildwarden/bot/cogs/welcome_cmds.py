"""
Welcome cog: configure and test per-guild welcome messages.

Commands:
- /welcome enable|disable|message|appearance|rules|mention|preview|status
- /testwelcome [target]

Every command requires the Manage Server permission and answers ephemerally.
"""

import discord
from discord import Option
from discord.ext import commands

from guildwarden.datatypes.discord_datatypes import ChannelID, GuildID, user_tag
from guildwarden.ui.welcome_embed import build_preview_embed, build_status_embed
from guildwarden.util.logger import get_logger
from guildwarden.welcome.welcome_delivery import deliver_welcome
from guildwarden.welcome.welcome_settings import WelcomeSettingsStore, is_hex_color

logger = get_logger("welcome_cog")

NOT_ENABLED = "Welcome system is not enabled! Use `/welcome enable` first."
MANAGE_GUILD = discord.Permissions(manage_guild=True)


class WelcomeCog(commands.Cog):
    """Slash commands backed by a shared :class:`WelcomeSettingsStore`."""

    welcome = discord.SlashCommandGroup(
        "welcome",
        "Manage the server welcome system",
        default_member_permissions=MANAGE_GUILD,
    )

    def __init__(self, discord_bot_instance, store: WelcomeSettingsStore):
        self.discord_bot_instance = discord_bot_instance
        self.store = store
        logger.info("Welcome cog loaded")

    async def _ensure_guild_context(self, ctx: discord.ApplicationContext) -> bool:
        if ctx.guild is None:
            await ctx.respond("This command can only be used in a server!", ephemeral=True)
            return False
        return True

    @welcome.command(name="enable", description="Enable welcome messages")
    async def enable(
        self,
        ctx: discord.ApplicationContext,
        channel: Option(discord.TextChannel, "Channel to send welcome messages to", required=True),  # type: ignore
    ):
        if not await self._ensure_guild_context(ctx):
            return
        self.store.enable(GuildID.from_guild(ctx.guild), ChannelID.from_channel(channel))
        logger.info("[WELCOME] Enabled in guild %s, channel %s", ctx.guild.id, channel.id)
        await ctx.respond(
            f"Welcome system enabled! Welcome messages will be sent to {channel.mention}.",
            ephemeral=True,
        )

    @welcome.command(name="disable", description="Disable welcome messages")
    async def disable(self, ctx: discord.ApplicationContext):
        if not await self._ensure_guild_context(ctx):
            return
        self.store.disable(GuildID.from_guild(ctx.guild))
        await ctx.respond("Welcome system disabled.", ephemeral=True)

    @welcome.command(name="message", description="Set the welcome message text")
    async def message(
        self,
        ctx: discord.ApplicationContext,
        text: Option(
            str,
            "Welcome message text (you can use {user}, {username}, {tag}, {server}, {memberCount})",
            required=True,
        ),  # type: ignore
    ):
        if not await self._ensure_guild_context(ctx):
            return
        self.store.set_message(GuildID.from_guild(ctx.guild), text)
        await ctx.respond("Welcome message updated!", ephemeral=True)

    @welcome.command(name="appearance", description="Customize the welcome embed appearance")
    async def appearance(
        self,
        ctx: discord.ApplicationContext,
        title: Option(str, "Embed title", required=False, default=None),  # type: ignore
        color: Option(str, "Embed color (hex code, e.g. #0099ff)", required=False, default=None),  # type: ignore
        footer: Option(str, "Footer text", required=False, default=None),  # type: ignore
        image: Option(str, "URL of an image to include in the embed", required=False, default=None),  # type: ignore
    ):
        if not await self._ensure_guild_context(ctx):
            return
        if color and not is_hex_color(color):
            await ctx.respond("Please provide a valid hex color code (e.g. #0099ff).", ephemeral=True)
            return
        self.store.set_appearance(GuildID.from_guild(ctx.guild), title or None, color or None, footer or None, image or None)
        await ctx.respond("Welcome message appearance updated!", ephemeral=True)

    @welcome.command(name="rules", description="Configure rules information in welcome messages")
    async def rules(
        self,
        ctx: discord.ApplicationContext,
        show: Option(bool, "Whether to show rules info in welcome messages", required=True),  # type: ignore
        channel: Option(discord.TextChannel, "Rules channel to reference", required=False, default=None),  # type: ignore
    ):
        if not await self._ensure_guild_context(ctx):
            return
        if show and channel is None:
            await ctx.respond("Please specify a rules channel!", ephemeral=True)
            return
        self.store.set_rules_channel(GuildID.from_guild(ctx.guild), show, ChannelID.from_channel(channel) if channel else None)
        if show:
            await ctx.respond(
                f"Welcome messages will now include a reference to the rules in {channel.mention}.",
                ephemeral=True,
            )
        else:
            await ctx.respond("Welcome messages will no longer include rules information.", ephemeral=True)

    @welcome.command(name="mention", description="Configure user mention in welcome messages")
    async def mention(
        self,
        ctx: discord.ApplicationContext,
        enabled: Option(bool, "Whether to mention new users in welcome messages", required=True),  # type: ignore
    ):
        if not await self._ensure_guild_context(ctx):
            return
        self.store.set_mention(GuildID.from_guild(ctx.guild), enabled)
        if enabled:
            await ctx.respond("New users will now be mentioned in welcome messages.", ephemeral=True)
        else:
            await ctx.respond("New users will no longer be mentioned in welcome messages.", ephemeral=True)

    @welcome.command(name="preview", description="Preview the welcome message")
    async def preview(self, ctx: discord.ApplicationContext):
        if not await self._ensure_guild_context(ctx):
            return
        settings = self.store.get(GuildID.from_guild(ctx.guild))
        if settings is None or not settings.enabled:
            await ctx.respond(NOT_ENABLED, ephemeral=True)
            return

        channel = ctx.guild.get_channel(settings.channel_id.to_int()) if settings.channel_id else None
        if channel is None:
            await ctx.respond(
                "Welcome channel not found! Please reconfigure with `/welcome enable`.",
                ephemeral=True,
            )
            return

        content = f"**Preview of welcome message in {channel.mention}**"
        if settings.mention_user:
            content += f"\nUser would be mentioned: {ctx.author.mention}"
        await ctx.respond(content, embed=build_preview_embed(settings, ctx.author, ctx.guild), ephemeral=True)

    @welcome.command(name="status", description="Check welcome system status")
    async def status(self, ctx: discord.ApplicationContext):
        if not await self._ensure_guild_context(ctx):
            return
        settings = self.store.get(GuildID.from_guild(ctx.guild))
        if settings is None:
            await ctx.respond("Welcome system has not been configured for this server.", ephemeral=True)
            return
        await ctx.respond(embed=build_status_embed(settings), ephemeral=True)

    @commands.slash_command(
        name="testwelcome",
        description="Test the welcome message system with a simulated join",
        default_member_permissions=MANAGE_GUILD,
    )
    async def testwelcome(
        self,
        ctx: discord.ApplicationContext,
        target: Option(discord.User, "User to simulate joining (defaults to you)", required=False, default=None),  # type: ignore
    ):
        if not await self._ensure_guild_context(ctx):
            return
        settings = self.store.get(GuildID.from_guild(ctx.guild))
        if settings is None or not settings.enabled:
            await ctx.respond(NOT_ENABLED, ephemeral=True)
            return

        user = target or ctx.author
        member = ctx.guild.get_member(user.id)
        if member is None:
            await ctx.respond("Could not find that user in this server!", ephemeral=True)
            return

        await ctx.defer(ephemeral=True)
        outcome = await deliver_welcome(self.store, member)
        if outcome.success:
            await ctx.send_followup(
                f"Welcome message test completed for {user_tag(member)}! Check the welcome channel.",
                ephemeral=True,
            )
        else:
            await ctx.send_followup(
                f"An error occurred while testing the welcome message: {outcome.detail}",
                ephemeral=True,
            )


def setup(discord_bot_instance, store: WelcomeSettingsStore):
    discord_bot_instance.add_cog(WelcomeCog(discord_bot_instance, store))
