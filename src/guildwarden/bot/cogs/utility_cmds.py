"""
Utility cog: information commands and role management.

Commands: /ping, /avatar, /servericon, /server, /user, /role add|remove, /help.
"""

import datetime
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

import discord
from discord import Option, OptionChoice
from discord.ext import commands

from guildwarden.datatypes.discord_datatypes import user_tag
from guildwarden.moderation.permission_guard import highest_role_position
from guildwarden.util.logger import get_logger

logger = get_logger("utility_cog")

INFO_COLOR = discord.Color(0x0099FF)
DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class HelpEntry:
    name: str
    description: str
    usage: Optional[str] = None
    examples: Tuple[str, ...] = ()


@dataclass(frozen=True)
class HelpCategory:
    name: str
    emoji: str
    description: str
    commands: Tuple[HelpEntry, ...] = field(default_factory=tuple)


HELP_CATEGORIES: Tuple[HelpCategory, ...] = (
    HelpCategory(
        "Moderation",
        "🛡️",
        "Keep the server in order",
        (
            HelpEntry("kick", "Kick a user from the server", "/mod kick <target> [reason]"),
            HelpEntry("ban", "Ban a user and optionally delete their recent messages", "/mod ban <target> [reason] [delete_messages]"),
            HelpEntry("unban", "Unban a user by ID", "/mod unban <user_id> [reason]"),
            HelpEntry("timeout", "Timeout a user for up to 28 days", "/mod timeout <target> <duration> [reason]", ("/mod timeout @user 30m", "/mod timeout @user 1d spamming")),
            HelpEntry("remove_timeout", "Lift an active timeout", "/mod remove_timeout <target> [reason]"),
            HelpEntry("warn", "Warn a user; they receive a DM", "/mod warn <target> <reason>"),
            HelpEntry("warnings", "List a user's warnings", "/mod warnings <target>"),
        ),
    ),
    HelpCategory(
        "Welcome",
        "👋",
        "Greet new members",
        (
            HelpEntry("welcome", "Configure welcome messages", "/welcome <enable|disable|message|appearance|rules|mention|preview|status>"),
            HelpEntry("testwelcome", "Simulate a member joining", "/testwelcome [target]"),
        ),
    ),
    HelpCategory(
        "Utility",
        "🛠️",
        "Utility and information commands",
        (
            HelpEntry("help", "Show this help message", "/help [category]", ("/help", "/help moderation")),
            HelpEntry("ping", "Check the bot's latency", "/ping"),
            HelpEntry("avatar", "Show a user's avatar", "/avatar [target]"),
            HelpEntry("servericon", "Show the server icon", "/servericon"),
            HelpEntry("server", "Display information about the server", "/server"),
            HelpEntry("user", "Display information about a user", "/user [target]"),
            HelpEntry("role", "Add or remove a role from a user", "/role <add|remove> <target> <role>"),
        ),
    ),
    HelpCategory(
        "Fun",
        "🎮",
        "Fun and entertainment commands",
        (
            HelpEntry("8ball", "Ask the magic 8-ball a question", "/8ball <question>", ("/8ball Will I win the lottery?",)),
            HelpEntry("coinflip", "Flip a coin", "/coinflip [times]", ("/coinflip", "/coinflip 10")),
            HelpEntry("dice", "Roll one or more dice", "/dice [sides] [count] [sum]", ("/dice", "/dice 20", "/dice 6 4")),
            HelpEntry("rps", "Play rock, paper, scissors", "/rps <choice>"),
            HelpEntry("poll", "Create a reaction poll", "/poll <question> <options> [duration]", ("/poll Pizza? yes,no",)),
        ),
    ),
)

HELP_NOTES = "\n".join(
    (
        "```",
        "[] = Optional parameter",
        "<> = Required parameter",
        "Use /help <category> for detailed command information",
        "```",
    )
)


def find_help_category(name: str) -> Optional[HelpCategory]:
    return next((category for category in HELP_CATEGORIES if category.name.lower() == name.lower()), None)


def build_help_embed(category: Optional[HelpCategory]) -> discord.Embed:
    """Overview of every category, or the full command list of one category."""
    embed = discord.Embed(color=INFO_COLOR, timestamp=datetime.datetime.now(datetime.timezone.utc))
    if category is None:
        embed.title = "📚 Help Menu"
        embed.description = "Here are all available command categories. Use `/help [category]` to see specific commands."
        for entry in HELP_CATEGORIES:
            embed.add_field(
                name=f"{entry.emoji} {entry.name}",
                value=(
                    f"{entry.description}\nCommands: `{len(entry.commands)}`\n"
                    f"Use `/help {entry.name.lower()}` for details"
                ),
                inline=False,
            )
    else:
        embed.title = f"{category.emoji} {category.name} Commands"
        embed.description = category.description
        for command in category.commands:
            value = command.description
            if command.usage:
                value += f"\n**Usage:** `{command.usage}`"
            if command.examples:
                value += "\n**Examples:**\n" + "\n".join(f"`{example}`" for example in command.examples)
            embed.add_field(name=command.name, value=value, inline=False)

    embed.add_field(name="❔ Help Notes", value=HELP_NOTES, inline=False)
    return embed


def check_role_change(role: Any, actor: Any, bot_member: Any) -> Optional[str]:
    """Return why ``role`` cannot be assigned by ``actor`` through the bot, or None."""
    if getattr(role, "managed", False):
        return "I cannot manage that role as it's integrated with a service."
    if bot_member is None or role.position >= highest_role_position(bot_member):
        return "I cannot manage that role as it's higher than or equal to my highest role."
    if role.position >= highest_role_position(actor):
        return "You cannot manage this role as it's higher than or equal to your highest role."
    return None


def _requested_by(embed: discord.Embed, user) -> None:
    embed.set_footer(text=f"Requested by {user_tag(user)}", icon_url=user.display_avatar.url)


class UtilityCog(commands.Cog):
    """Information and housekeeping commands."""

    role = discord.SlashCommandGroup(
        "role",
        "Add or remove a role from a user",
        default_member_permissions=discord.Permissions(manage_roles=True),
    )

    def __init__(self, discord_bot_instance):
        self.discord_bot_instance = discord_bot_instance
        logger.info("Utility cog loaded")

    @commands.slash_command(name="ping", description="Replies with Pong!")
    async def ping(self, ctx: discord.ApplicationContext):
        interaction = await ctx.respond("Pinging...")
        message = await interaction.original_response()
        latency_ms = round((message.created_at - ctx.interaction.created_at).total_seconds() * 1000)
        api_latency_ms = round(self.discord_bot_instance.latency * 1000)
        await ctx.edit(content=f"Pong! 🏓\nLatency: {latency_ms}ms\nAPI Latency: {api_latency_ms}ms")

    @commands.slash_command(name="avatar", description="Get the avatar URL of the selected user, or your own avatar.")
    async def avatar(
        self,
        ctx: discord.ApplicationContext,
        target: Option(discord.User, "The user's avatar to show", required=False, default=None),  # type: ignore
    ):
        user = target or ctx.author
        embed = discord.Embed(
            title=f"{user.name}'s Avatar",
            color=INFO_COLOR,
            timestamp=datetime.datetime.now(datetime.timezone.utc),
        )
        embed.set_image(url=user.display_avatar.with_size(1024).url)
        _requested_by(embed, ctx.author)
        await ctx.respond(embed=embed)

    @commands.slash_command(name="servericon", description="Display the server's icon.")
    async def servericon(self, ctx: discord.ApplicationContext):
        if ctx.guild is None:
            await ctx.respond("This command can only be used in a server!", ephemeral=True)
            return
        if ctx.guild.icon is None:
            await ctx.respond("This server has no icon!", ephemeral=True)
            return
        embed = discord.Embed(
            title=f"{ctx.guild.name}'s Icon",
            color=INFO_COLOR,
            timestamp=datetime.datetime.now(datetime.timezone.utc),
        )
        embed.set_image(url=ctx.guild.icon.with_size(1024).url)
        _requested_by(embed, ctx.author)
        await ctx.respond(embed=embed)

    @commands.slash_command(name="server", description="Display information about the server.")
    async def server(self, ctx: discord.ApplicationContext):
        guild = ctx.guild
        if guild is None:
            await ctx.respond("This command can only be used in a server!")
            return
        embed = discord.Embed(title=guild.name, color=INFO_COLOR, timestamp=datetime.datetime.now(datetime.timezone.utc))
        if guild.icon:
            embed.set_thumbnail(url=guild.icon.url)
        embed.add_field(name="Total Members", value=str(guild.member_count), inline=True)
        embed.add_field(name="Created At", value=guild.created_at.strftime(DATE_FORMAT), inline=True)
        embed.add_field(name="Server ID", value=str(guild.id), inline=True)
        embed.add_field(name="Owner", value=f"<@{guild.owner_id}>", inline=True)
        embed.add_field(name="Boost Level", value=str(guild.premium_tier), inline=True)
        embed.add_field(name="Boost Count", value=str(guild.premium_subscription_count or 0), inline=True)
        await ctx.respond(embed=embed)

    @commands.slash_command(name="user", description="Display information about a user.")
    async def user(
        self,
        ctx: discord.ApplicationContext,
        target: Option(discord.User, "The user to get information about", required=False, default=None),  # type: ignore
    ):
        user = target or ctx.author
        member = ctx.guild.get_member(user.id) if ctx.guild else None

        embed = discord.Embed(title=f"User Information - {user.name}", color=INFO_COLOR)
        embed.set_thumbnail(url=user.display_avatar.url)
        embed.add_field(name="Username", value=user.name, inline=True)
        embed.add_field(name="User ID", value=str(user.id), inline=True)
        embed.add_field(name="Account Created", value=user.created_at.strftime(DATE_FORMAT), inline=True)
        embed.add_field(name="Is Bot", value="Yes" if user.bot else "No", inline=True)

        if member is not None:
            roles: List[str] = [role.name for role in member.roles if not role.is_default()]
            embed.add_field(
                name="Joined Server",
                value=member.joined_at.strftime(DATE_FORMAT) if member.joined_at else "Unknown",
                inline=True,
            )
            embed.add_field(name="Nickname", value=member.nick or "None", inline=True)
            embed.add_field(name="Roles", value=", ".join(roles) or "None", inline=False)

        embed.timestamp = datetime.datetime.now(datetime.timezone.utc)
        await ctx.respond(embed=embed)

    async def _change_role(self, ctx: discord.ApplicationContext, target: discord.Member, role: discord.Role, add: bool):
        if ctx.guild is None:
            await ctx.respond("This command can only be used in a server!", ephemeral=True)
            return

        refusal = check_role_change(role, ctx.author, ctx.guild.me)
        if refusal:
            await ctx.respond(refusal, ephemeral=True)
            return

        has_role = target.get_role(role.id) is not None
        if add and has_role:
            await ctx.respond(f"{target.mention} already has the {role.mention} role.", ephemeral=True)
            return
        if not add and not has_role:
            await ctx.respond(f"{target.mention} doesn't have the {role.mention} role.", ephemeral=True)
            return

        reason = f"Requested by {user_tag(ctx.author)}"
        try:
            if add:
                await target.add_roles(role, reason=reason)
            else:
                await target.remove_roles(role, reason=reason)
        except discord.HTTPException as exc:
            logger.error("[ROLE] Failed to %s role %s for %s: %s", "add" if add else "remove", role.id, target.id, exc)
            await ctx.respond("There was an error executing this command!", ephemeral=True)
            return

        if add:
            await ctx.respond(f"Successfully added the {role.mention} role to {target.mention}", ephemeral=True)
        else:
            await ctx.respond(f"Successfully removed the {role.mention} role from {target.mention}", ephemeral=True)

    @role.command(name="add", description="Add a role to a user")
    async def role_add(
        self,
        ctx: discord.ApplicationContext,
        target: Option(discord.Member, "The user to add the role to", required=True),  # type: ignore
        role: Option(discord.Role, "The role to add", required=True),  # type: ignore
    ):
        await self._change_role(ctx, target, role, add=True)

    @role.command(name="remove", description="Remove a role from a user")
    async def role_remove(
        self,
        ctx: discord.ApplicationContext,
        target: Option(discord.Member, "The user to remove the role from", required=True),  # type: ignore
        role: Option(discord.Role, "The role to remove", required=True),  # type: ignore
    ):
        await self._change_role(ctx, target, role, add=False)

    @commands.slash_command(name="help", description="Shows all available commands.")
    async def help(
        self,
        ctx: discord.ApplicationContext,
        category: Option(
            str,
            "Specific command category to show",
            choices=[OptionChoice(f"{entry.emoji} {entry.name}", entry.name.lower()) for entry in HELP_CATEGORIES],
            required=False,
            default=None,
        ),  # type: ignore
    ):
        selected = None
        if category:
            selected = find_help_category(category)
            if selected is None:
                await ctx.respond("❌ | Invalid category selected!", ephemeral=True)
                return

        embed = build_help_embed(selected)
        if self.discord_bot_instance.user:
            embed.set_thumbnail(url=self.discord_bot_instance.user.display_avatar.url)
        _requested_by(embed, ctx.author)
        await ctx.respond(embed=embed, ephemeral=True)


def setup(discord_bot_instance):
    discord_bot_instance.add_cog(UtilityCog(discord_bot_instance))
