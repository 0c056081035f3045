"""Event listener cog: bot lifecycle, member joins and command error handling."""

import discord
from discord.ext import commands

from guildwarden.configuration.app_configuration import app_config
from guildwarden.util.logger import get_logger
from guildwarden.welcome.welcome_delivery import deliver_welcome
from guildwarden.welcome.welcome_settings import WelcomeSettingsStore

logger = get_logger("events_listener_cog")

COMMAND_ERROR_MESSAGE = "A :bug: showed up while running this command."


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle, welcome, and command error handlers."""

    def __init__(self, discord_bot_instance, welcome_store: WelcomeSettingsStore):
        """Initialize the events listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        welcome_store:
            Shared welcome settings consulted on every member join.
        """
        self.bot = discord_bot_instance
        self.welcome_store = welcome_store
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self):
        """Set the presence and log the connected identity."""
        if self.bot.user:
            await self.bot.change_presence(
                status=discord.Status.online,
                activity=discord.Activity(type=discord.ActivityType.watching, name=app_config.presence_text),
            )
            logger.info(f"Bot connected as {self.bot.user} (ID: {self.bot.user.id})")
        else:
            logger.warning("Bot partially connected, but user information not yet available.")

        logger.info("--==--==--==--==--==--==--==--==--==--==--==--==--==--==--==--==--")

    @commands.Cog.listener(name="on_member_join")
    async def on_member_join(self, member: discord.Member):
        await deliver_welcome(self.welcome_store, member)

    @commands.Cog.listener(name="on_application_command_error")
    async def on_application_command_error(self, application_context: discord.ApplicationContext, error: Exception):
        """Log the failure and answer the user with a generic message.

        Parameters
        ----------
        application_context:
            The command invocation context.
        error:
            The exception raised during command execution.
        """
        if isinstance(error, commands.CommandNotFound):
            return

        command_name = getattr(application_context.command, "name", "<unknown>")
        logger.error(f"Error in command '{command_name}': {error}", exc_info=error)

        try:
            await application_context.respond(COMMAND_ERROR_MESSAGE, ephemeral=True)
        except discord.InteractionResponded:
            await application_context.followup.send(COMMAND_ERROR_MESSAGE, ephemeral=True)


def setup(discord_bot_instance, welcome_store: WelcomeSettingsStore):
    """Register the EventsListenerCog with the bot."""
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, welcome_store))
