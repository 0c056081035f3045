"""
Guildwarden Discord Bot
=======================

A Discord bot providing manual moderation (kick, ban, timeout, warnings),
per-server welcome messages, utility information, and a few games.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. GUILDWARDEN_HOME environment variable, if set.
    2. If running in a frozen/compiled context (e.g., PyInstaller, Nuitka), use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("GUILDWARDEN_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from guildwarden.configuration.app_configuration import app_config
from guildwarden.moderation.moderation_dispatcher import ModerationDispatcher
from guildwarden.moderation.moderation_logger import ModerationLogger
from guildwarden.moderation.warning_store import WarningStore
from guildwarden.util.logger import get_logger, handle_exception
from guildwarden.welcome.welcome_settings import WelcomeSettingsStore


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Returns
    -------
    str
        Discord bot token extracted from the loaded environment.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Intents for member joins, role data and message reactions (polls)."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.members = True
    intents.reactions = True
    return intents


def build_dispatcher(warning_store: WarningStore) -> ModerationDispatcher:
    """Wire the moderation dispatcher with the configured log channel and limits."""
    return ModerationDispatcher(
        warning_store,
        ModerationLogger(app_config.mod_log_channel),
        max_timeout_days=app_config.max_timeout_days,
        default_reason=app_config.default_reason,
    )


def load_cogs(
    discord_bot_instance: discord.Bot,
    dispatcher: ModerationDispatcher,
    welcome_store: WelcomeSettingsStore,
) -> None:
    """Register all cogs with the provided Discord bot instance."""
    from guildwarden.bot.cogs import events_listener, fun_cmds, moderation_cmds, utility_cmds, welcome_cmds

    events_listener.setup(discord_bot_instance, welcome_store)
    moderation_cmds.setup(discord_bot_instance, dispatcher)
    welcome_cmds.setup(discord_bot_instance, welcome_store)
    utility_cmds.setup(discord_bot_instance)
    fun_cmds.setup(discord_bot_instance)

    logger.info("All cogs loaded successfully.")


def create_bot() -> discord.Bot:
    """Instantiate the bot, build the shared stores, and register all cogs."""
    bot = discord.Bot(intents=build_intents())
    warning_store = WarningStore()
    welcome_store = WelcomeSettingsStore(app_config.welcome_defaults)
    load_cogs(bot, build_dispatcher(warning_store), welcome_store)
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Start the Discord bot and log around the connection lifetime."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None = None) -> None:
    """Close the Discord connection if it is still open."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord client: %s", exc)
    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the bot and run it until disconnect, returning an exit code."""
    token = load_environment()

    try:
        bot = create_bot()
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        return 1

    exit_code = 0
    try:
        await start_bot(bot, token)
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the bot token: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    logger.info("Starting Guildwarden…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
