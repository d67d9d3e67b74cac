"""
Main entry point for the Discord bot.

Loads configuration from environment and starts the bot.
"""
from __future__ import annotations

import asyncio
import logging
import sqlite3
from pathlib import Path

from dotenv import load_dotenv
from discord.errors import LoginFailure, PrivilegedIntentsRequired

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

# Import after .env is loaded so config reads the final environment.
from bot import ReactBot
from core.config import BotConfig, ConfigError, load_config
from core.storage import ReactionDatabase
from responders import ReactionManager
from web import ApiRegistry, WebServer

logger = logging.getLogger("reactbot")


def setup_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)
    logging.getLogger("discord").setLevel(level)

    # Suppress verbose third-party library logs unless LOG_LEVEL is DEBUG
    if level_name.upper() != "DEBUG":
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
        logging.getLogger("discord.gateway").setLevel(logging.WARNING)


def build_bot(config: BotConfig) -> tuple[ReactBot, ReactionDatabase]:
    """Wire the database, admin transport and reaction feature into a client."""
    db = ReactionDatabase(config.db_path)
    try:
        db.open()
    except (sqlite3.Error, OSError) as exc:
        # The reaction feature reports the failure when it tries to load
        logger.error("Could not open reaction database %s: %s", config.db_path, exc)

    api = ApiRegistry()
    web_server = WebServer(api, config.admin_host, config.admin_port, config.admin_token)
    bot = ReactBot(api, web_server)
    bot.add_feature(ReactionManager(
        bot,
        api,
        db,
        raw_keyword_patterns=config.raw_keyword_patterns,
    ))
    return bot, db


async def main() -> None:
    try:
        config = load_config()
    except ConfigError as exc:
        logging.basicConfig()
        logger.error("Invalid configuration: %s", exc)
        return

    setup_logging(config.log_level)

    # Debug: show if .env was found
    if not env_path.exists():
        logger.warning(".env file not found at %s", env_path)

    if not config.token:
        logger.error("Missing bot token. Set DISCORD_BOT_TOKEN in .env or environment.")
        return

    bot, db = build_bot(config)
    try:
        await bot.start(config.token)
    except PrivilegedIntentsRequired:
        logger.error(
            "Privileged intents required. Enable the MESSAGE CONTENT intent "
            "in the Discord developer portal."
        )
    except LoginFailure:
        logger.error(
            "Token is invalid. Reset it in the Discord developer portal and update "
            "DISCORD_BOT_TOKEN in your .env file."
        )
    finally:
        if not bot.is_closed():
            await bot.close()
        db.close()


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
