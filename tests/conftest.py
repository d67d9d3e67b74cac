"""
Pytest configuration and fixtures for reactbot tests.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

# Add the repo root to the path so the top-level packages import
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.storage import ReactionDatabase  # noqa: E402
from responders.store import RuleStore  # noqa: E402

BOT_USER_ID = 999
AUTHOR_ID = 42


class FakeConnection:
    """Stands in for an admin websocket connection."""

    def __init__(self):
        self.sent = []

    async def send(self, text):
        self.sent.append(text)


def make_emoji(name, emoji_id):
    emoji = MagicMock()
    emoji.name = name
    emoji.id = emoji_id
    return emoji


def make_message(text, *, direct=False, mention_bot=False, bot_author=False, system=False, emojis=()):
    """Build a Discord message double with async side-effect methods."""
    message = MagicMock()
    message.id = 1234
    message.clean_content = text
    message.author.bot = bot_author
    message.author.id = AUTHOR_ID
    message.author.mention = f"<@{AUTHOR_ID}>"
    message.is_system.return_value = system
    message.channel.type = discord.ChannelType.private if direct else discord.ChannelType.text
    message.channel.send = AsyncMock()
    message.add_reaction = AsyncMock()
    message.guild = None if direct else MagicMock()
    if message.guild is not None:
        message.guild.emojis = list(emojis)

    bot_user = MagicMock()
    bot_user.id = BOT_USER_ID
    message.mentions = [bot_user] if mention_bot else []
    return message


@pytest.fixture
def client():
    client = MagicMock()
    client.user.id = BOT_USER_ID
    client.emojis = []
    return client


@pytest.fixture
def db():
    database = ReactionDatabase(":memory:")
    database.open()
    yield database
    database.close()


@pytest.fixture
def store(db):
    return RuleStore(db)


@pytest.fixture
def connection():
    return FakeConnection()
