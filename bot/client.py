"""
Discord bot client - lean event handling and feature hosting.

Business logic lives in features; the client only owns the message filter
registry, the admin transport and the feature lifecycle.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import discord

from core.errors import LoadError

from .feature import Feature

logger = logging.getLogger("reactbot")

MessageFilter = Callable[[discord.Client, discord.Message], Awaitable[Any]]


class ReactBot(discord.Client):
    """
    Main Discord bot client.

    Handles:
    - Discord events (on_ready, on_message)
    - Message filter registration
    - Feature enable/disable

    Message handling is delegated to registered filters.
    """

    def __init__(self, api: Any, web_server: Any = None) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        super().__init__(intents=intents)

        self.api = api
        self.web_server = web_server
        self.features: list[Feature] = []
        self.filters: list[MessageFilter] = []
        self._filter_tasks: set[asyncio.Task] = set()
        self.ready_once = False

    # ─── Filters ──────────────────────────────────────────────────────────────

    def register_filter(self, message_filter: MessageFilter) -> None:
        if message_filter not in self.filters:
            self.filters.append(message_filter)

    def unregister_filter(self, message_filter: MessageFilter) -> None:
        if message_filter in self.filters:
            self.filters.remove(message_filter)

    # ─── Features ─────────────────────────────────────────────────────────────

    def add_feature(self, feature: Feature) -> None:
        self.features.append(feature)

    def enable_features(self) -> None:
        """Enable every feature; one failing to load does not stop the others."""
        for feature in self.features:
            if feature.is_enabled:
                continue
            try:
                feature.enable()
            except LoadError as exc:
                logger.error("Feature %s not ready: %s", feature.name, exc)

    def disable_features(self) -> None:
        for feature in self.features:
            if not feature.is_enabled:
                continue
            try:
                feature.disable()
            except Exception as e:
                logger.error("Failed to disable feature %s: %s", feature.name, e)

    # ─── Lifecycle ────────────────────────────────────────────────────────────

    async def setup_hook(self) -> None:
        """Called when the bot is starting up."""
        if self.web_server is not None:
            await self.web_server.start()

    async def on_ready(self) -> None:
        """Called when the bot is ready."""
        if not self.ready_once:
            logger.info("Bot ready as %s", self.user)
            self.ready_once = True
            self.enable_features()

    async def close(self) -> None:
        """Cleanup when shutting down."""
        self.disable_features()
        if self.web_server is not None:
            await self.web_server.stop()
        await super().close()

    # ─── Message Events ───────────────────────────────────────────────────────

    async def on_message(self, message: discord.Message) -> None:
        """Hand the message to every registered filter, each in its own task."""
        for message_filter in list(self.filters):
            task = asyncio.create_task(self._safe_filter(message_filter, message))
            self._filter_tasks.add(task)
            task.add_done_callback(self._filter_tasks.discard)

    async def _safe_filter(self, message_filter: MessageFilter, message: discord.Message) -> None:
        try:
            await message_filter(self, message)
        except Exception as e:
            logger.error("Message filter error for message %s: %s", message.id, e)
