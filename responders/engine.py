"""
Reaction feature - lifecycle and message filter.

This module ties together the rule store, matching, delivery and the admin
handlers, and plugs them into the host bot.
"""
from __future__ import annotations

import logging
from typing import Any

import discord

from bot.feature import Feature
from core.storage import ReactionDatabase

from .delivery import ReactionDispatcher
from .gateway import ReactionApiHandlers
from .matching import build_context, find_matching_rules, should_ignore
from .store import RuleStore

logger = logging.getLogger("reactbot.reactions")


class ReactionManager(Feature):
    """
    Reacts to chat messages according to stored reaction rules.

    Collaborators are passed in:
    - messenger: registers/unregisters message filters (the bot client)
    - api: registers/unregisters admin operations
    - db: the reactions row store
    """

    name = "reactions"

    def __init__(
        self,
        messenger: Any,
        api: Any,
        db: ReactionDatabase,
        raw_keyword_patterns: bool = False,
    ) -> None:
        super().__init__()
        self.messenger = messenger
        self.api = api
        self.store = RuleStore(db)
        self.dispatcher = ReactionDispatcher(messenger)
        self.handlers = ReactionApiHandlers(self.store)
        self.raw_keyword_patterns = raw_keyword_patterns

    def enable(self) -> None:
        """Load every rule, then register routes and the message filter. Raises LoadError."""
        count = self.store.reload_all()
        logger.info("Reactions enabled with %s rules", count)

        for op, handler in self.handlers.routes().items():
            self.api.register_api(op, handler)
        self.messenger.register_filter(self.handle_message)
        self.is_enabled = True

    def disable(self) -> None:
        for op, handler in self.handlers.routes().items():
            self.api.unregister_api(op, handler)
        self.messenger.unregister_filter(self.handle_message)

        # Clear memory
        self.store.clear()
        self.is_enabled = False

    async def handle_message(self, client: discord.Client, message: discord.Message) -> int:
        """
        Message filter entry point.

        Returns the number of rules dispatched.
        """
        if should_ignore(message):
            return 0

        context = build_context(message, client.user)
        matches = find_matching_rules(context, self.store.list(), self.raw_keyword_patterns)
        for rule in matches:
            self.dispatcher.dispatch(message, rule)
        return len(matches)
