"""
Reaction delivery.

Every side effect of a matched rule (one per emote token, one for the text
response) runs as its own task with its own error sink. Nothing here awaits
those tasks or lets their failures reach the caller.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import discord

from core.errors import DeliveryError, ResolutionError
from core.types import ReactionRule
from .matching import is_direct_message

logger = logging.getLogger("reactbot.reactions")


def is_custom_emote(token: str) -> bool:
    """Custom server emotes are written as :name:."""
    return token.startswith(":") and token.endswith(":")


def build_response_text(message: discord.Message, rule: ReactionRule) -> Optional[str]:
    """Response text, prefixed with an author mention when asked for outside DMs."""
    if not rule.response:
        return None
    if rule.do_mention and not is_direct_message(message.channel):
        return f"{message.author.mention} {rule.response}"
    return rule.response


class ReactionDispatcher:
    """Performs the configured side effects for matched rules."""

    def __init__(self, client: Any) -> None:
        self.client = client
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait for every in-flight side effect."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def resolve_emote(self, message: discord.Message, name: str) -> Optional[discord.Emoji]:
        """Look a custom emote up by name, server first, then everything the bot can see."""
        if not name:
            return None
        guild = message.guild
        if guild is not None:
            emoji = discord.utils.get(guild.emojis, name=name)
            if emoji is not None:
                return emoji
        return discord.utils.get(self.client.emojis, name=name)

    def dispatch(self, message: discord.Message, rule: ReactionRule) -> list[asyncio.Task]:
        """Start every side effect of a rule and return without waiting."""
        tasks: list[asyncio.Task] = []

        # Emote reactions, several allowed separated by spaces
        for token in rule.emote_tokens:
            if is_custom_emote(token):
                emoji = self.resolve_emote(message, token[1:-1])
                if emoji is None:
                    self._report(ResolutionError(
                        f"Could not react, unable to resolve Discord emote `{token}`.",
                        effect=f"react {token}",
                    ))
                    continue
                tasks.append(self._spawn(
                    f"react with resolved Discord emote `{token}` <{emoji.id}>",
                    message.add_reaction,
                    emoji,
                ))
            else:
                # Probably a unicode emoji
                tasks.append(self._spawn(f"react with emote `{token}`", message.add_reaction, token))

        content = build_response_text(message, rule)
        if content:
            logger.debug("`%s` >>> `%s`", message.clean_content, content)
            tasks.append(self._spawn(
                f"respond with message `{content}`",
                message.channel.send,
                content,
                allowed_mentions=discord.AllowedMentions(everyone=False),
            ))

        return tasks

    def _spawn(self, effect: str, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> asyncio.Task:
        async def _run() -> Any:
            return await func(*args, **kwargs)

        task = asyncio.create_task(_run())
        self._tasks.add(task)

        def _done(finished: asyncio.Task) -> None:
            self._tasks.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None:
                self._report(DeliveryError(f"Could not {effect}: {exc}", effect=effect))

        task.add_done_callback(_done)
        return task

    @staticmethod
    def _report(error: DeliveryError) -> None:
        logger.warning("%s", error)
