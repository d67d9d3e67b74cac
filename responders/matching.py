"""
Rule matching logic for reactions.

Everything here is pure: no I/O, no state beyond a compiled-pattern cache.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Any, Iterable, Optional

import discord

from core.constants import INSENSITIVE_STRIP_CHARS, ReactionType
from core.types import MessageContext, ReactionRule

_STRIP_TABLE = str.maketrans("", "", INSENSITIVE_STRIP_CHARS)


def normalize_text(text: str, insensitive: bool) -> str:
    """
    Lowercase and drop grammatical punctuation for insensitive rules.

    Characters are deleted rather than replaced, so "don't" becomes "dont".
    """
    if not insensitive:
        return text
    return text.lower().translate(_STRIP_TABLE)


@lru_cache(maxsize=512)
def keyword_pattern(trigger: str, raw: bool = False) -> Optional[re.Pattern[str]]:
    """Compile a whole-word pattern for a keyword trigger."""
    body = trigger if raw else re.escape(trigger)
    try:
        return re.compile(rf"\b{body}\b", re.MULTILINE)
    except re.error:
        return None


def match_rule(rule: ReactionRule, context: MessageContext, raw_patterns: bool = False) -> bool:
    """Check a single rule against a message context."""
    if not rule.trigger:
        # Invalid / incomplete record
        return False

    if rule.must_mention and not context.addressed:
        return False

    chat_normal = normalize_text(context.text, bool(rule.insensitive))
    trigger_normal = normalize_text(rule.trigger, bool(rule.insensitive))

    mode = rule.match_type
    if mode == ReactionType.KEYWORD:
        pattern = keyword_pattern(trigger_normal, raw_patterns)
        if pattern is None:
            return False
        return pattern.search(chat_normal) is not None

    if mode == ReactionType.MESSAGE:
        return chat_normal == trigger_normal

    return trigger_normal in chat_normal


def find_matching_rules(
    context: MessageContext,
    rules: Iterable[ReactionRule],
    raw_patterns: bool = False,
) -> list[ReactionRule]:
    return [rule for rule in rules if match_rule(rule, context, raw_patterns)]


def should_ignore(message: discord.Message) -> bool:
    """
    Gate applied before any matching.

    Bots are ignored so two bots cannot keep reacting to each other, and
    system messages carry nothing useful.
    """
    if message.author.bot or message.is_system():
        return True
    return not (message.clean_content or "").strip()


def is_direct_message(channel: Any) -> bool:
    if isinstance(channel, discord.DMChannel):
        return True
    return getattr(channel, "type", None) == discord.ChannelType.private


def build_context(message: discord.Message, bot_user: Optional[discord.abc.User]) -> MessageContext:
    """Extract the matcher input from a Discord message."""
    is_direct = is_direct_message(message.channel)
    mentions_bot = False
    if bot_user is not None:
        mentions_bot = any(mention.id == bot_user.id for mention in message.mentions)
    return MessageContext(
        text=(message.clean_content or "").strip(),
        is_direct=is_direct,
        mentions_bot=mentions_bot,
    )
