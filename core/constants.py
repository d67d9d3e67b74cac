"""
Constants shared by the reaction feature and the admin transport.
"""
from __future__ import annotations


class ReactionType:
    """Match types for reaction rules."""
    KEYWORD = "keyword"  # whole-word match
    TEXT = "text"  # substring match, also the fallback for unknown types
    MESSAGE = "message"  # exact match

    ALL = (KEYWORD, TEXT, MESSAGE)


class ApiOp:
    """Operation names accepted by the admin transport."""
    REACTION_WRITE = "reaction_write"
    REACTION_DELETE = "reaction_delete"
    REACTIONS_FETCH = "reactions_fetch"


class RuleField:
    """Column names of the reactions table."""
    ID = "id"
    TYPE = "type"
    TRIGGER = "trigger"
    MUST_MENTION = "must_mention"
    INSENSITIVE = "insensitive"
    RESPONSE = "response"
    EMOTE = "emote"
    DO_MENTION = "do_mention"

    ALL = (ID, TYPE, TRIGGER, MUST_MENTION, INSENSITIVE, RESPONSE, EMOTE, DO_MENTION)


# "Grammatical punctuation" removed by case-insensitive rules
INSENSITIVE_STRIP_CHARS = "!?'\",."

REACTIONS_TABLE = "reactions"
