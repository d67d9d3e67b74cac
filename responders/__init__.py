"""
Reaction system - split into focused modules.

This package matches chat messages against stored reaction rules and reacts
with emotes and/or a text response.
"""
from .delivery import ReactionDispatcher, build_response_text
from .engine import ReactionManager
from .gateway import ReactionApiHandlers
from .matching import build_context, find_matching_rules, match_rule, normalize_text
from .store import RuleStore

__all__ = [
    "ReactionDispatcher",
    "ReactionManager",
    "ReactionApiHandlers",
    "RuleStore",
    "build_context",
    "build_response_text",
    "find_matching_rules",
    "match_rule",
    "normalize_text",
]
