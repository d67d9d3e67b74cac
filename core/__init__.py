"""
Core utilities and infrastructure for the bot.

This package contains:
- config: Environment configuration loading and validation
- constants: Rule fields, match types and admin operation names
- errors: Error taxonomy for the reaction feature
- storage: SQLite persistence for reaction rules
- types: Dataclasses and type definitions
- utils: General utilities
"""
from .config import BotConfig, ConfigError, load_config
from .constants import ApiOp, ReactionType, RuleField
from .errors import (
    DeliveryError,
    LoadError,
    PersistenceError,
    ReactionError,
    ResolutionError,
)
from .storage import ReactionDatabase
from .types import MessageContext, ReactionRule

__all__ = [
    # Config
    "BotConfig",
    "ConfigError",
    "load_config",
    # Constants
    "ApiOp",
    "ReactionType",
    "RuleField",
    # Errors
    "DeliveryError",
    "LoadError",
    "PersistenceError",
    "ReactionError",
    "ResolutionError",
    # Storage
    "ReactionDatabase",
    # Types
    "MessageContext",
    "ReactionRule",
]
