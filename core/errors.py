"""
Error taxonomy for the reaction feature.

Only LoadError is ever raised out of a feature's enable(); everything else is
caught where it happens and turned into log output.
"""
from __future__ import annotations

from typing import Optional


class ReactionError(RuntimeError):
    pass


class LoadError(ReactionError):
    """Bulk load from the persistent store failed."""


class PersistenceError(ReactionError):
    """A single write or delete against the persistent store failed."""


class DeliveryError(ReactionError):
    """A reaction or send side effect failed."""

    def __init__(self, message: str, effect: Optional[str] = None) -> None:
        super().__init__(message)
        self.effect = effect


class ResolutionError(DeliveryError):
    """A named custom emote could not be resolved in the current context."""
