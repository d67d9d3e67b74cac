"""Base class for features hosted by the bot."""
from __future__ import annotations

from typing import Any


class Feature:
    """
    A unit of bot behaviour with an explicit lifecycle.

    The host calls enable() once to start and disable() once to stop.
    enable() may raise to signal the feature is not ready; the host then
    leaves it disabled.
    """

    name = "feature"

    def __init__(self) -> None:
        self.is_enabled = False

    def enable(self) -> None:
        raise NotImplementedError

    def disable(self) -> None:
        raise NotImplementedError

    def handle_event(self, event_name: str, data: Any) -> None:
        """Hook for host-wide events. Ignored unless overridden."""
