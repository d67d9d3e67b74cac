"""Bot package - Discord client and feature base class."""
from .client import ReactBot
from .feature import Feature

__all__ = ["Feature", "ReactBot"]
