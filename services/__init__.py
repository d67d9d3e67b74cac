"""Services package - presentation helpers shared by features."""
from .live_embed import create_for_stream, format_uptime

__all__ = ["create_for_stream", "format_uptime"]
