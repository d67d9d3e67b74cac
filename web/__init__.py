"""
Admin transport package.

Provides the websocket server admin tools use to edit reaction rules, and
the registry features hook their operations into.
"""

from web.api import ApiRegistry
from web.server import ApiConnection, WebServer

__all__ = ['ApiConnection', 'ApiRegistry', 'WebServer']
