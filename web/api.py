"""
Operation registry for the admin transport.

Features register a handler per operation name; incoming JSON frames are
routed by their "op" key.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger("reactbot.web")

ApiHandler = Callable[[Any, dict[str, Any]], Awaitable[None]]


class ApiRegistry:
    """Maps operation names to handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[ApiHandler]] = {}

    def register_api(self, op: str, handler: ApiHandler) -> None:
        handlers = self._handlers.setdefault(op, [])
        if handler not in handlers:
            handlers.append(handler)

    def unregister_api(self, op: str, handler: ApiHandler) -> None:
        handlers = self._handlers.get(op)
        if not handlers:
            return
        if handler in handlers:
            handlers.remove(handler)
        if not handlers:
            del self._handlers[op]

    def has_api(self, op: str) -> bool:
        return bool(self._handlers.get(op))

    async def dispatch(self, ws: Any, payload: Any) -> int:
        """
        Route one decoded frame to its handlers.

        Returns the number of handlers invoked. Handler errors are logged and
        never propagate to the connection loop.
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("op"), str):
            logger.warning("Ignoring admin frame without an op: %r", payload)
            return 0

        op = payload["op"]
        handlers = list(self._handlers.get(op, []))
        if not handlers:
            logger.warning("Unknown admin operation: %s", op)
            await ws.send(json.dumps({"op": op, "ok": False, "error": "unknown operation"}))
            return 0

        for handler in handlers:
            try:
                await handler(ws, payload)
            except Exception as e:
                logger.error("Admin handler for %s raised: %s", op, e)
        return len(handlers)
