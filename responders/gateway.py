"""
Admin transport handlers for reaction rules.

Each handler receives the requesting connection (anything with an async
send(text)) and the decoded JSON payload.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable

from core.constants import ApiOp, RuleField
from core.errors import PersistenceError
from core.types import ReactionRule
from core.utils import safe_int

from .store import RuleStore

logger = logging.getLogger("reactbot.reactions")

ApiHandler = Callable[[Any, dict[str, Any]], Awaitable[None]]


async def send_json(ws: Any, payload: dict[str, Any]) -> None:
    await ws.send(json.dumps(payload))


class ReactionApiHandlers:
    """Translates reaction_write / reaction_delete / reactions_fetch into store calls."""

    def __init__(self, store: RuleStore) -> None:
        self.store = store

    def routes(self) -> dict[str, ApiHandler]:
        return {
            ApiOp.REACTION_WRITE: self.handle_write,
            ApiOp.REACTION_DELETE: self.handle_delete,
            ApiOp.REACTIONS_FETCH: self.handle_fetch,
        }

    async def handle_write(self, ws: Any, data: dict[str, Any]) -> None:
        """Insert or update a rule and acknowledge with its id."""
        if not isinstance(data, dict):
            await send_json(ws, {"op": ApiOp.REACTION_WRITE, "ok": False, "error": "invalid payload"})
            return

        rule = ReactionRule.from_payload(data)
        try:
            record_id = self.store.upsert(rule)
        except PersistenceError as exc:
            logger.error("Reaction write failed: %s", exc)
            await send_json(ws, {"op": ApiOp.REACTION_WRITE, "ok": False, "error": str(exc)})
            return

        logger.info("Reaction %s written (%s: %r)", record_id, rule.match_type, rule.trigger)
        await send_json(ws, {"op": ApiOp.REACTION_WRITE, "ok": True, "id": record_id})

    async def handle_delete(self, ws: Any, data: dict[str, Any]) -> None:
        """Delete a rule, then push the fresh list back to the requester."""
        rule_id = safe_int(data.get(RuleField.ID)) if isinstance(data, dict) else None
        if not rule_id or rule_id <= 0:
            return

        try:
            deleted = self.store.delete(rule_id)
        except PersistenceError as exc:
            logger.error("Reaction delete failed: %s", exc)
            await send_json(ws, {"op": ApiOp.REACTION_DELETE, "ok": False, "error": str(exc)})
            return

        if deleted:
            logger.info("Reaction %s deleted", rule_id)
        await self.handle_fetch(ws, None)

    async def handle_fetch(self, ws: Any, data: Any) -> None:
        """Send the full rule list."""
        await send_json(ws, {
            "op": ApiOp.REACTIONS_FETCH,
            "reactions": [rule.to_dict() for rule in self.store.list()],
        })
