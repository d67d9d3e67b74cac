"""
In-memory projection of the reactions table.

The mapping is only ever replaced wholesale (reload) or patched one entry at
a time after the database confirmed the write.
"""
from __future__ import annotations

import dataclasses
import logging
import sqlite3
from typing import Any, Optional, Union

from core.errors import LoadError, PersistenceError
from core.storage import ReactionDatabase
from core.types import ReactionRule

logger = logging.getLogger("reactbot.reactions")


class RuleStore:
    """Owns the id -> rule mapping for the reaction feature."""

    def __init__(self, db: ReactionDatabase) -> None:
        self.db = db
        self._rules: dict[int, ReactionRule] = {}

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def get(self, rule_id: int) -> Optional[ReactionRule]:
        return self._rules.get(rule_id)

    def list(self) -> list[ReactionRule]:
        """Snapshot of all rules. Order is not meaningful."""
        return list(self._rules.values())

    def clear(self) -> None:
        self._rules = {}

    def reload_all(self) -> int:
        """
        Rebuild the mapping from the database.

        The new mapping is built aside and swapped in at the end, so a failed
        load leaves the previous state untouched.
        """
        try:
            rows = self.db.select_all()
            rebuilt: dict[int, ReactionRule] = {}
            for row in rows:
                rule = ReactionRule.from_row(row)
                rebuilt[rule.id] = rule
        except (sqlite3.Error, ValueError, TypeError, AttributeError) as exc:
            raise LoadError(f"Unable to load reactions from database: {exc}") from exc

        self._rules = rebuilt
        logger.debug("Loaded %s reactions from database.", len(rebuilt))
        return len(rebuilt)

    def upsert(self, rule: Union[ReactionRule, dict[str, Any]]) -> int:
        """Insert (no id) or update (id given) a rule. Returns the resolved id."""
        if not isinstance(rule, ReactionRule):
            rule = ReactionRule.from_payload(rule)

        try:
            record_id = self.db.insert_or_update(rule.to_dict())
        except (sqlite3.Error, OverflowError) as exc:
            raise PersistenceError(f"Could not write reaction {rule.id}: {exc}") from exc

        if not record_id or record_id <= 0:
            raise PersistenceError(f"Database returned an invalid id for reaction: {record_id!r}")

        self._rules[record_id] = dataclasses.replace(rule, id=record_id)
        return record_id

    def delete(self, rule_id: int) -> bool:
        """Delete a rule. Unknown ids are a no-op and return False."""
        try:
            deleted = self.db.delete_if_exists(rule_id)
        except (sqlite3.Error, OverflowError) as exc:
            raise PersistenceError(f"Could not delete reaction {rule_id}: {exc}") from exc

        if deleted:
            self._rules.pop(rule_id, None)
        return deleted
