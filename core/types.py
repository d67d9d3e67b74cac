"""
Reaction rule record and the matcher input.

ReactionRule is where admin payloads and stored rows are normalized.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .constants import ReactionType, RuleField
from .utils import blank_to_none, coerce_flag, safe_int


@dataclass(frozen=True)
class ReactionRule:
    """
    A stored trigger -> reaction/response rule.

    Flags are kept as 0/1 integers, the same way the reactions table stores
    them. An id of None means the rule has not been persisted yet.
    """
    id: Optional[int] = None
    type: Optional[str] = None
    trigger: Optional[str] = None
    must_mention: int = 0
    insensitive: int = 0
    response: Optional[str] = None
    emote: Optional[str] = None
    do_mention: int = 0

    @property
    def match_type(self) -> str:
        """Effective match type; anything unrecognized behaves like text."""
        if self.type in ReactionType.ALL:
            return self.type
        return ReactionType.TEXT

    @property
    def emote_tokens(self) -> list[str]:
        if not self.emote:
            return []
        return [token for token in self.emote.split(" ") if token]

    def to_dict(self) -> dict[str, Any]:
        return {
            RuleField.ID: self.id,
            RuleField.TYPE: self.type,
            RuleField.TRIGGER: self.trigger,
            RuleField.MUST_MENTION: self.must_mention,
            RuleField.INSENSITIVE: self.insensitive,
            RuleField.RESPONSE: self.response,
            RuleField.EMOTE: self.emote,
            RuleField.DO_MENTION: self.do_mention,
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> ReactionRule:
        """
        Normalize an admin write payload.

        Flags become 0/1, blank strings become None and the emote list is
        trimmed. A missing or non-positive id means "insert".
        """
        rule_id = safe_int(data.get(RuleField.ID))
        if rule_id is not None and rule_id <= 0:
            rule_id = None
        emote = data.get(RuleField.EMOTE)
        return cls(
            id=rule_id,
            type=blank_to_none(data.get(RuleField.TYPE)),
            trigger=blank_to_none(data.get(RuleField.TRIGGER), strip=False),
            must_mention=coerce_flag(data.get(RuleField.MUST_MENTION)),
            insensitive=coerce_flag(data.get(RuleField.INSENSITIVE)),
            response=blank_to_none(data.get(RuleField.RESPONSE), strip=False),
            emote=blank_to_none(emote.strip() if isinstance(emote, str) else emote),
            do_mention=coerce_flag(data.get(RuleField.DO_MENTION)),
        )

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ReactionRule:
        """Build a rule from a stored row. Raises ValueError on malformed rows."""
        rule_id = row.get(RuleField.ID)
        if isinstance(rule_id, bool) or not isinstance(rule_id, int) or rule_id <= 0:
            raise ValueError(f"invalid reaction id: {rule_id!r}")
        for key in (RuleField.TYPE, RuleField.TRIGGER, RuleField.RESPONSE, RuleField.EMOTE):
            value = row.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"reaction {rule_id}: {key} must be text, got {value!r}")
        return cls(
            id=rule_id,
            type=row.get(RuleField.TYPE),
            trigger=row.get(RuleField.TRIGGER),
            must_mention=coerce_flag(row.get(RuleField.MUST_MENTION)),
            insensitive=coerce_flag(row.get(RuleField.INSENSITIVE)),
            response=row.get(RuleField.RESPONSE),
            emote=row.get(RuleField.EMOTE),
            do_mention=coerce_flag(row.get(RuleField.DO_MENTION)),
        )


@dataclass(frozen=True)
class MessageContext:
    """What the matcher needs to know about an incoming message."""
    text: str
    is_direct: bool = False
    mentions_bot: bool = False

    @property
    def addressed(self) -> bool:
        """A direct message counts as addressing the bot."""
        return self.is_direct or self.mentions_bot
