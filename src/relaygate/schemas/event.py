from __future__ import annotations

import json
from typing import Annotated, Any, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

# created_at and kind travel as JSON integers that must fit an unsigned 64-bit value
U64 = Annotated[int, Field(strict=True, ge=0, le=2**64 - 1)]
Tag = Tuple[StrictStr, ...]


def _unique_keys(pairs: List[Tuple[str, Any]]) -> dict:
    obj = {}
    for key, value in pairs:
        if key in obj:
            raise ValueError(f"duplicate field {key!r}")
        obj[key] = value
    return obj


def loads_wire_json(raw: str | bytes) -> Any:
    """json.loads that rejects objects repeating a key.

    A repeated field would otherwise resolve to its last value, so the same
    bytes could mean different events to different parsers.
    """
    return json.loads(raw, object_pairs_hook=_unique_keys)


class Event(BaseModel):
    """A signed, content-addressed event as received from a peer.

    Every field is only *claimed* by the sender until
    ``relaygate.validation.validate_event`` has checked it. Instances are
    immutable, tags included; build altered copies with
    ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: StrictStr
    pubkey: StrictStr
    created_at: U64
    kind: U64
    tags: Tuple[Tag, ...] = Field(default_factory=tuple)
    content: StrictStr
    sig: StrictStr

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, v):
        # peers send "tags": null for untagged events
        return () if v is None else v

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Event":
        return cls.model_validate(loads_wire_json(raw))

    def to_json(self) -> str:
        """Compact wire form, fields in protocol order."""
        return self.model_dump_json()

    @property
    def id_prefix(self) -> str:
        """Short event identifier, suitable for logging."""
        return self.id[:8]

    def _tag_values(self, name: str) -> List[str]:
        return [t[1] for t in self.tags if len(t) >= 2 and t[0] == name]

    def event_tags(self) -> List[str]:
        """Event ids referenced by ``["e", <id>, ...]`` tags."""
        return self._tag_values("e")

    def pubkey_tags(self) -> List[str]:
        """Pubkeys referenced by ``["p", <pubkey>, ...]`` tags."""
        return self._tag_values("p")

    def event_tag_match(self, event_id: str) -> bool:
        return event_id in self.event_tags()

    def pubkey_tag_match(self, pubkey: str) -> bool:
        return pubkey in self.pubkey_tags()
