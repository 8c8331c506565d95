"""Canonical serialization of an event's signable fields.

The pre-image for both the event id and the signature is the compact JSON
array ``[0, pubkey, created_at, kind, tags, content]``. Producers compute the
same bytes, so any difference in shape, whitespace or escaping here breaks
verification for every legitimate event.
"""
from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING, Any, List, Optional

from relaygate.utils.logger_util import get_logger

if TYPE_CHECKING:
    from relaygate.schemas.event import Event

logger = get_logger(__name__)

# occupies the position of the id in the signed array
CANONICAL_VERSION = 0
_U64_MAX = 2**64 - 1


def _is_u64(value: Any) -> bool:
    return type(value) is int and 0 <= value <= _U64_MAX


def _signable(event: "Event") -> Optional[List[Any]]:
    if not (_is_u64(event.created_at) and _is_u64(event.kind)):
        return None
    if not (isinstance(event.pubkey, str) and isinstance(event.content, str)):
        return None
    tags = []
    for tag in event.tags:
        if not all(isinstance(v, str) for v in tag):
            return None
        tags.append(list(tag))
    return [CANONICAL_VERSION, event.pubkey, event.created_at, event.kind, tags, event.content]


def canonical_bytes(event: "Event") -> Optional[bytes]:
    """UTF-8 bytes of the canonical form, or None if it cannot be produced."""
    signable = _signable(event)
    if signable is None:
        logger.info("event %s could not be canonicalized: non-canonical field types", event.id[:8])
        return None
    # ensure_ascii=False keeps non-ASCII literal; only quote, backslash and
    # control characters are escaped, which is what the wire encoder does
    text = json.dumps(signable, separators=(",", ":"), ensure_ascii=False)
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError:
        # lone surrogates decoded from \ud800-style escapes
        logger.info("event %s could not be canonicalized: content is not valid UTF-8", event.id[:8])
        return None


def canonical_form(event: "Event") -> Optional[str]:
    data = canonical_bytes(event)
    return None if data is None else data.decode("utf-8")


def event_digest(event: "Event") -> Optional[bytes]:
    """SHA-256 of the canonical form; this is both the id and the signed message."""
    data = canonical_bytes(event)
    if data is None:
        return None
    return hashlib.sha256(data).digest()
