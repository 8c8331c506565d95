"""Wire models for inbound events (Event and its command envelope).

Decoding is strict about types and lenient about extra fields, matching what
peers put on the wire.
"""

from .event import Event, Tag
from .envelope import EVENT_COMMAND, EventEnvelope, decode_envelope, open_envelope

__all__ = ["Event", "Tag", "EVENT_COMMAND", "EventEnvelope", "decode_envelope", "open_envelope"]
