"""Validation of signed, content-addressed events received from relay peers."""

from relaygate.errors import EnvelopeDecodeError, InvalidEventError, RelayGateError, UnknownCommandError
from relaygate.schemas import Event, EventEnvelope, decode_envelope, open_envelope
from relaygate.settings import RelaySettings, SettingsHandle, load_settings
from relaygate.validation import ValidationFailure, ValidationResult, is_valid, validate_event, validate_many

__all__ = [
    "Event",
    "EventEnvelope",
    "decode_envelope",
    "open_envelope",
    "RelaySettings",
    "SettingsHandle",
    "load_settings",
    "ValidationFailure",
    "ValidationResult",
    "validate_event",
    "validate_many",
    "is_valid",
    "RelayGateError",
    "EnvelopeDecodeError",
    "UnknownCommandError",
    "InvalidEventError",
]
