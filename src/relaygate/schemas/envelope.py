from __future__ import annotations

from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError, model_validator

from relaygate.errors import EnvelopeDecodeError, InvalidEventError, UnknownCommandError
from relaygate.schemas.event import Event, loads_wire_json
from relaygate.settings import RelaySettings, SettingsHandle
from relaygate.utils.logger_util import get_logger
from relaygate.validation import validate_event

logger = get_logger(__name__)

EVENT_COMMAND = "EVENT"


class EventEnvelope(BaseModel):
    """Command envelope carrying one event.

    Peers normally send the positional form ``["EVENT", {...}]``; the keyed
    form ``{"cmd": "EVENT", "event": {...}}`` is accepted as well. The command
    is only checked by :meth:`into_event`, so a decoded envelope may still hold
    a command this relay does not handle.
    """

    model_config = ConfigDict(frozen=True)

    cmd: StrictStr
    event: Event

    @model_validator(mode="before")
    @classmethod
    def _positional(cls, data):
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError(f"expected [command, event], got {len(data)} element(s)")
            return {"cmd": data[0], "event": data[1]}
        return data

    def into_event(
        self,
        settings: RelaySettings | SettingsHandle | None = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> Event:
        """Return the carried event once it has passed validation.

        Raises UnknownCommandError before any validation work when the command
        is not ``EVENT``, and InvalidEventError when validation fails.
        """
        if self.cmd != EVENT_COMMAND:
            raise UnknownCommandError(self.cmd)
        result = validate_event(self.event, settings=settings, clock=clock)
        if not result.ok:
            raise InvalidEventError(result.reason, event_id=self.event.id)
        return self.event


def decode_envelope(raw: str | bytes) -> EventEnvelope:
    """Parse raw wire text into an envelope, or raise EnvelopeDecodeError."""
    try:
        data = loads_wire_json(raw)
    except (ValueError, RecursionError) as exc:
        # ValueError covers JSONDecodeError, repeated keys and undecodable bytes
        raise EnvelopeDecodeError(f"malformed json: {exc}") from exc
    try:
        return EventEnvelope.model_validate(data)
    except ValidationError as exc:
        logger.debug("envelope rejected: %s", exc)
        raise EnvelopeDecodeError(f"malformed envelope: {exc.error_count()} error(s)") from exc


def open_envelope(
    raw: str | bytes,
    settings: RelaySettings | SettingsHandle | None = None,
    clock: Optional[Callable[[], int]] = None,
) -> Event:
    """Decode, check the command and validate in one step."""
    return decode_envelope(raw).into_event(settings=settings, clock=clock)
