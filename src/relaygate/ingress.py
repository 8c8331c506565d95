"""Hand-off point between the transport and downstream consumers.

The transport passes each raw text message to :class:`EventIngress`. Accepted
events go to the bus ``events_out`` channel; everything else becomes a coarse
notice on ``notices``. The notice never says which check failed, so a peer
cannot probe the validator; the precise reason is logged at DEBUG.
"""
from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from relaygate.bus import EventBus
from relaygate.errors import EnvelopeDecodeError, InvalidEventError, UnknownCommandError
from relaygate.schemas.envelope import decode_envelope
from relaygate.schemas.event import Event
from relaygate.settings import RelaySettings, SettingsHandle
from relaygate.utils.logger_util import get_logger
from relaygate.validation import Clock, ValidationFailure

logger = get_logger(__name__)


class IngressStatus(str, Enum):
    ACCEPTED = "accepted"
    DECODE_ERROR = "decode_error"
    UNKNOWN_COMMAND = "unknown_command"
    INVALID = "invalid"


_NOTICES = {
    IngressStatus.DECODE_ERROR: "error: could not parse command",
    IngressStatus.UNKNOWN_COMMAND: "error: unknown command",
    IngressStatus.INVALID: "invalid: event rejected",
}


@dataclass(frozen=True)
class IngressOutcome:
    status: IngressStatus
    event: Optional[Event] = None
    reason: Optional[ValidationFailure] = None
    detail: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.status is IngressStatus.ACCEPTED

    def notice(self) -> Optional[str]:
        """Peer-facing text for a rejection; None for accepted events."""
        return _NOTICES.get(self.status)


class EventIngress:
    def __init__(
        self,
        bus: EventBus | None = None,
        settings: RelaySettings | SettingsHandle | None = None,
        clock: Optional[Clock] = None,
    ):
        self.bus = bus if bus is not None else EventBus()
        if not isinstance(settings, SettingsHandle):
            settings = SettingsHandle(settings)
        self.settings = settings
        self.clock = clock
        self._counts: Counter = Counter()
        self._counts_lock = threading.Lock()

    def _count(self, status: IngressStatus) -> None:
        with self._counts_lock:
            self._counts[status.value] += 1

    def process(self, raw: str | bytes) -> IngressOutcome:
        """Decode, check the command and validate one message."""
        try:
            envelope = decode_envelope(raw)
        except EnvelopeDecodeError as exc:
            logger.debug("dropping undecodable message: %s", exc)
            outcome = IngressOutcome(IngressStatus.DECODE_ERROR, detail=str(exc))
            self._count(outcome.status)
            return outcome

        try:
            event = envelope.into_event(settings=self.settings.current(), clock=self.clock)
        except UnknownCommandError as exc:
            logger.debug("unknown command %r", exc.cmd)
            outcome = IngressOutcome(IngressStatus.UNKNOWN_COMMAND, detail=str(exc))
        except InvalidEventError as exc:
            logger.debug("event %s rejected: %s", envelope.event.id_prefix, exc.reason.value)
            outcome = IngressOutcome(IngressStatus.INVALID, reason=exc.reason, detail=str(exc))
        else:
            logger.debug("event %s accepted", event.id_prefix)
            outcome = IngressOutcome(IngressStatus.ACCEPTED, event=event)
        self._count(outcome.status)
        return outcome

    async def handle(self, raw: str | bytes) -> IngressOutcome:
        """Process one message and forward the result on the bus."""
        outcome = self.process(raw)
        if outcome.accepted:
            if not await self.bus.publish("events_out", outcome.event):
                logger.warning("events_out full, dropped event %s", outcome.event.id_prefix)
        else:
            await self.bus.publish("notices", outcome.notice())
        return outcome

    def stats(self) -> Dict[str, int]:
        with self._counts_lock:
            return {status.value: self._counts.get(status.value, 0) for status in IngressStatus}
