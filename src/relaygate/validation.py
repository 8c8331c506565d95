"""Integrity and authenticity checks for inbound events.

``validate_event`` runs, in order and stopping at the first failure:

1. timestamp policy (only when ``reject_future_seconds`` is configured)
2. canonicalization of the signable fields
3. SHA-256 of the canonical bytes
4. comparison with the claimed ``id``
5. Schnorr verification of ``sig`` over the digest under ``pubkey``

Nothing here raises on bad input; the outcome is always a ValidationResult.
"""
from __future__ import annotations

import hashlib
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional

from relaygate.canonical import canonical_bytes
from relaygate.crypto import verify_schnorr
from relaygate.settings import RelaySettings, SettingsHandle
from relaygate.utils.logger_util import get_logger

if TYPE_CHECKING:
    from relaygate.schemas.event import Event

logger = get_logger(__name__)

Clock = Callable[[], int]


class ValidationFailure(str, Enum):
    FUTURE_TIMESTAMP = "future_timestamp"
    CANONICALIZATION_FAILED = "canonicalization_failed"
    ID_MISMATCH = "id_mismatch"
    BAD_SIGNATURE = "bad_signature"


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: Optional[ValidationFailure] = None
    # computed hex digest, when validation got that far
    digest: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


def unix_time() -> int:
    """Seconds since 1970; a clock set before the epoch reads as 0."""
    return max(int(time.time()), 0)


def _resolve(settings: RelaySettings | SettingsHandle | None) -> RelaySettings:
    if isinstance(settings, SettingsHandle):
        return settings.current()
    return settings if settings is not None else RelaySettings()


def validate_event(
    event: "Event",
    settings: RelaySettings | SettingsHandle | None = None,
    clock: Optional[Clock] = None,
) -> ValidationResult:
    opts = _resolve(settings)
    allowance = opts.reject_future_seconds
    if allowance is not None:
        now = (clock or unix_time)()
        if event.created_at > now + allowance:
            logger.debug(
                "event %s is too far in the future (%d seconds), rejecting",
                event.id_prefix, event.created_at - now,
            )
            return ValidationResult(False, ValidationFailure.FUTURE_TIMESTAMP)

    canonical = canonical_bytes(event)
    if canonical is None:
        return ValidationResult(False, ValidationFailure.CANONICALIZATION_FAILED)

    digest = hashlib.sha256(canonical).digest()
    hex_digest = digest.hex()
    if event.id != hex_digest:
        logger.debug("event %s id does not match computed digest %s", event.id_prefix, hex_digest[:8])
        return ValidationResult(False, ValidationFailure.ID_MISMATCH, hex_digest)

    if not verify_schnorr(digest, event.sig, event.pubkey):
        logger.debug("event %s signature does not verify", event.id_prefix)
        return ValidationResult(False, ValidationFailure.BAD_SIGNATURE, hex_digest)

    return ValidationResult(True, None, hex_digest)


def is_valid(
    event: "Event",
    settings: RelaySettings | SettingsHandle | None = None,
    clock: Optional[Clock] = None,
) -> bool:
    return validate_event(event, settings=settings, clock=clock).ok


def validate_many(
    events: Iterable["Event"],
    settings: RelaySettings | SettingsHandle | None = None,
    clock: Optional[Clock] = None,
    max_workers: int | None = None,
) -> List[ValidationResult]:
    """Validate independent events concurrently; results keep input order."""
    # one snapshot for the whole batch
    opts = _resolve(settings)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(lambda ev: validate_event(ev, settings=opts, clock=clock), events))
