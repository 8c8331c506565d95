"""Typed failures raised at the envelope boundary.

Validation itself never raises; these exist so callers that unwrap an
envelope can branch on protocol mismatch versus a rejected event.
"""
from __future__ import annotations

from typing import Optional


class RelayGateError(Exception):
    """Base class for every error relaygate raises."""


class EnvelopeDecodeError(RelayGateError):
    """Raw text is not a well-formed event envelope."""


class UnknownCommandError(RelayGateError):
    def __init__(self, cmd: str):
        super().__init__(f"unknown command: {cmd!r}")
        self.cmd = cmd


class InvalidEventError(RelayGateError):
    def __init__(self, reason, event_id: Optional[str] = None):
        super().__init__(f"event invalid: {getattr(reason, 'value', reason)}")
        self.reason = reason
        self.event_id = event_id
