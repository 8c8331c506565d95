import json
from typing import Any, Callable, Dict, List, Optional

import pytest

from relaygate.canonical import event_digest
from relaygate.crypto import sign_digest, xonly_pubkey_hex
from relaygate.schemas.event import Event

# tests/conftest.py

NOW = 1_700_000_000


@pytest.fixture(scope="session")
def secret_key() -> bytes:
    return bytes.fromhex("7f" * 32)


@pytest.fixture(scope="session")
def other_secret_key() -> bytes:
    return bytes.fromhex("3c" * 32)


@pytest.fixture(scope="session")
def pubkey_hex(secret_key) -> str:
    return xonly_pubkey_hex(secret_key)


@pytest.fixture
def fixed_clock() -> Callable[[], int]:
    """Clock pinned to NOW so timestamp-policy tests are deterministic."""
    return lambda: NOW


@pytest.fixture
def make_event(secret_key) -> Callable[..., Event]:
    """
    Return a helper that builds a correctly signed Event.
    Usage: ev = make_event(content="hi", tags=[["e", "abc"]])
    """
    def _make(
        content: str = "hello relay",
        created_at: int = NOW,
        kind: int = 1,
        tags: Optional[List[List[str]]] = None,
        key: Optional[bytes] = None,
    ) -> Event:
        sk = key or secret_key
        unsigned = Event(
            id="",
            pubkey=xonly_pubkey_hex(sk),
            created_at=created_at,
            kind=kind,
            tags=tags,
            content=content,
            sig="",
        )
        digest = event_digest(unsigned)
        return unsigned.model_copy(update={"id": digest.hex(), "sig": sign_digest(sk, digest)})
    return _make


@pytest.fixture
def wire_message() -> Callable[..., str]:
    """
    Return a helper that wraps an Event (or raw dict) in a wire envelope.
    Usage: raw = wire_message(ev) / wire_message(ev, cmd="NOTICE")
    """
    def _wrap(event: Event | Dict[str, Any], cmd: str = "EVENT") -> str:
        payload = event.model_dump() if isinstance(event, Event) else event
        return json.dumps([cmd, payload])
    return _wrap
