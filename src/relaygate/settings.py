from __future__ import annotations

import os
import threading
from typing import Mapping, Optional

import dotenv
from pydantic import BaseModel, ConfigDict, Field

REJECT_FUTURE_ENV = "RELAYGATE_REJECT_FUTURE_SECONDS"


class RelaySettings(BaseModel):
    """Resolved options the validator consumes.

    reject_future_seconds: events dated more than this many seconds ahead of
    the local clock are rejected. None means no limit.
    """

    model_config = ConfigDict(frozen=True)

    reject_future_seconds: Optional[int] = Field(None, ge=0)


def load_settings(env: Mapping[str, str] | None = None) -> RelaySettings:
    """Build settings from the environment (and a local .env file).

    An unset or empty variable means unlimited. Raises pydantic.ValidationError
    for anything that is not a non-negative integer.
    """
    if env is None:
        dotenv.load_dotenv(".env")
        env = os.environ
    raw = (env.get(REJECT_FUTURE_ENV) or "").strip()
    return RelaySettings(reject_future_seconds=raw or None)


class SettingsHandle:
    """Shared, read-mostly holder for the current RelaySettings snapshot.

    Readers take the snapshot reference without locking; writers build a new
    immutable snapshot and swap it in under a lock, so a validation in flight
    always sees one consistent version.
    """

    def __init__(self, settings: RelaySettings | None = None):
        self._settings = settings if settings is not None else RelaySettings()
        self._write_lock = threading.Lock()

    def current(self) -> RelaySettings:
        return self._settings

    def replace(self, settings: RelaySettings) -> None:
        with self._write_lock:
            self._settings = settings

    def update(self, **changes) -> RelaySettings:
        with self._write_lock:
            merged = {**self._settings.model_dump(), **changes}
            self._settings = RelaySettings.model_validate(merged)
            return self._settings
