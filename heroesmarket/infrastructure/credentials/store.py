"""Credential storage for the marketplace session.

The gateway treats credential storage as an opaque key/value capability with
``get``/``set``/``delete``. Two implementations are provided: an in-memory
store (tests, short-lived scripts) and a JSON file store that persists the
session between CLI invocations, written with owner-only permissions.
"""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from heroesmarket.app.config import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_ID_KEY
from heroesmarket.infrastructure.observability import get_logger

logger = get_logger(__name__)


@runtime_checkable
class CredentialStore(Protocol):
    """Secure get/set/delete of opaque secrets."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, secret: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryCredentialStore:
    """Process-local credential store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._secrets: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._secrets.get(key)

    def set(self, key: str, secret: str) -> None:
        with self._lock:
            self._secrets[key] = secret

    def delete(self, key: str) -> None:
        with self._lock:
            self._secrets.pop(key, None)


class JsonFileCredentialStore:
    """Credential store persisted as a JSON object on disk.

    Every mutation rewrites the whole file through a temporary file and an
    atomic rename, so a reader never observes a half-written session.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable credential file %s: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            return {}
        return {str(k): str(v) for k, v in payload.items() if v is not None}

    def _write(self, secrets: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(secrets, f, indent=2)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, secret: str) -> None:
        with self._lock:
            secrets = self._read()
            secrets[key] = secret
            self._write(secrets)

    def delete(self, key: str) -> None:
        with self._lock:
            secrets = self._read()
            if key in secrets:
                del secrets[key]
                self._write(secrets)


class SessionTokens(BaseModel):
    """Token pair returned by login, registration and renewal.

    Renewal may omit ``refresh`` when the server does not rotate it.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    access: str
    refresh: str | None = None


@dataclass(frozen=True)
class SessionCredentials:
    """The access/renewal credential pair."""

    access: str | None
    refresh: str | None

    @property
    def is_present(self) -> bool:
        return self.access is not None

    @classmethod
    def load(cls, store: CredentialStore) -> "SessionCredentials":
        return cls(access=store.get(ACCESS_TOKEN_KEY), refresh=store.get(REFRESH_TOKEN_KEY))


def save_session(store: CredentialStore, access: str, refresh: str | None) -> None:
    """Store a credential pair.

    When ``refresh`` is ``None`` the existing renewal credential is kept; this
    is the non-rotating renewal case.
    """
    if refresh is not None:
        store.set(REFRESH_TOKEN_KEY, refresh)
    store.set(ACCESS_TOKEN_KEY, access)


def clear_session(store: CredentialStore) -> None:
    """Remove both credentials and the cached user id."""
    store.delete(ACCESS_TOKEN_KEY)
    store.delete(REFRESH_TOKEN_KEY)
    store.delete(USER_ID_KEY)


__all__ = [
    "CredentialStore",
    "InMemoryCredentialStore",
    "JsonFileCredentialStore",
    "SessionCredentials",
    "SessionTokens",
    "clear_session",
    "save_session",
]
