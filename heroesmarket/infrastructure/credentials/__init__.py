"""Credential storage adapters."""

from .store import (
    CredentialStore,
    InMemoryCredentialStore,
    JsonFileCredentialStore,
    SessionCredentials,
    SessionTokens,
    clear_session,
    save_session,
)

__all__ = [
    "CredentialStore",
    "InMemoryCredentialStore",
    "JsonFileCredentialStore",
    "SessionCredentials",
    "SessionTokens",
    "clear_session",
    "save_session",
]
