"""Encrypted local persistence of form values."""

from formguard.persistence.session_store import (
    KEY_ENV_VAR,
    EncryptedSessionStore,
    generate_key,
    key_from_env,
)

__all__ = ["EncryptedSessionStore", "generate_key", "key_from_env", "KEY_ENV_VAR"]
