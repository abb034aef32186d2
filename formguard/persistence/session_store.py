"""Encrypted persistence of form values between page loads.

Values are stored with AES-256-GCM so tampering is detected on load. This
keeps in-progress form data unreadable in local session storage. It does not
make a field compliant: the encryption flags on FieldGovernanceState describe
the backend handling of the data and are unaffected by this store.
"""

import base64
import binascii
import os
from typing import Any, Dict, MutableMapping, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from formguard.errors import PersistenceError
from formguard.utils.logging import get_logger
from formguard.utils.serialization import dumps, loads

logger = get_logger("persistence")

KEY_ENV_VAR = "FORMGUARD_PERSIST_KEY"
STORAGE_PREFIX = "fg_persist_"
_FORMAT_PREFIX = "enc:v1:"
_NONCE_BYTES = 12  # 96-bit nonce for GCM


def generate_key() -> bytes:
    """Generate a new 32-byte AES-256 key."""
    return AESGCM.generate_key(bit_length=256)


def key_from_env(var: str = KEY_ENV_VAR) -> Optional[bytes]:
    """
    Read the persistence key from the environment.

    Args:
        var: Environment variable holding 64 hex characters

    Returns:
        32-byte key, or None if the variable is unset

    Raises:
        PersistenceError: If the variable is set but malformed
    """
    key_hex = os.environ.get(var)
    if not key_hex:
        return None
    try:
        key = bytes.fromhex(key_hex)
    except ValueError as e:
        raise PersistenceError(f"Invalid {var} format: {e}") from e
    if len(key) != 32:
        raise PersistenceError(
            f"{var} must be 32 bytes, got {len(key)}",
            suggestions=[f"export {var}=$(python -c \"import os; print(os.urandom(32).hex())\")"],
        )
    return key


class EncryptedSessionStore:
    """Saves and loads a form's value map under `fg_persist_<form name>`."""

    def __init__(self, key: bytes, backend: Optional[MutableMapping[str, str]] = None):
        """
        Initialize store.

        Args:
            key: 32-byte AES-256 key
            backend: String key/value storage (defaults to an in-memory dict)
        """
        if len(key) != 32:
            raise PersistenceError(f"Persistence key must be 32 bytes, got {len(key)}")
        self._aesgcm = AESGCM(key)
        self.backend: MutableMapping[str, str] = backend if backend is not None else {}

    @staticmethod
    def storage_key(form_name: str) -> str:
        return f"{STORAGE_PREFIX}{form_name}"

    def save(self, form_name: str, values: Dict[str, Any]) -> None:
        """Encrypt and store the value map. Empty maps are not stored."""
        if not values:
            return
        nonce = os.urandom(_NONCE_BYTES)
        storage_key = self.storage_key(form_name)
        ciphertext = self._aesgcm.encrypt(nonce, dumps(values).encode("utf-8"), storage_key.encode("utf-8"))
        self.backend[storage_key] = (
            f"{_FORMAT_PREFIX}{base64.b64encode(nonce).decode()}:{base64.b64encode(ciphertext).decode()}"
        )
        logger.debug("Persisted %d values for form %s", len(values), form_name)

    def load(self, form_name: str) -> Optional[Dict[str, Any]]:
        """
        Load and decrypt the value map.

        Returns:
            Stored values, or None if nothing is stored

        Raises:
            PersistenceError: If the stored data is malformed or fails authentication
        """
        storage_key = self.storage_key(form_name)
        encoded = self.backend.get(storage_key)
        if encoded is None:
            return None
        if not encoded.startswith(_FORMAT_PREFIX):
            raise PersistenceError(f"Unrecognized persisted format for form '{form_name}'")

        try:
            nonce_b64, ciphertext_b64 = encoded[len(_FORMAT_PREFIX):].split(":", 1)
            nonce = base64.b64decode(nonce_b64, validate=True)
            ciphertext = base64.b64decode(ciphertext_b64, validate=True)
            plaintext = self._aesgcm.decrypt(nonce, ciphertext, storage_key.encode("utf-8"))
        except (ValueError, binascii.Error, InvalidTag) as e:
            raise PersistenceError(
                f"Persisted state for form '{form_name}' could not be decrypted",
                context={"form": form_name},
            ) from e

        values = loads(plaintext)
        if not isinstance(values, dict):
            raise PersistenceError(f"Persisted state for form '{form_name}' is not a value map")
        return values

    def clear(self, form_name: str) -> None:
        """Remove stored values for a form."""
        self.backend.pop(self.storage_key(form_name), None)
