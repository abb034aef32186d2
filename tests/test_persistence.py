"""Tests for encrypted session persistence."""

import pytest

from formguard.errors import PersistenceError
from formguard.persistence.session_store import (
    KEY_ENV_VAR,
    EncryptedSessionStore,
    generate_key,
    key_from_env,
)


class TestEncryptedSessionStore:
    """Test AES-GCM backed value persistence."""

    def setup_method(self):
        self.store = EncryptedSessionStore(generate_key())

    def test_save_and_load(self):
        values = {"name": "Ada", "age": 36, "tags": ["a", "b"]}
        self.store.save("signup", values)

        assert self.store.load("signup") == values

    def test_stored_value_is_not_plaintext(self):
        self.store.save("signup", {"ssn": "123-45-6789"})
        stored = self.store.backend["fg_persist_signup"]

        assert stored.startswith("enc:v1:")
        assert "123-45-6789" not in stored

    def test_empty_values_not_stored(self):
        self.store.save("signup", {})
        assert self.store.load("signup") is None

    def test_clear(self):
        self.store.save("signup", {"name": "Ada"})
        self.store.clear("signup")
        assert self.store.load("signup") is None

    def test_tampered_data_rejected(self):
        self.store.save("signup", {"name": "Ada"})
        stored = self.store.backend["fg_persist_signup"]
        self.store.backend["fg_persist_signup"] = stored[:-4] + ("AAAA" if not stored.endswith("AAAA") else "BBBB")

        with pytest.raises(PersistenceError):
            self.store.load("signup")

    def test_wrong_key_rejected(self):
        backend = {}
        EncryptedSessionStore(generate_key(), backend).save("signup", {"name": "Ada"})

        with pytest.raises(PersistenceError):
            EncryptedSessionStore(generate_key(), backend).load("signup")

    def test_data_bound_to_form_name(self):
        self.store.save("signup", {"name": "Ada"})
        self.store.backend["fg_persist_other"] = self.store.backend["fg_persist_signup"]

        with pytest.raises(PersistenceError):
            self.store.load("other")

    def test_unrecognized_format(self):
        self.store.backend["fg_persist_signup"] = "plain text"
        with pytest.raises(PersistenceError):
            self.store.load("signup")

    def test_invalid_key_length(self):
        with pytest.raises(PersistenceError):
            EncryptedSessionStore(b"short")


class TestKeyFromEnv:
    """Test loading the persistence key from the environment."""

    def test_unset(self, monkeypatch):
        monkeypatch.delenv(KEY_ENV_VAR, raising=False)
        assert key_from_env() is None

    def test_valid(self, monkeypatch):
        key = generate_key()
        monkeypatch.setenv(KEY_ENV_VAR, key.hex())
        assert key_from_env() == key

    def test_malformed(self, monkeypatch):
        monkeypatch.setenv(KEY_ENV_VAR, "not-hex")
        with pytest.raises(PersistenceError):
            key_from_env()

        monkeypatch.setenv(KEY_ENV_VAR, "ab" * 16)
        with pytest.raises(PersistenceError):
            key_from_env()
