"""Tests for aipolish.core.credentials."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from aipolish.core.credentials import (
    KEYRING_SERVICE,
    KEYRING_USER,
    CredentialStoreError,
    delete_api_key,
    get_keyring_key,
    resolve_api_key,
    store_api_key,
)


@pytest.fixture(autouse=True)
def _no_env_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


class TestResolveApiKey:
    def test_explicit_wins(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert resolve_api_key({"openai": {"api_key": "sk-cfg"}}, explicit="sk-opt") == (
            "sk-opt", "option",
        )

    def test_config_before_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert resolve_api_key({"openai": {"api_key": "sk-cfg"}}) == ("sk-cfg", "config")

    def test_keyring_marker_skips_config(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert resolve_api_key({"openai": {"api_key": "keyring"}}) == ("sk-env", "env")

    def test_null_openai_section(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert resolve_api_key({"openai": None}) == ("sk-env", "env")

    def test_falls_back_to_keyring(self):
        with patch("aipolish.core.credentials.get_keyring_key", return_value="sk-ring"):
            assert resolve_api_key({}) == ("sk-ring", "keyring")

    def test_none_found(self):
        with patch("aipolish.core.credentials.get_keyring_key", return_value=None):
            assert resolve_api_key(None) == (None, "none")


class TestKeyring:
    def test_get(self):
        with patch("keyring.get_password", return_value="sk-ring") as mock_get:
            assert get_keyring_key() == "sk-ring"
        mock_get.assert_called_once_with(KEYRING_SERVICE, KEYRING_USER)

    def test_get_backend_failure(self):
        with patch("keyring.get_password", side_effect=RuntimeError("no backend")):
            assert get_keyring_key() is None

    def test_store(self):
        with patch("keyring.set_password") as mock_set:
            store_api_key("sk-new")
        mock_set.assert_called_once_with(KEYRING_SERVICE, KEYRING_USER, "sk-new")

    def test_store_failure(self):
        with patch("keyring.set_password", side_effect=RuntimeError("locked")), \
                pytest.raises(CredentialStoreError, match="locked"):
            store_api_key("sk-new")

    def test_delete(self):
        with patch("keyring.delete_password") as mock_delete:
            assert delete_api_key() is True
        mock_delete.assert_called_once_with(KEYRING_SERVICE, KEYRING_USER)

    def test_delete_when_absent(self):
        from keyring.errors import PasswordDeleteError

        with patch("keyring.delete_password", side_effect=PasswordDeleteError("none")):
            assert delete_api_key() is False
