"""Tests for settings persistence and the secret vault."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from docline.services.settings import SecretVault, Settings, SettingsStore, redact_secret


@pytest.fixture
def store(tmp_path: Path) -> SettingsStore:
    return SettingsStore(tmp_path / "settings.json")


class TestSecretVault:
    def test_round_trip(self, tmp_path: Path) -> None:
        vault = SecretVault(key_path=tmp_path / "vault.key")

        token = vault.encrypt("sk-secret")

        assert token.startswith("fernet:")
        assert "sk-secret" not in token
        assert vault.decrypt(token) == "sk-secret"
        assert (tmp_path / "vault.key").exists()

    def test_key_is_reused(self, tmp_path: Path) -> None:
        token = SecretVault(key_path=tmp_path / "vault.key").encrypt("abc")

        assert SecretVault(key_path=tmp_path / "vault.key").decrypt(token) == "abc"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_key_file_is_private(self, tmp_path: Path) -> None:
        SecretVault(key_path=tmp_path / "vault.key").encrypt("abc")

        assert (tmp_path / "vault.key").stat().st_mode & 0o777 == 0o600

    def test_empty_values(self, tmp_path: Path) -> None:
        vault = SecretVault(key_path=tmp_path / "vault.key")

        assert vault.encrypt("") == ""
        assert vault.decrypt(None) == ""
        assert not (tmp_path / "vault.key").exists()

    @pytest.mark.parametrize("token", ["plain", "dpapi:abc", "fernet:not-a-token"])
    def test_rejects_bad_tokens(self, tmp_path: Path, token: str) -> None:
        with pytest.raises(ValueError):
            SecretVault(key_path=tmp_path / "vault.key").decrypt(token)


class TestSettingsStore:
    def test_defaults_when_missing(self, store: SettingsStore) -> None:
        settings = store.load()

        assert settings == Settings()
        assert settings.search_default_limit == 5
        assert settings.search_max_limit == 20
        assert settings.lines_per_page == 50

    def test_save_and_load_round_trip(self, store: SettingsStore) -> None:
        original = Settings(api_key="sk-123", model="gpt-test", temperature=0.3, search_max_limit=10)

        path = store.save(original)

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert "api_key" not in raw
        assert raw["api_key_ciphertext"].startswith("fernet:")
        assert raw["version"] == 1
        assert store.load() == original
        assert store.vault.key_path == store.path.with_suffix(".key")

    def test_invalid_json_falls_back_to_defaults(self, store: SettingsStore, caplog) -> None:
        store.path.write_text("{not json", encoding="utf-8")

        with caplog.at_level("WARNING"):
            settings = store.load()

        assert settings == Settings()
        assert "not valid JSON" in caplog.text

    def test_unknown_fields_are_ignored(self, store: SettingsStore) -> None:
        store.path.write_text(json.dumps({"model": "m", "theme": "dark", "version": 1}), encoding="utf-8")

        assert store.load().model == "m"

    def test_undecryptable_key_is_dropped(self, store: SettingsStore) -> None:
        store.path.write_text(json.dumps({"api_key_ciphertext": "fernet:garbage"}), encoding="utf-8")

        assert store.load().api_key == ""

    def test_overrides(self, store: SettingsStore) -> None:
        settings = store.load(overrides={"model": "cli-model", "temperature": None, "bogus": 1})

        assert settings.model == "cli-model"
        assert settings.temperature == 0.7

    def test_environment_overrides(self, store: SettingsStore, monkeypatch) -> None:
        store.save(Settings(model="saved"))
        monkeypatch.setenv("DOCLINE_MODEL", "env-model")
        monkeypatch.setenv("DOCLINE_API_KEY", "sk-env")
        monkeypatch.setenv("DOCLINE_DEBUG_LOGGING", "yes")
        monkeypatch.setenv("DOCLINE_TEMPERATURE", "0.25")
        monkeypatch.setenv("DOCLINE_REQUEST_TIMEOUT", "soon")

        settings = store.load()

        assert settings.model == "env-model"
        assert settings.api_key == "sk-env"
        assert settings.debug_logging is True
        assert settings.temperature == 0.25
        assert settings.request_timeout == 90.0

    def test_client_settings(self) -> None:
        client = Settings(api_key="k", base_url="http://local/v1", max_retries=5).client_settings()

        assert (client.api_key, client.base_url, client.max_retries) == ("k", "http://local/v1", 5)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("", ""), ("abc", "***"), ("sk-abcdef12", "sk*******12")],
)
def test_redact_secret(value: str, expected: str) -> None:
    assert redact_secret(value) == expected
