"""Tests for settings, provider selection and the server entry point."""

from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from biostate.core.config.settings import get_settings
from biostate.core.server import main
from biostate.core.server.app import _select_provider, create_app


class TestSettings:
    def test_defaults(self):
        settings = get_settings()
        assert settings.llm_provider == "mock"
        assert settings.default_temperature == 0.4
        assert settings.default_top_p == 0.9
        assert settings.biostate_host == "127.0.0.1"

    def test_missing_key_falls_back_to_mock(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "gemini")
        assert _select_provider(get_settings()) == ("mock", "", "")

    def test_configured_key_selects_provider(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
        assert _select_provider(get_settings()) == ("openai", "sk-test", "gpt-4o-mini")


class TestCreateApp:
    def test_storage_from_encryption_key(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENCRYPTION_KEY", Fernet.generate_key().decode())
        monkeypatch.setenv("DB_PATH", str(tmp_path / "research.db"))
        create_app()
        assert (tmp_path / "research.db").exists()

    def test_bad_encryption_key_disables_storage(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENCRYPTION_KEY", "not-a-key")
        monkeypatch.setenv("DB_PATH", str(tmp_path / "research.db"))
        create_app()
        assert not (tmp_path / "research.db").exists()


class TestMain:
    @pytest.mark.parametrize("host, expected", [
        ("127.0.0.1", True),
        ("localhost", True),
        ("::1", True),
        ("0.0.0.0", False),
        ("example.org", False),
    ])
    def test_loopback_detection(self, host, expected):
        assert main.is_loopback_host(host) is expected

    def test_refuses_public_bind(self, monkeypatch):
        monkeypatch.setenv("BIOSTATE_HOST", "0.0.0.0")
        with pytest.raises(RuntimeError, match="non-loopback"):
            main.run()
