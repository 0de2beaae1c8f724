"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from mwosp.config.settings import (
    LoggingConfig,
    ServerConfig,
    SessionConfig,
    Settings,
    load_settings,
)


class TestSettings:
    def test_default_settings(self) -> None:
        """Default Settings should be valid."""
        settings = Settings()
        assert settings.server.port == 6767
        assert settings.server.websocket_path == "/"
        assert settings.session.default_width == 320
        assert settings.session.default_height == 240
        assert settings.logging.level == "INFO"

    def test_session_config_defaults(self) -> None:
        config = SessionConfig()
        assert config.default_port == 443
        assert config.search_target.endswith("@search")

    def test_invalid_port_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(port=70000)

    def test_logging_config_defaults(self) -> None:
        assert LoggingConfig().file is None


class TestLoadSettings:
    def test_load_settings_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """load_settings with missing file should return defaults."""
        monkeypatch.delenv("PORT", raising=False)
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.server.port == 6767

    def test_yaml_values(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PORT", raising=False)
        path = tmp_path / "mwosp.yaml"
        path.write_text(
            "server:\n  port: 9000\n  enable_http: false\n"
            "session:\n  default_width: 480\n"
        )
        settings = load_settings(path)
        assert settings.server.port == 9000
        assert settings.server.enable_http is False
        assert settings.session.default_width == 480
        assert settings.session.default_height == 240

    def test_port_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "10000")
        path = tmp_path / "mwosp.yaml"
        path.write_text("server:\n  port: 9000\n")
        assert load_settings(path).server.port == 10000

    def test_non_numeric_port_env_ignored(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "http")
        assert load_settings(tmp_path / "none.yaml").server.port == 6767

    def test_empty_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PORT", raising=False)
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(path).server.host == "0.0.0.0"

    def test_prefixed_env_beats_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.setenv("MWOSP_SERVER__PORT", "7001")
        path = tmp_path / "mwosp.yaml"
        path.write_text("server:\n  port: 6767\n  host: 127.0.0.1\n")
        settings = load_settings(path)
        assert settings.server.port == 7001
        assert settings.server.host == "127.0.0.1"

    def test_prefixed_env_beats_platform_port(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PORT", "10000")
        monkeypatch.setenv("MWOSP_SERVER__PORT", "7001")
        assert load_settings(tmp_path / "none.yaml").server.port == 7001

    def test_polling_limits(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PORT", raising=False)
        path = tmp_path / "mwosp.yaml"
        path.write_text("server:\n  http_max_sessions: 8\n  http_session_ttl: 30\n")
        settings = load_settings(path)
        assert settings.server.http_max_sessions == 8
        assert settings.server.http_session_ttl == 30.0
