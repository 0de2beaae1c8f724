"""Configuration management for mwosp.

Loads settings from a YAML configuration file with environment variable
overrides (``MWOSP_*`` and the hosting platform's ``PORT``).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/mwosp.yaml")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=6767, ge=1, le=65535)
    websocket_path: str = Field(default="/", description="Path clients open the WebSocket on")
    enable_http: bool = Field(default=True, description="Expose the HTTP polling variant")
    session_cookie: str = Field(default="mwosp_session")
    session_header: str = Field(default="X-MWOSP-Session")
    http_max_sessions: int = Field(default=256, ge=1, description="Polling sessions kept before evicting the least recently used")
    http_session_ttl: float = Field(default=900.0, gt=0, description="Seconds a polling session may sit idle")


class SessionConfig(BaseModel):
    default_width: int = Field(default=320, gt=0)
    default_height: int = Field(default=240, gt=0)
    default_port: int = Field(default=443, ge=1, le=65535)
    search_target: str = Field(
        default="mw-search-server.onrender.app@search",
        description="Navigate target used by the home screen's search button",
    )


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the mwosp server.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "MWOSP_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    server: ServerConfig = Field(default_factory=ServerConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Init kwargs carry the YAML file, which ranks below the environment
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: MWOSP_* env vars > .env file > YAML file (with $PORT) > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply environment variable overrides for non-prefixed vars."""
    # Hosting platforms hand the listening port over in $PORT
    port = os.environ.get("PORT", "")
    if not port:
        return
    try:
        port_value = int(port)
    except ValueError:
        logger.warning("Ignoring non-numeric PORT=%r", port)
        return
    server = yaml_data.setdefault("server", {})
    server["port"] = port_value
