"""Configuration models and loading."""

import json
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from core.exceptions import ConfigurationError

CONFIG_DIR = Path.home() / ".config" / "iip-auth-proxy"
CONFIG_FILE = Path(os.environ.get("IIP_AUTH_PROXY_CONFIG", CONFIG_DIR / "config.json"))


class ProxySettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 4010
    debug: bool = False


class UpstreamSettings(BaseModel):
    base_url: str = "http://localhost"
    timeout: float = 300.0
    connect_timeout: float = 10.0


class AuthSettings(BaseModel):
    enforce_auth: bool = True
    header_name: str = "authorization"


class LimitsSettings(BaseModel):
    max_connections: int = 100
    max_keepalive_connections: int = 20
    pool_timeout: float = 30.0
    keep_alive_timeout: int = 5


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)


def load_config(
    config_file: Path = CONFIG_FILE,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """Load configuration from JSON file, creating default if needed.

    Environment overrides are applied on top of whatever the file holds.
    """
    config = _read_config_file(config_file)
    return apply_env_overrides(config, os.environ if environ is None else environ)


def apply_env_overrides(config: Config, environ: Mapping[str, str]) -> Config:
    """Return a copy of config with CHECK_HEADER, UPSTREAM_BASE_URL and PROXY_PORT applied."""
    config = config.model_copy(deep=True)

    if environ.get("CHECK_HEADER") == "no":
        config.auth.enforce_auth = False

    base_url = environ.get("UPSTREAM_BASE_URL")
    if base_url:
        if not base_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"UPSTREAM_BASE_URL must be an http(s) URL, got {base_url!r}")
        config.upstream.base_url = base_url

    port = environ.get("PROXY_PORT")
    if port:
        try:
            config.proxy.port = int(port)
        except ValueError as e:
            raise ConfigurationError(f"PROXY_PORT must be an integer, got {port!r}") from e

    return config


def _read_config_file(config_file: Path) -> Config:
    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(config_file.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = config_file.with_suffix(".json.bak")
        config_file.rename(backup)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default
