"""
settings.py - Server configuration

Layering (lowest to highest priority):
1. Built-in defaults (the `Settings` field defaults)
2. YAML file named by `--conf` or `$INKMATCH_CONFIG`
3. Environment variables (`PORT`, `REPLICATE_API_TOKEN`, ...)
4. Explicit overrides passed to `load_settings()`

A missing Replicate token is not a configuration error: the server starts and
only the image-generation path is disabled.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

PACKAGE_PUBLIC_DIR = Path(__file__).resolve().parent.parent / "public"

CONFIG_ENV_VAR = "INKMATCH_CONFIG"

# Environment variable -> settings key
ENV_KEYS: dict[str, str] = {
    "HOST": "host",
    "PORT": "port",
    "REPLICATE_API_TOKEN": "replicate_api_token",
    "INKMATCH_URL": "inkmatch_url",
    "INKMATCH_STATIC_DIR": "static_dir",
    "INKMATCH_LOG_LEVEL": "log_level",
    "INKMATCH_JSON_RESPONSE": "json_response",
}


class Settings(BaseModel):
    """Effective server settings."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    host: str = "0.0.0.0"
    port: int = 8787
    mcp_path: str = "/mcp"
    static_prefix: str = "/public/"
    static_dir: Path = PACKAGE_PUBLIC_DIR
    inkmatch_url: str = "https://inkmatch.io"
    log_level: str = "INFO"
    json_response: bool = False

    replicate_api_token: str | None = Field(default=None, repr=False)
    replicate_api_url: str = "https://api.replicate.com/v1/predictions"
    # FLUX schnell
    replicate_model_version: str = (
        "5599ed30703defd1d160a25a63321b4dec97101d98b4674bcc56e41f62f35637"
    )
    poll_interval: float = 1.0
    job_timeout: float = 60.0
    http_timeout: float = 30.0


def deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursive merge; values in `override` win."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def read_config_file(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read a YAML config file.

    The file may nest keys under a top-level `inkmatch:` section or keep them
    flat. A missing file yields an empty mapping.
    """
    p = Path(path)
    if not p.exists():
        return {}
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {p} must contain a mapping, got {type(data).__name__}")
    section = data.get("inkmatch")
    return dict(section) if isinstance(section, dict) else data


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_name, key in ENV_KEYS.items():
        value = environ.get(env_name)
        if value is not None and value != "":
            overrides[key] = value
    return overrides


def load_settings(
    config_path: str | os.PathLike[str] | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> Settings:
    """Build settings from defaults, an optional YAML file, env and overrides."""
    env = os.environ if environ is None else environ
    path = config_path or env.get(CONFIG_ENV_VAR)

    data: dict[str, Any] = {}
    if path:
        data = deep_merge(data, read_config_file(path))
    data = deep_merge(data, _env_overrides(env))
    data = deep_merge(data, {k: v for k, v in overrides.items() if v is not None})
    return Settings.model_validate(data)


_settings: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        with _settings_lock:
            if _settings is None:
                _settings = load_settings()
    return _settings


def set_settings(settings: Settings | None) -> None:
    """Replace (or with None, reset) the process-wide settings."""
    global _settings
    with _settings_lock:
        _settings = settings


__all__ = [
    "PACKAGE_PUBLIC_DIR",
    "Settings",
    "deep_merge",
    "get_settings",
    "load_settings",
    "read_config_file",
    "set_settings",
]
