"""
Configuration for the funding assistant MCP server.

Settings are layered:
1. Built-in defaults (dataclass defaults below)
2. YAML config file (config/server.yaml, or the path in MCP_SERVER_CONFIG)
3. Environment variables (FLUENTLAB_* for the remote API, MCP_* for the server)
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "server.yaml"
DEFAULT_API_URL = "https://api.fundfluent.io/exp/sme-exp"
TRANSPORTS = ("stdio", "sse", "streamable-http")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ApiSettings:
    """Connection settings for the remote funding data service."""

    base_url: str = DEFAULT_API_URL
    api_key: str = ""
    timeout: float = 10.0
    # Surface auth/transport failures of the slug and checklist lookups
    # instead of collapsing them into the *_NOT_FOUND kinds.
    propagate_api_errors: bool = False


@dataclass(frozen=True)
class ServerSettings:
    name: str = "funding-assistant"
    title: str = "Funding Assistant"
    version: str = "1.0.0"
    host: str = "127.0.0.1"
    port: int = 3500
    log_level: str = "INFO"
    transport: str = "stdio"
    allowed_origins: Tuple[str, ...] = ("*",)
    auth_token: str = ""


@dataclass(frozen=True)
class Settings:
    api: ApiSettings = field(default_factory=ApiSettings)
    server: ServerSettings = field(default_factory=ServerSettings)


def load_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"MCP server config not found at {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")
    return data


def is_production_env(environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    True when ENVIRONMENT, APP_ENV or NODE_ENV is "production"
    (case-insensitive, surrounding whitespace ignored).
    """
    env = os.environ if environ is None else environ
    for name in ("ENVIRONMENT", "APP_ENV", "NODE_ENV"):
        if env.get(name, "").strip().lower() == "production":
            return True
    return False


def _env_flag(value: str) -> bool:
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


def _split_csv(value: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _resolve_config(environ: Mapping[str, str]) -> Dict[str, Any]:
    explicit = environ.get("MCP_SERVER_CONFIG", "").strip()
    if explicit:
        return load_config(Path(explicit))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return {}


def load_settings(
    config: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build immutable settings from a config mapping and the environment.

    Args:
        config: Parsed YAML config. When omitted the config file is located
            via MCP_SERVER_CONFIG or the bundled config/server.yaml.
        environ: Environment mapping, defaults to os.environ.

    Returns:
        Settings with environment variables taking precedence over the file.
    """
    env = os.environ if environ is None else environ
    if config is None:
        config = _resolve_config(env)

    api_cfg = config.get("api", {}) or {}
    server_cfg = config.get("server", {}) or {}
    api_defaults = ApiSettings()
    server_defaults = ServerSettings()

    api = ApiSettings(
        base_url=(
            env.get("FLUENTLAB_MCP_API_URL", "").strip()
            or str(api_cfg.get("base_url") or api_defaults.base_url)
        ),
        api_key=env.get("FLUENTLAB_API_KEY", "").strip(),
        timeout=float(env.get("FLUENTLAB_API_TIMEOUT", api_cfg.get("timeout", api_defaults.timeout))),
        propagate_api_errors=_env_flag(
            env.get(
                "FLUENTLAB_PROPAGATE_API_ERRORS",
                str(api_cfg.get("propagate_api_errors", api_defaults.propagate_api_errors)),
            )
        ),
    )

    origins = env.get("MCP_ALLOWED_ORIGINS", "").strip()
    if origins:
        allowed_origins = _split_csv(origins)
    else:
        allowed_origins = tuple(server_cfg.get("allowed_origins") or server_defaults.allowed_origins)

    transport = env.get("MCP_TRANSPORT", str(server_cfg.get("transport", server_defaults.transport))).strip()
    if transport not in TRANSPORTS:
        raise ValueError(f"Unsupported transport '{transport}'. Must be one of: {', '.join(TRANSPORTS)}")

    log_level = env.get("MCP_LOG_LEVEL", str(server_cfg.get("log_level", server_defaults.log_level))).upper()
    if log_level == "WARN":
        log_level = "WARNING"
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {log_level}. Must be one of: {', '.join(LOG_LEVELS)}")

    server = ServerSettings(
        name=str(server_cfg.get("name", server_defaults.name)),
        title=str(server_cfg.get("title", server_defaults.title)),
        version=str(server_cfg.get("version", server_defaults.version)),
        host=env.get("MCP_SERVER_HOST", str(server_cfg.get("host", server_defaults.host))),
        port=int(
            env.get("MCP_SERVER_PORT")
            or env.get("PORT")
            or server_cfg.get("port", server_defaults.port)
        ),
        log_level=log_level,
        transport=transport,
        allowed_origins=allowed_origins,
        auth_token=env.get("MCP_SERVER_TOKEN", "").strip(),
    )
    return Settings(api=api, server=server)
