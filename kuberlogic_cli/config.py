"""API server settings read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


class ConfigError(Exception):
    """The environment does not hold a valid configuration."""


@dataclass
class CorsConfig:
    allowed_origins: list[str] = field(default_factory=lambda: ["https://*", "http://*"])


@dataclass
class Config:
    domain: str
    bind_host: str = "0.0.0.0"
    http_bind_port: int = 8001
    kubeconfig_path: str = "/root/.kube/config"
    debug_logs: bool = False
    cors: CorsConfig = field(default_factory=CorsConfig)
    sentry_dsn: str = ""
    deployment_id: str = ""


def _parse_bool(key: str, value: str) -> bool:
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"init config failed: invalid boolean for {key}: {value!r}")


def init_config(prefix: str, environ: Mapping[str, str] | None = None) -> Config:
    """Read the configuration from ``environ`` (the process environment by default)."""
    env = os.environ if environ is None else environ

    def key(name: str) -> str:
        return f"{prefix.upper()}_{name}" if prefix else name

    def get(name: str) -> str | None:
        return env.get(key(name))

    domain = get("DOMAIN")
    if domain is None:
        raise ConfigError(f"init config failed: required key {key('DOMAIN')} is missing")
    cfg = Config(domain=domain)

    if (value := get("BIND_HOST")) is not None:
        cfg.bind_host = value
    if (value := get("HTTP_BIND_PORT")) is not None:
        try:
            cfg.http_bind_port = int(value)
        except ValueError:
            raise ConfigError(
                f"init config failed: invalid integer for {key('HTTP_BIND_PORT')}: {value!r}"
            ) from None
    if (value := get("KUBECONFIG_PATH")) is not None:
        cfg.kubeconfig_path = value
    if (value := get("DEBUG_LOGS")) is not None:
        cfg.debug_logs = _parse_bool(key("DEBUG_LOGS"), value)
    if (value := get("CORS_ALLOWED_ORIGINS")) is not None:
        cfg.cors.allowed_origins = [item.strip() for item in value.split(",") if item.strip()]
    if (value := get("SENTRY_DSN")) is not None:
        cfg.sentry_dsn = value
    if (value := get("DEPLOYMENT_ID")) is not None:
        cfg.deployment_id = value
    return cfg