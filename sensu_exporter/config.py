"""Exporter configuration: defaults, YAML file, environment, CLI overrides."""

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError

CONFIG_ENV = "SENSU_EXPORTER_CONFIG"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ExporterConfig:
    # exporter port list:
    # https://github.com/prometheus/prometheus/wiki/Default-port-allocations
    listen_address: str = ":9251"
    api_url: str = "http://localhost:4567"
    timeout: float = 3.0
    cache: bool = False
    severity: bool = False
    poll_interval: float = 0.0
    verify_tls: bool = True
    metrics_path: str = "/metrics"
    log_level: str = "INFO"


# YAML key -> field
_YAML_KEYS = {
    "listen": "listen_address",
    "api": "api_url",
    "timeout": "timeout",
    "cache": "cache",
    "severity": "severity",
    "poll_interval": "poll_interval",
    "verify_tls": "verify_tls",
    "metrics_path": "metrics_path",
    "log_level": "log_level",
}

# env var -> field
_ENV_VARS = {
    "SENSU_EXPORTER_LISTEN": "listen_address",
    "SENSU_EXPORTER_API": "api_url",
    "SENSU_EXPORTER_TIMEOUT": "timeout",
    "SENSU_EXPORTER_CACHE": "cache",
    "SENSU_EXPORTER_SEVERITY": "severity",
    "SENSU_EXPORTER_POLL_INTERVAL": "poll_interval",
    "SENSU_EXPORTER_VERIFY_TLS": "verify_tls",
    "SENSU_EXPORTER_METRICS_PATH": "metrics_path",
    "SENSU_EXPORTER_LOG_LEVEL": "log_level",
}

_FIELD_TYPES = {f.name: f.type for f in fields(ExporterConfig)}


def _truthy(v: Any) -> bool:
    if v is True:
        return True
    if v is False or v is None:
        return False
    s = str(v).strip().lower()
    return s in ("1", "on", "true", "yes", "enabled")


def _coerce(name: str, v: Any) -> Any:
    kind = _FIELD_TYPES[name]
    if kind in (bool, "bool"):
        return _truthy(v)
    if kind in (float, "float"):
        if isinstance(v, bool):
            raise ConfigError(f"{name}: expected a number, got {v!r}")
        try:
            return float(v)
        except (TypeError, ValueError):
            raise ConfigError(f"{name}: expected a number, got {v!r}") from None
    if v is None or isinstance(v, (dict, list)):
        raise ConfigError(f"{name}: expected a string, got {v!r}")
    return str(v)


def _load_yaml(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(cfg, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    unknown = sorted(str(k) for k in cfg if k not in _YAML_KEYS)
    if unknown:
        raise ConfigError(f"{path}: unknown keys: {', '.join(unknown)}")
    return {_YAML_KEYS[k]: _coerce(_YAML_KEYS[k], v) for k, v in cfg.items()}


def _load_env(environ: Mapping[str, str]) -> Dict[str, Any]:
    return {field: _coerce(field, environ[var]) for var, field in _ENV_VARS.items() if var in environ}


def parse_listen_address(addr: str) -> Tuple[str, int]:
    """Split ``host:port``; an empty host binds every interface."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ConfigError(f"invalid listen address {addr!r}, expected host:port")
    port_num = int(port)
    if not 0 <= port_num <= 65535:
        raise ConfigError(f"invalid listen port {port_num}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host or "0.0.0.0", port_num


def validate(cfg: ExporterConfig) -> ExporterConfig:
    if not cfg.api_url.startswith(("http://", "https://")):
        raise ConfigError(f"api url must start with http:// or https://, got {cfg.api_url!r}")
    if cfg.timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {cfg.timeout}")
    if cfg.poll_interval < 0:
        raise ConfigError(f"poll interval must not be negative, got {cfg.poll_interval}")
    if not cfg.metrics_path.startswith("/"):
        raise ConfigError(f"metrics path must start with '/', got {cfg.metrics_path!r}")
    if cfg.log_level.upper() not in LOG_LEVELS:
        raise ConfigError(f"unknown log level {cfg.log_level!r}")
    parse_listen_address(cfg.listen_address)
    return replace(cfg, log_level=cfg.log_level.upper())


def load_config(
    path: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ExporterConfig:
    """Build the effective configuration.

    Precedence, lowest first: defaults, YAML file (``path`` or
    ``$SENSU_EXPORTER_CONFIG``), environment variables, ``overrides``.
    Overrides set to None are ignored.
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    path = path or environ.get(CONFIG_ENV)
    if path:
        values.update(_load_yaml(path))
    values.update(_load_env(environ))
    for k, v in (overrides or {}).items():
        if v is None:
            continue
        if k not in _FIELD_TYPES:
            raise ConfigError(f"unknown setting {k!r}")
        values[k] = _coerce(k, v)

    return validate(ExporterConfig(**values))
