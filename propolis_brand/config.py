"""Configuration loading and environment variable parsing for the propolis brand."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

try:
    import yaml  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required but not installed") from exc

from propolis_brand.constants import (
    _ENV_KEYS,
    DEFAULT_CONFIG_PATH,
    DEFAULT_GRACE_PERIOD,
    DEFAULT_LISTEN_ADDR,
    DEFAULT_LISTEN_PORT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SOURCE_BINARY,
    SUPPORTED_LOG_LEVELS,
)
from propolis_brand.exceptions import ConfigError
from propolis_brand.models import BrandConfig
from propolis_brand.utils import get_env, log, parse_int


def load_brand_config(config_path: Optional[Path] = None) -> Dict[str, object]:
    """Read the optional YAML settings file; a missing file yields no overrides."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    if not config_path.exists():
        log("DEBUG", f"No brand config at {config_path}; using defaults")
        return {}
    try:
        data = yaml.safe_load(config_path.read_text())
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to read brand config {config_path}: {exc}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Brand config {config_path} must be a mapping")
    unknown = sorted(set(data) - set(_ENV_KEYS))
    if unknown:
        log("WARN", f"Ignoring unknown brand config keys: {', '.join(unknown)}")
    return {key: value for key, value in data.items() if key in _ENV_KEYS}


def default_config() -> BrandConfig:
    return BrandConfig(
        source_binary=DEFAULT_SOURCE_BINARY,
        uplink=None,
        grace_period=DEFAULT_GRACE_PERIOD,
        listen_addr=DEFAULT_LISTEN_ADDR,
        listen_port=DEFAULT_LISTEN_PORT,
        log_level=DEFAULT_LOG_LEVEL,
    )


def _setting(name: str, file_values: Dict[str, object], default: object) -> object:
    raw = get_env(_ENV_KEYS[name])
    if raw is not None and raw.strip():
        return raw.strip()
    value = file_values.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    return value.strip() if isinstance(value, str) else value


def parse_env(config_path: Optional[Path] = None) -> BrandConfig:
    """Resolve settings: environment, then YAML file, then built-in defaults."""
    if config_path is None:
        override = get_env("PROPOLIS_BRAND_CONFIG")
        config_path = Path(override) if override else DEFAULT_CONFIG_PATH
    file_values = load_brand_config(config_path)

    source_binary = Path(str(_setting("source_binary", file_values, DEFAULT_SOURCE_BINARY)))

    uplink_raw = _setting("uplink", file_values, None)
    uplink = str(uplink_raw) if uplink_raw is not None else None

    grace_period = parse_int(
        _ENV_KEYS["grace_period"],
        _setting("grace_period", file_values, DEFAULT_GRACE_PERIOD),
        min_val=0,
    )
    listen_port = parse_int(
        _ENV_KEYS["listen_port"],
        _setting("listen_port", file_values, DEFAULT_LISTEN_PORT),
        min_val=1,
        max_val=65535,
    )
    listen_addr = str(_setting("listen_addr", file_values, DEFAULT_LISTEN_ADDR))

    log_level = str(_setting("log_level", file_values, DEFAULT_LOG_LEVEL)).lower()
    if log_level not in SUPPORTED_LOG_LEVELS:
        supported = ", ".join(sorted(SUPPORTED_LOG_LEVELS))
        raise ConfigError(f"Unsupported {_ENV_KEYS['log_level']} '{log_level}'. Choose from: {supported}")

    return BrandConfig(
        source_binary=source_binary,
        uplink=uplink,
        grace_period=grace_period,
        listen_addr=listen_addr,
        listen_port=listen_port,
        log_level=log_level,
        config_file=config_path if config_path.exists() else None,
    )
