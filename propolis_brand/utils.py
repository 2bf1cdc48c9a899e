"""Utility functions for the propolis zone brand."""

from __future__ import annotations

import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

from propolis_brand.constants import (
    _LOG_VERBOSE,
    BRAND_NAME,
    VNIC_PREFIX,
)
from propolis_brand.exceptions import ConfigError

_DIAGNOSTIC_LEVELS = {"WARN", "ERROR"}


def log(level: str, message: str) -> None:
    """Brand-prefixed logging; warnings and errors go to the diagnostic stream."""
    if level == "DEBUG" and not _LOG_VERBOSE:
        return
    stream = sys.stderr if level in _DIAGNOSTIC_LEVELS else sys.stdout
    colours = {
        "INFO": "\033[0;34m",
        "WARN": "\033[1;33m",
        "ERROR": "\033[0;31m",
        "SUCCESS": "\033[0;32m",
        "DEBUG": "\033[0;90m",
    }
    try:
        tty = stream.isatty()
    except (AttributeError, ValueError):
        tty = False
    colour = colours.get(level, "") if tty else ""
    reset = "\033[0m" if colour else ""
    print(f"{BRAND_NAME}: {colour}[{level}]{reset} {message}", file=stream, flush=True)


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


def parse_int(name: str, raw: object, min_val: int = 1, max_val: Optional[int] = None) -> int:
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer (got '{raw}')")
    if value < min_val:
        raise ConfigError(f"{name} must be >= {min_val} (got {value})")
    if max_val is not None and value > max_val:
        raise ConfigError(f"{name} must be <= {max_val} (got {value})")
    return value


def vnic_name(zone_name: str) -> str:
    """Name of the VNIC that belongs to ``zone_name``."""
    return f"{VNIC_PREFIX}{zone_name}"


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def write_file_atomic(path: Path, content: str, mode: int = 0o644) -> None:
    """Write ``content`` next to ``path`` and rename it into place."""
    ensure_directory(path.parent)
    with tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent, prefix=f".{path.name}.") as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    try:
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise


def run(cmd: List[str], check: bool = True, **kwargs) -> subprocess.CompletedProcess:
    """Run command with logging."""
    log("DEBUG", f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, check=check, text=True, **kwargs)
    return result
