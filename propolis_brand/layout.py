"""Zone root scaffolding: directories, staged binary and default config."""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path
from typing import List

from propolis_brand.exceptions import ResourceStagingError
from propolis_brand.models import BrandConfig, ZoneRootLayout
from propolis_brand.utils import ensure_directory, log, write_file_atomic


def render_config(cfg: BrandConfig) -> str:
    lines = [
        "[main]",
        f'listen_addr = "{cfg.listen_addr}"',
        f"listen_port = {cfg.listen_port}",
        "",
        "[log]",
        f'level = "{cfg.log_level}"',
    ]
    return "\n".join(lines) + "\n"


def create_layout(layout: ZoneRootLayout) -> None:
    for directory in layout.directories():
        ensure_directory(directory)
    log("DEBUG", f"Created zone root layout under {layout.root}")


def write_default_config(layout: ZoneRootLayout, cfg: BrandConfig) -> Path:
    try:
        write_file_atomic(layout.config_path, render_config(cfg))
    except OSError as exc:
        raise ResourceStagingError(f"Failed to write {layout.config_path}: {exc}") from exc
    return layout.config_path


def stage_binary(layout: ZoneRootLayout, source: Path) -> Path:
    if not source.is_file():
        raise ResourceStagingError(
            f"propolis-server not found at {source}; copy it to {layout.binary_path} before booting"
        )
    try:
        ensure_directory(layout.binary_path.parent)
        shutil.copy2(source, layout.binary_path)
        os.chmod(layout.binary_path, 0o755)
    except OSError as exc:
        raise ResourceStagingError(f"Failed to stage {source} into {layout.binary_path}: {exc}") from exc
    return layout.binary_path


def remove_layout(layout: ZoneRootLayout) -> List[str]:
    """Delete the brand-owned tree; returns warnings for paths that survived."""
    warnings: List[str] = []
    if not layout.root.exists() and not layout.root.is_symlink():
        log("DEBUG", f"{layout.root} already absent")
        return warnings

    if layout.root.is_symlink():
        # never follow a symlinked root out of the zone path
        try:
            layout.root.unlink()
        except OSError as exc:
            warnings.append(f"Failed to remove {layout.root}: {exc}")
            log("WARN", warnings[-1])
        return warnings

    def _onexc(func, path, exc):
        warnings.append(f"Failed to remove {path}: {exc}")

    if sys.version_info >= (3, 12):
        shutil.rmtree(layout.root, onexc=_onexc)
    else:  # pragma: no cover
        shutil.rmtree(layout.root, onerror=lambda func, path, exc_info: _onexc(func, path, exc_info[1]))
    for message in warnings:
        log("WARN", message)
    return warnings
