"""Data models for the propolis zone brand."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from propolis_brand.constants import (
    BINARY_NAME,
    CONFIG_FILE_NAME,
    DEV_DIR,
    ETC_DIR,
    LOG_DIR,
    LOG_FILE_NAME,
    PID_FILE_NAME,
    PROPOLIS_DIR,
    ROOT_DIR_NAME,
    RUN_DIR,
)

OK = "ok"
RECOVERED = "recovered"
FATAL = "fatal"


@dataclass(frozen=True)
class ZoneIdentity:
    name: str
    root_path: Path


@dataclass
class VirtualInterface:
    name: str
    physical_link: Optional[str] = None


@dataclass
class SupervisedProcess:
    pid: int
    pid_file: Path
    log_file: Path


@dataclass(frozen=True)
class ZoneRootLayout:
    """Paths of the tree the brand owns under ``<zone-root>/root``."""

    zone_root: Path

    @property
    def root(self) -> Path:
        return self.zone_root / ROOT_DIR_NAME

    @property
    def propolis_dir(self) -> Path:
        return self.root / PROPOLIS_DIR

    @property
    def binary_path(self) -> Path:
        return self.propolis_dir / BINARY_NAME

    @property
    def config_path(self) -> Path:
        return self.propolis_dir / CONFIG_FILE_NAME

    @property
    def pid_file(self) -> Path:
        return self.root / RUN_DIR / PID_FILE_NAME

    @property
    def log_file(self) -> Path:
        return self.root / LOG_DIR / LOG_FILE_NAME

    def directories(self) -> List[Path]:
        return [
            self.root / DEV_DIR,
            self.root / ETC_DIR,
            self.root / RUN_DIR,
            self.root / LOG_DIR,
            self.propolis_dir,
        ]


@dataclass
class BrandConfig:
    source_binary: Path
    uplink: Optional[str]
    grace_period: int
    listen_addr: str
    listen_port: int
    log_level: str
    config_file: Optional[Path] = None


@dataclass
class Outcome:
    """Result of a hook or best-effort step.

    ``recovered`` keeps the warnings of steps that failed without aborting the
    hook; ``fatal`` carries the error that did abort it.
    """

    status: str = OK
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def recover(self, message: str) -> None:
        self.warnings.append(message)
        if self.status == OK:
            self.status = RECOVERED

    def fail(self, message: str) -> None:
        self.error = message
        self.status = FATAL

    def merge(self, other: "Outcome") -> "Outcome":
        for message in other.warnings:
            self.recover(message)
        return self

    @property
    def fatal(self) -> bool:
        return self.status == FATAL

    @property
    def exit_code(self) -> int:
        return 1 if self.fatal else 0


@dataclass
class ZoneStatus:
    zone: str
    installed: bool
    process_state: str
    pid: Optional[int]
    vnic: str
    vnic_state: str
    log_file: Path
