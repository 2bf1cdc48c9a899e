"""Shared test fixtures and in-memory stand-ins for host capabilities."""

from __future__ import annotations

import signal
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from propolis_brand.exceptions import NetworkResourceError
from propolis_brand.models import BrandConfig, SupervisedProcess, ZoneIdentity


class FakeDladm:
    """Link inventory + VNIC table kept in a dict."""

    def __init__(self, links: Optional[List[str]] = None) -> None:
        self.links = ["igb0", "igb1"] if links is None else links
        self.vnics: Dict[str, str] = {}
        self.fail_create = False
        self.fail_delete = False
        self.created: List[str] = []
        self.deleted: List[str] = []

    def physical_links(self) -> List[str]:
        return list(self.links)

    def vnic_exists(self, name: str) -> bool:
        return name in self.vnics

    def create_vnic(self, name: str, link: str) -> None:
        if self.fail_create:
            raise NetworkResourceError(f"Failed to create VNIC {name} over {link}: busy")
        self.vnics[name] = link
        self.created.append(name)

    def delete_vnic(self, name: str) -> None:
        if self.fail_delete:
            raise NetworkResourceError(f"Failed to delete VNIC {name}: busy")
        self.vnics.pop(name, None)
        self.deleted.append(name)


class FakeZoneadm:
    def __init__(self, state: str = "installed") -> None:
        self.state = state
        self.error: Optional[Exception] = None

    def zone_state(self, zone_name: str) -> str:
        if self.error is not None:
            raise self.error
        return self.state


class FakeLauncher:
    def __init__(self, pid: int = 4242) -> None:
        self.pid = pid
        self.calls: List[tuple] = []
        self.command: Optional[str] = None

    def launch(self, zone_name: str, argv: List[str], log_file: Path, cwd: Path) -> int:
        self.calls.append((zone_name, argv, log_file, cwd))
        return self.pid

    def command_name(self, pid: int) -> Optional[str]:
        return self.command


class FakeProcesses:
    """Stand-in for os.kill over a single process."""

    def __init__(self, alive: bool = True, dies_on=(signal.SIGTERM,), exit_after_polls=None) -> None:
        self.alive = alive
        self.dies_on = set(dies_on)
        self.exit_after_polls = exit_after_polls
        self.signals: List[int] = []
        self.polls = 0

    def kill(self, pid, sig):
        self.signals.append(sig)
        if sig == 0:
            if self.alive and self.exit_after_polls is not None and self.polls >= self.exit_after_polls:
                self.alive = False
            self.polls += 1
        if not self.alive:
            raise ProcessLookupError(pid)
        if sig in self.dies_on:
            self.alive = False


class MemoryPidStore:
    """PID repository that never touches disk."""

    def __init__(self, pid: Optional[int] = None) -> None:
        self.pid_file = Path("/nonexistent/propolis.pid")
        self.log_file = Path("/nonexistent/propolis.log")
        self.pid = pid
        self.cleared = 0

    def load(self) -> Optional[SupervisedProcess]:
        if self.pid is None:
            return None
        return SupervisedProcess(pid=self.pid, pid_file=self.pid_file, log_file=self.log_file)

    def save(self, process: SupervisedProcess) -> None:
        self.pid = process.pid

    def clear(self) -> None:
        self.pid = None
        self.cleared += 1


@pytest.fixture
def brand_config(tmp_path) -> BrandConfig:
    """Return a BrandConfig whose source binary is an executable stub under tmp_path."""
    source = tmp_path / "host" / "propolis-server"
    source.parent.mkdir(parents=True)
    source.write_text("#!/bin/sh\nexit 0\n")
    source.chmod(0o755)
    return BrandConfig(
        source_binary=source,
        uplink=None,
        grace_period=10,
        listen_addr="0.0.0.0",
        listen_port=12400,
        log_level="info",
    )


@pytest.fixture
def zone(tmp_path) -> ZoneIdentity:
    root = tmp_path / "zones" / "testzone"
    root.mkdir(parents=True)
    return ZoneIdentity(name="testzone", root_path=root)


@pytest.fixture
def dladm() -> FakeDladm:
    return FakeDladm()


@pytest.fixture
def zoneadm() -> FakeZoneadm:
    return FakeZoneadm()


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def mock_env(monkeypatch):
    """Helper to set environment variables for tests."""

    def _set(**kwargs):
        for key, value in kwargs.items():
            if value is None:
                monkeypatch.delenv(key, raising=False)
            else:
                monkeypatch.setenv(key, str(value))

    return _set


# All environment variables that parse_env() reads; used to ensure a clean slate.
_PARSE_ENV_VARS = [
    "PROPOLIS_BRAND_CONFIG",
    "PROPOLIS_SOURCE_BINARY",
    "PROPOLIS_UPLINK",
    "PROPOLIS_GRACE_PERIOD",
    "PROPOLIS_LISTEN_ADDR",
    "PROPOLIS_LISTEN_PORT",
    "PROPOLIS_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Clear all brand environment variables and point the config file at a missing path."""
    for key in _PARSE_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PROPOLIS_BRAND_CONFIG", str(tmp_path / "missing-brand.yaml"))
