"""Host capabilities: link inventory, VNIC management, zone state and process launch.

Each class wraps one illumos tool so the coordinator can be handed a fake in
tests. The method names are the only contract the rest of the brand relies on.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import List, Optional

from propolis_brand.exceptions import NetworkResourceError, SupervisorFatalError
from propolis_brand.utils import ensure_directory, log, run


def _stderr_of(exc: subprocess.CalledProcessError) -> str:
    detail = (exc.stderr or exc.stdout or "").strip()
    return detail or f"exit status {exc.returncode}"


class Dladm:
    """Link inventory and VNIC create/query/delete via dladm(8)."""

    def __init__(self, binary: str = "/usr/sbin/dladm") -> None:
        self.binary = binary

    def physical_links(self) -> List[str]:
        try:
            result = run([self.binary, "show-phys", "-p", "-o", "LINK"], capture_output=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            log("WARN", f"Unable to list physical links: {exc}")
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def vnic_exists(self, name: str) -> bool:
        try:
            result = run([self.binary, "show-vnic", "-p", "-o", "LINK", name], check=False, capture_output=True)
        except OSError as exc:
            raise NetworkResourceError(f"Unable to query VNIC {name}: {exc}") from exc
        return result.returncode == 0 and name in result.stdout.split()

    def create_vnic(self, name: str, link: str) -> None:
        try:
            run([self.binary, "create-vnic", "-l", link, name], capture_output=True)
        except subprocess.CalledProcessError as exc:
            raise NetworkResourceError(f"Failed to create VNIC {name} over {link}: {_stderr_of(exc)}") from exc
        except OSError as exc:
            raise NetworkResourceError(f"Failed to create VNIC {name} over {link}: {exc}") from exc

    def delete_vnic(self, name: str) -> None:
        try:
            run([self.binary, "delete-vnic", name], capture_output=True)
        except subprocess.CalledProcessError as exc:
            raise NetworkResourceError(f"Failed to delete VNIC {name}: {_stderr_of(exc)}") from exc
        except OSError as exc:
            raise NetworkResourceError(f"Failed to delete VNIC {name}: {exc}") from exc


class Zoneadm:
    """Current zone state via zoneadm(8)."""

    def __init__(self, binary: str = "/usr/sbin/zoneadm") -> None:
        self.binary = binary

    def zone_state(self, zone_name: str) -> str:
        try:
            result = run([self.binary, "-z", zone_name, "list", "-p"], capture_output=True)
        except subprocess.CalledProcessError as exc:
            raise NetworkResourceError(f"Unable to query state of zone {zone_name}: {_stderr_of(exc)}") from exc
        except OSError as exc:
            raise NetworkResourceError(f"Unable to query state of zone {zone_name}: {exc}") from exc
        # zoneid:zonename:state:zonepath:uuid:brand:ip-type
        fields = result.stdout.strip().split(":")
        if len(fields) < 3 or not fields[2]:
            raise NetworkResourceError(f"Unexpected zoneadm output for {zone_name}: {result.stdout.strip()!r}")
        return fields[2]


class DetachedLauncher:
    """Start a process in its own session so it outlives the calling hook."""

    def launch(self, zone_name: str, argv: List[str], log_file: Path, cwd: Path) -> int:
        ensure_directory(log_file.parent)
        env = dict(os.environ)
        env["ZONENAME"] = zone_name
        log("DEBUG", f"Launching: {' '.join(argv)}")
        with open(log_file, "ab") as out:
            try:
                proc = subprocess.Popen(
                    argv,
                    stdin=subprocess.DEVNULL,
                    stdout=out,
                    stderr=subprocess.STDOUT,
                    cwd=str(cwd),
                    env=env,
                    start_new_session=True,
                    close_fds=True,
                )
            except OSError as exc:
                raise SupervisorFatalError(f"Failed to launch {argv[0]}: {exc}") from exc
        return proc.pid

    def command_name(self, pid: int) -> Optional[str]:
        """Executable name ps(1) reports for ``pid``, or None when it cannot tell."""
        try:
            result = run(["ps", "-o", "comm=", "-p", str(pid)], check=False, capture_output=True)
        except OSError as exc:
            log("DEBUG", f"Unable to inspect PID {pid}: {exc}")
            return None
        name = result.stdout.strip()
        if result.returncode != 0 or not name:
            return None
        return name
