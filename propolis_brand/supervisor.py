"""Supervision of the detached propolis-server process."""

from __future__ import annotations

import os
import signal
import time
from pathlib import Path
from typing import Optional

from propolis_brand.constants import (
    BINARY_NAME,
    DEFAULT_GRACE_PERIOD,
    POLL_INTERVAL,
    PROC_NOT_STARTED,
    PROC_RUNNING,
    PROC_STOPPED,
    PROC_STOPPING,
)
from propolis_brand.exceptions import BinaryNotExecutable, SupervisorCleanupError, SupervisorFatalError
from propolis_brand.host import DetachedLauncher
from propolis_brand.models import Outcome, SupervisedProcess
from propolis_brand.utils import ensure_directory, log


class ProcessSupervisor:
    """Start, probe and stop the hypervisor through a PID repository.

    ``store`` needs ``load``/``save``/``clear``; ``launcher`` needs ``launch`` and ``command_name``.
    """

    def __init__(
        self,
        store,
        launcher=None,
        grace_period: int = DEFAULT_GRACE_PERIOD,
        poll_interval: float = POLL_INTERVAL,
    ) -> None:
        self.store = store
        self.launcher = launcher if launcher is not None else DetachedLauncher()
        self.grace_period = grace_period
        self.poll_interval = poll_interval
        self.state = PROC_NOT_STARTED

    def _transition(self, new_state: str) -> None:
        log("DEBUG", f"Supervisor state: {self.state} -> {new_state}")
        self.state = new_state

    @staticmethod
    def check_binary(binary_path: Path) -> None:
        if not binary_path.is_file():
            raise BinaryNotExecutable(f"Hypervisor binary not found: {binary_path}")
        if not os.access(binary_path, os.X_OK):
            raise BinaryNotExecutable(f"Hypervisor binary is not executable: {binary_path}")

    def start(
        self,
        zone_name: str,
        binary_path: Path,
        config_path: Path,
        log_file: Path,
        cwd: Optional[Path] = None,
    ) -> int:
        self.check_binary(binary_path)

        existing = self.store.load()
        if existing is not None and self.is_alive(existing.pid) and self.owns(existing.pid):
            log("WARN", f"propolis-server already running for {zone_name} (PID {existing.pid}); not starting another")
            self._transition(PROC_RUNNING)
            return existing.pid

        ensure_directory(log_file.parent)
        argv = [str(binary_path), "run", str(config_path)]
        pid = self.launcher.launch(zone_name, argv, log_file, cwd or binary_path.parent)
        try:
            self.store.save(SupervisedProcess(pid=pid, pid_file=self.store.pid_file, log_file=log_file))
        except OSError as exc:
            # every running process must be in the PID file
            log("ERROR", f"Unable to record PID {pid}; killing it: {exc}")
            try:
                os.kill(pid, signal.SIGKILL)
            except ProcessLookupError:
                pass
            except OSError as kill_exc:
                log("WARN", f"Unable to kill PID {pid}: {kill_exc}")
            self.is_alive(pid)
            raise SupervisorFatalError(f"Failed to record propolis-server PID {pid}: {exc}") from exc
        self._transition(PROC_RUNNING)
        log("INFO", f"Started propolis-server for {zone_name} (PID {pid}, log {log_file})")
        return pid

    @staticmethod
    def is_alive(pid: int) -> bool:
        """Signal-0 probe; reaps the PID first when it is our own exited child."""
        if pid <= 0:
            return False
        try:
            reaped, _ = os.waitpid(pid, os.WNOHANG)
        except ChildProcessError:
            pass
        else:
            if reaped == pid:
                return False
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            return True
        return True

    def owns(self, pid: int) -> bool:
        """False only when ``pid`` is known to run something other than propolis-server."""
        name = self.launcher.command_name(pid)
        if name is None:
            return True
        return Path(name).name == BINARY_NAME

    def _signal(self, pid: int, signum: int) -> None:
        try:
            os.kill(pid, signum)
        except ProcessLookupError:
            log("DEBUG", f"PID {pid} exited before {signal.Signals(signum).name}")
        except OSError as exc:
            raise SupervisorCleanupError(f"Unable to send {signal.Signals(signum).name} to PID {pid}: {exc}") from exc

    def _wait_for_exit(self, pid: int, grace_period: int) -> bool:
        waited = 0.0
        while waited < grace_period:
            if not self.is_alive(pid):
                return True
            time.sleep(self.poll_interval)
            waited += self.poll_interval
        return not self.is_alive(pid)

    def stop(self, grace_period: Optional[int] = None) -> Outcome:
        """SIGTERM, wait up to ``grace_period`` seconds, then SIGKILL.

        The PID file is cleared however this ends.
        """
        if grace_period is None:
            grace_period = self.grace_period
        outcome = Outcome()
        try:
            record = self.store.load()
            if record is None:
                log("DEBUG", "No PID file; propolis-server already stopped")
                return outcome
            pid = record.pid
            if not self.is_alive(pid):
                log("INFO", f"Clearing stale PID file for exited process {pid}")
                return outcome
            if not self.owns(pid):
                log("WARN", f"PID {pid} now belongs to another program; clearing the PID file without signalling")
                return outcome

            self._transition(PROC_STOPPING)
            log("INFO", f"Stopping propolis-server (PID {pid})")
            self._signal(pid, signal.SIGTERM)
            if self._wait_for_exit(pid, grace_period):
                log("INFO", f"propolis-server (PID {pid}) exited")
                return outcome

            log("WARN", f"propolis-server (PID {pid}) still running after {grace_period}s; sending SIGKILL")
            self._signal(pid, signal.SIGKILL)
            # reap if it was our child
            self.is_alive(pid)
        except SupervisorCleanupError as exc:
            log("WARN", str(exc))
            outcome.recover(str(exc))
        finally:
            try:
                self.store.clear()
            except OSError as exc:
                log("WARN", f"Unable to remove PID file: {exc}")
                outcome.recover(f"Unable to remove PID file: {exc}")
            self._transition(PROC_STOPPED)
        return outcome

    def process_state(self) -> str:
        record = self.store.load()
        if record is None:
            return PROC_NOT_STARTED
        return PROC_RUNNING if self.is_alive(record.pid) and self.owns(record.pid) else PROC_STOPPED
