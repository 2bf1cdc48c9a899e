"""PID file persistence for the supervised hypervisor."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from propolis_brand.models import SupervisedProcess
from propolis_brand.utils import log, write_file_atomic


class PidFileStore:
    """Durable record of the hypervisor PID across hook invocations."""

    def __init__(self, pid_file: Path, log_file: Path) -> None:
        self.pid_file = pid_file
        self.log_file = log_file

    def load(self) -> Optional[SupervisedProcess]:
        try:
            raw = self.pid_file.read_text().strip()
        except FileNotFoundError:
            return None
        except OSError as exc:
            log("WARN", f"Unable to read {self.pid_file}: {exc}")
            return None
        try:
            pid = int(raw)
        except ValueError:
            log("WARN", f"Ignoring malformed PID file {self.pid_file} ({raw!r})")
            return None
        if pid <= 0:
            log("WARN", f"Ignoring invalid PID {pid} in {self.pid_file}")
            return None
        return SupervisedProcess(pid=pid, pid_file=self.pid_file, log_file=self.log_file)

    def save(self, process: SupervisedProcess) -> None:
        write_file_atomic(self.pid_file, f"{process.pid}\n")

    def clear(self) -> None:
        self.pid_file.unlink(missing_ok=True)
