"""Zone lifecycle hooks: install, boot, halt, uninstall, prestate and poststate.

Each hook is a fresh, short-lived run. Nothing is remembered between runs
except the PID file under the zone root and the host's VNIC table, so every
hook starts by looking at both and converges from whatever it finds.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from propolis_brand.constants import SUPPORT_ACTIONS
from propolis_brand.exceptions import (
    BrandError,
    NetworkResourceError,
    ResourceStagingError,
    SupervisorFatalError,
    UsageError,
)
from propolis_brand.host import Zoneadm
from propolis_brand.layout import create_layout, remove_layout, stage_binary, write_default_config
from propolis_brand.models import BrandConfig, Outcome, ZoneIdentity, ZoneRootLayout, ZoneStatus
from propolis_brand.network import NetworkManager
from propolis_brand.state import PidFileStore
from propolis_brand.supervisor import ProcessSupervisor
from propolis_brand.utils import log, vnic_name


def validate_zone(zone_name: Optional[str], zone_root: Optional[str]) -> ZoneIdentity:
    name = (zone_name or "").strip()
    root = (zone_root or "").strip()
    if not name or not root:
        raise UsageError("zone name and zone root are required")
    return ZoneIdentity(name=name, root_path=Path(root))


class LifecycleCoordinator:
    def __init__(
        self,
        zone: ZoneIdentity,
        cfg: BrandConfig,
        network: Optional[NetworkManager] = None,
        supervisor: Optional[ProcessSupervisor] = None,
        zones=None,
    ) -> None:
        self.zone = zone
        self.cfg = cfg
        self.layout = ZoneRootLayout(zone.root_path)
        self.network = network if network is not None else NetworkManager(uplink=cfg.uplink)
        if supervisor is None:
            store = PidFileStore(self.layout.pid_file, self.layout.log_file)
            supervisor = ProcessSupervisor(store, grace_period=cfg.grace_period)
        self.supervisor = supervisor
        self.zones = zones if zones is not None else Zoneadm()

    def install(self) -> Outcome:
        outcome = Outcome()
        if not self.zone.root_path.is_dir():
            raise BrandError(f"Zone root {self.zone.root_path} does not exist")
        try:
            create_layout(self.layout)
        except OSError as exc:
            raise BrandError(f"Failed to create {self.layout.root}: {exc}") from exc

        try:
            write_default_config(self.layout, self.cfg)
        except ResourceStagingError as exc:
            log("WARN", str(exc))
            outcome.recover(str(exc))

        try:
            stage_binary(self.layout, self.cfg.source_binary)
        except ResourceStagingError as exc:
            log("WARN", str(exc))
            outcome.recover(str(exc))

        log("SUCCESS", f"Installed zone {self.zone.name} at {self.layout.root}")
        return outcome

    def boot(self) -> Outcome:
        name = self.zone.name
        # fatal before anything is provisioned
        self.supervisor.check_binary(self.layout.binary_path)

        outcome = self.network.ensure_interface(name)
        try:
            self.supervisor.start(
                name,
                self.layout.binary_path,
                self.layout.config_path,
                self.layout.log_file,
                cwd=self.layout.root,
            )
        except SupervisorFatalError:
            self.network.remove_interface(name)
            raise
        log("SUCCESS", f"Booted zone {name}")
        return outcome

    def halt(self) -> Outcome:
        outcome = Outcome()
        outcome.merge(self.supervisor.stop(self.cfg.grace_period))
        outcome.merge(self.network.remove_interface(self.zone.name))
        log("INFO", f"Halted zone {self.zone.name}")
        return outcome

    def uninstall(self) -> Outcome:
        outcome = Outcome()
        for message in remove_layout(self.layout):
            outcome.recover(message)
        try:
            self.zone.root_path.rmdir()
        except FileNotFoundError:
            pass
        except OSError as exc:
            log("DEBUG", f"Leaving zone root {self.zone.root_path} in place: {exc}")
        log("INFO", f"Uninstalled zone {self.zone.name}")
        return outcome

    def prestate(self) -> Outcome:
        return self.network.ensure_interface(self.zone.name)

    def poststate(self) -> Outcome:
        name = self.zone.name
        try:
            zone_state = self.zones.zone_state(name)
        except NetworkResourceError as exc:
            message = f"{exc}; leaving VNIC {vnic_name(name)} in place"
            log("WARN", message)
            outcome = Outcome()
            outcome.recover(message)
            return outcome
        return self.network.remove_interface_if_zone_not_running(name, zone_state)

    def support(self, action: str) -> Outcome:
        if action not in SUPPORT_ACTIONS:
            raise UsageError(f"unknown support action '{action}' (expected one of: {', '.join(SUPPORT_ACTIONS)})")
        return getattr(self, action)()

    def status(self) -> ZoneStatus:
        record = self.supervisor.store.load()
        try:
            vnic_state = self.network.query_state(self.zone.name)
        except NetworkResourceError as exc:
            log("WARN", str(exc))
            vnic_state = "unknown"
        return ZoneStatus(
            zone=self.zone.name,
            installed=self.layout.root.is_dir(),
            process_state=self.supervisor.process_state(),
            pid=record.pid if record is not None else None,
            vnic=vnic_name(self.zone.name),
            vnic_state=vnic_state,
            log_file=self.layout.log_file,
        )

    def read_log(self, tail: int = 0) -> Optional[List[str]]:
        """Lines of the hypervisor log, or None when it has never been written."""
        try:
            content = self.layout.log_file.read_text(errors="replace")
        except FileNotFoundError:
            return None
        lines = content.splitlines()
        if tail > 0:
            return lines[-tail:]
        return lines
