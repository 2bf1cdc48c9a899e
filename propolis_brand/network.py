"""VNIC provisioning for propolis zones."""

from __future__ import annotations

from typing import Optional

from propolis_brand.constants import IFACE_ABSENT, IFACE_PRESENT, ZONE_RUNNING
from propolis_brand.exceptions import NetworkResourceError
from propolis_brand.host import Dladm
from propolis_brand.models import Outcome, VirtualInterface
from propolis_brand.utils import log, vnic_name


class NetworkManager:
    """Idempotent create/query/delete of the per-zone VNIC.

    Every failure here is recoverable: the caller gets an ``Outcome`` carrying
    the warning and the hook carries on.
    """

    def __init__(self, links=None, interfaces=None, uplink: Optional[str] = None) -> None:
        dladm = Dladm() if links is None or interfaces is None else None
        self.links = links if links is not None else dladm
        self.interfaces = interfaces if interfaces is not None else dladm
        self.uplink = uplink

    def query_state(self, zone_name: str) -> str:
        name = vnic_name(zone_name)
        return IFACE_PRESENT if self.interfaces.vnic_exists(name) else IFACE_ABSENT

    def _default_uplink(self) -> Optional[str]:
        if self.uplink:
            return self.uplink
        links = self.links.physical_links()
        return links[0] if links else None

    def ensure_interface(self, zone_name: str) -> Outcome:
        outcome = Outcome()
        name = vnic_name(zone_name)
        try:
            if self.query_state(zone_name) == IFACE_PRESENT:
                log("DEBUG", f"VNIC {name} already present")
                return outcome
            uplink = self._default_uplink()
            if uplink is None:
                message = f"No physical link found; zone {zone_name} will boot without network"
                log("WARN", message)
                outcome.recover(message)
                return outcome
            iface = VirtualInterface(name=name, physical_link=uplink)
            self.interfaces.create_vnic(iface.name, iface.physical_link)
            log("INFO", f"Created VNIC {iface.name} over {iface.physical_link}")
        except NetworkResourceError as exc:
            log("WARN", str(exc))
            outcome.recover(str(exc))
        return outcome

    def remove_interface(self, zone_name: str) -> Outcome:
        outcome = Outcome()
        name = vnic_name(zone_name)
        try:
            if self.query_state(zone_name) == IFACE_ABSENT:
                log("DEBUG", f"VNIC {name} already absent")
                return outcome
            self.interfaces.delete_vnic(name)
            log("INFO", f"Deleted VNIC {name}")
        except NetworkResourceError as exc:
            log("WARN", str(exc))
            outcome.recover(str(exc))
        return outcome

    def remove_interface_if_zone_not_running(self, zone_name: str, zone_state: str) -> Outcome:
        if zone_state == ZONE_RUNNING:
            log("DEBUG", f"Zone {zone_name} is running; keeping VNIC {vnic_name(zone_name)}")
            return Outcome()
        return self.remove_interface(zone_name)
