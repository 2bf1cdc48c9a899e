"""Tests for propolis_brand.models module."""

from pathlib import Path

from propolis_brand.models import FATAL, OK, RECOVERED, Outcome, ZoneIdentity, ZoneRootLayout


class TestOutcome:
    def test_defaults(self):
        outcome = Outcome()
        assert outcome.status == OK
        assert outcome.warnings == []
        assert outcome.exit_code == 0

    def test_recover_keeps_exit_zero(self):
        outcome = Outcome()
        outcome.recover("VNIC busy")
        outcome.recover("PID file unreadable")
        assert outcome.status == RECOVERED
        assert outcome.warnings == ["VNIC busy", "PID file unreadable"]
        assert outcome.exit_code == 0

    def test_fail_is_sticky(self):
        outcome = Outcome()
        outcome.fail("binary missing")
        outcome.recover("later warning")
        assert outcome.status == FATAL
        assert outcome.fatal is True
        assert outcome.exit_code == 1

    def test_merge(self):
        first = Outcome()
        second = Outcome()
        second.recover("delete failed")
        assert first.merge(second) is first
        assert first.status == RECOVERED
        assert first.warnings == ["delete failed"]


class TestZoneIdentity:
    def test_is_hashable(self):
        zone = ZoneIdentity(name="testzone", root_path=Path("/zones/testzone"))
        assert {zone: 1}[ZoneIdentity("testzone", Path("/zones/testzone"))] == 1


class TestZoneRootLayout:
    def test_directories_live_under_root(self):
        layout = ZoneRootLayout(Path("/zones/testzone"))
        assert layout.root == Path("/zones/testzone/root")
        assert all(layout.root in path.parents for path in layout.directories())
        assert layout.propolis_dir in layout.directories()
