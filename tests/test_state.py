"""Tests for propolis_brand.state module."""

from __future__ import annotations

from propolis_brand.models import SupervisedProcess
from propolis_brand.state import PidFileStore


def _store(tmp_path) -> PidFileStore:
    return PidFileStore(tmp_path / "var" / "run" / "propolis.pid", tmp_path / "var" / "log" / "propolis.log")


class TestLoad:
    def test_missing_file(self, tmp_path):
        assert _store(tmp_path).load() is None

    def test_round_trip(self, tmp_path):
        store = _store(tmp_path)
        store.save(SupervisedProcess(pid=321, pid_file=store.pid_file, log_file=store.log_file))
        record = store.load()
        assert record == SupervisedProcess(pid=321, pid_file=store.pid_file, log_file=store.log_file)
        assert store.pid_file.read_text() == "321\n"

    def test_malformed_file_ignored(self, tmp_path, capsys):
        store = _store(tmp_path)
        store.pid_file.parent.mkdir(parents=True)
        store.pid_file.write_text("not-a-pid\n")
        assert store.load() is None
        assert "malformed PID file" in capsys.readouterr().err

    def test_non_positive_pid_ignored(self, tmp_path):
        store = _store(tmp_path)
        store.pid_file.parent.mkdir(parents=True)
        store.pid_file.write_text("0\n")
        assert store.load() is None


class TestClear:
    def test_removes_file(self, tmp_path):
        store = _store(tmp_path)
        store.save(SupervisedProcess(pid=5, pid_file=store.pid_file, log_file=store.log_file))
        store.clear()
        assert not store.pid_file.exists()

    def test_missing_file_is_fine(self, tmp_path):
        store = _store(tmp_path)
        store.clear()
        store.clear()
        assert not store.pid_file.exists()
