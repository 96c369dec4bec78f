"""Tests for the alert scheduler daemon."""

import json
import os
import signal
from unittest.mock import MagicMock, patch

import pytest

from wxalert.config.schema import AlertEngineConfig, OpsConfig
from wxalert.daemon import (
    AlertDaemon,
    DaemonAlreadyRunning,
    daemon_status,
    request_forced_scan,
    running_pid,
    stop_daemon,
)


@pytest.fixture
def tmp_data(tmp_path, monkeypatch):
    """Redirect PID, state and log files to a temp directory."""
    pid_file = tmp_path / "wxalert.pid"
    state_file = tmp_path / "daemon_state.json"
    log_file = tmp_path / "logs" / "daemon.log"
    monkeypatch.setattr("wxalert.daemon.RUN_DIR", tmp_path)
    monkeypatch.setattr("wxalert.daemon.PID_FILE", pid_file)
    monkeypatch.setattr("wxalert.daemon.STATE_FILE", state_file)
    monkeypatch.setattr("wxalert.daemon.LOG_FILE", log_file)
    return {"pid": pid_file, "state": state_file, "log": log_file}


@pytest.fixture
def mock_config():
    return AlertEngineConfig(ops=OpsConfig(scan_interval_minutes=30), locations=[])


class FakeClock:
    """Monotonic clock that only moves when slept on or advanced."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


def _scripted(daemon: AlertDaemon, clock: FakeClock, cycles: int, duration: float = 0.0):
    """Replace run_cycle with a recorder that stops the loop after `cycles` calls."""
    calls = []

    def fake_cycle(force=False):
        calls.append((clock.now, force))
        clock.now += duration
        if len(calls) >= cycles:
            daemon._running = False
        return True

    daemon._clock = clock
    daemon._sleep = clock.sleep
    daemon.run_cycle = fake_cycle
    return calls


class TestSchedule:
    def test_interval_from_config(self, tmp_data, mock_config):
        assert AlertDaemon(mock_config).interval == 1800
        assert AlertDaemon(mock_config, interval=60).interval == 60

    def test_boot_cycle_runs_immediately(self, tmp_data, mock_config):
        daemon = AlertDaemon(mock_config, interval=3600)
        clock = FakeClock()
        calls = _scripted(daemon, clock, cycles=1)

        daemon.run_forever()

        assert calls == [(0.0, False)]

    def test_fixed_cadence(self, tmp_data, mock_config):
        daemon = AlertDaemon(mock_config, interval=60)
        clock = FakeClock()
        calls = _scripted(daemon, clock, cycles=3, duration=10.0)

        daemon.run_forever()

        # Cycle length does not push the schedule back
        assert [t for t, _ in calls] == [0.0, 60.0, 120.0]

    def test_overrun_skips_missed_slots(self, tmp_data, mock_config):
        daemon = AlertDaemon(mock_config, interval=60)
        clock = FakeClock()
        calls = _scripted(daemon, clock, cycles=3, duration=130.0)

        daemon.run_forever()

        # No burst of catch-up cycles after a long one
        assert [t for t, _ in calls] == [0.0, 130.0, 260.0]

    def test_forced_request_runs_out_of_band(self, tmp_data, mock_config):
        daemon = AlertDaemon(mock_config, interval=3600)
        clock = FakeClock()
        calls = _scripted(daemon, clock, cycles=2)
        daemon._force_requested = True

        daemon.run_forever()

        assert calls == [(0.0, True), (0.0, False)]
        assert daemon._force_requested is False

    def test_force_wakes_sleep(self, tmp_data, mock_config):
        daemon = AlertDaemon(mock_config, interval=3600)
        clock = FakeClock()
        daemon._clock = clock
        daemon._running = True

        def sleep(seconds):
            clock.now += seconds
            if clock.now >= 5:
                daemon._force_requested = True

        daemon._sleep = sleep
        daemon._sleep_until(3600.0)

        assert clock.now == 5.0

    def test_state_reports_next_cycle(self, tmp_data, mock_config):
        daemon = AlertDaemon(mock_config, interval=60)
        clock = FakeClock()
        _scripted(daemon, clock, cycles=1)

        daemon.run_forever()

        state = json.loads(tmp_data["state"].read_text())
        assert state["interval"] == 60
        assert state["next_cycle_at"] is not None


class TestCycles:
    def test_success(self, tmp_data, mock_config):
        daemon = AlertDaemon(mock_config, interval=1)
        summary = MagicMock(errors=[], alerts_new=2)

        with patch("wxalert.daemon.ScanPipeline") as MockPipeline:
            MockPipeline.return_value.run.return_value = summary
            assert daemon.run_cycle() is True

        assert MockPipeline.call_args.kwargs["force"] is False
        assert daemon.stats == {
            "cycles": 1, "forced_cycles": 0, "failed_cycles": 0, "new_alerts": 2,
        }

    def test_forced_cycle_passes_force(self, tmp_data, mock_config):
        daemon = AlertDaemon(mock_config, interval=1)
        summary = MagicMock(errors=[], alerts_new=3)

        with patch("wxalert.daemon.ScanPipeline") as MockPipeline:
            MockPipeline.return_value.run.return_value = summary
            daemon.run_cycle(force=True)

        assert MockPipeline.call_args.kwargs["force"] is True
        assert daemon.stats["forced_cycles"] == 1

    def test_location_errors(self, tmp_data, mock_config):
        daemon = AlertDaemon(mock_config, interval=1)
        summary = MagicMock(
            errors=["galle: OpenWeather forecast 503"],
            alerts_new=1, locations_failed=1, locations_scanned=2,
        )

        with patch("wxalert.daemon.ScanPipeline") as MockPipeline:
            MockPipeline.return_value.run.return_value = summary
            assert daemon.run_cycle() is False

        assert daemon.stats["failed_cycles"] == 1
        # New alerts from the healthy locations still count
        assert daemon.stats["new_alerts"] == 1
        assert daemon._last_result == "1/2 locations failed"

    def test_crash_keeps_schedule_alive(self, tmp_data, mock_config):
        daemon = AlertDaemon(mock_config, interval=1)
        with patch("wxalert.daemon.ScanPipeline") as MockPipeline:
            MockPipeline.return_value.run.side_effect = RuntimeError("boom")
            assert daemon.run_cycle() is False
        assert daemon.stats["failed_cycles"] == 1
        assert daemon._last_result == "crashed"


class TestLifecycle:
    def test_start_and_exit(self, tmp_data, mock_config):
        daemon = AlertDaemon(mock_config, interval=1)
        with patch.object(daemon, "run_forever"), \
                patch.object(daemon, "_install_signal_handlers"):
            daemon.start()

        assert tmp_data["state"].exists()
        assert tmp_data["log"].exists()
        assert not tmp_data["pid"].exists()

    def test_prevents_duplicate_start(self, tmp_data, mock_config):
        tmp_data["pid"].write_text(str(os.getpid()))
        daemon = AlertDaemon(mock_config)
        with pytest.raises(DaemonAlreadyRunning):
            daemon.start()
        # The live daemon's PID file is left alone
        assert tmp_data["pid"].exists()

    def test_signal_handlers(self, tmp_data, mock_config):
        daemon = AlertDaemon(mock_config)
        with patch("wxalert.daemon.signal.signal") as mock_signal:
            daemon._install_signal_handlers()
        handlers = {c.args[0]: c.args[1] for c in mock_signal.call_args_list}

        daemon._running = True
        handlers[signal.SIGUSR1](signal.SIGUSR1, None)
        assert daemon._force_requested is True
        handlers[signal.SIGTERM](signal.SIGTERM, None)
        assert daemon._running is False


class TestDaemonControl:
    def test_running_pid_cleans_stale(self, tmp_data):
        tmp_data["pid"].write_text("999999999")
        assert running_pid() is None
        assert not tmp_data["pid"].exists()

    def test_running_pid_cleans_corrupt(self, tmp_data):
        tmp_data["pid"].write_text("not-a-pid")
        assert running_pid() is None
        assert not tmp_data["pid"].exists()

    def test_stop_no_daemon(self, tmp_data):
        assert stop_daemon() == 1

    def test_stop_stale_pid(self, tmp_data):
        tmp_data["pid"].write_text("999999999")
        assert stop_daemon() == 1
        assert not tmp_data["pid"].exists()

    def test_force_no_daemon(self, tmp_data, capsys):
        assert request_forced_scan() == 1
        assert "scan --force" in capsys.readouterr().out

    def test_force_signals_running_daemon(self, tmp_data):
        tmp_data["pid"].write_text("4242")
        with patch("wxalert.daemon.os.kill") as mock_kill:
            assert request_forced_scan() == 0
        mock_kill.assert_called_with(4242, signal.SIGUSR1)

    def test_status_no_state(self, tmp_data):
        assert daemon_status() == 1

    def test_status_with_state(self, tmp_data, capsys):
        state = {
            "pid": 999999999,
            "started_at": "2026-10-19T00:00:00+00:00",
            "interval": 1800,
            "cycles": 10,
            "forced_cycles": 1,
            "failed_cycles": 1,
            "new_alerts": 4,
            "last_cycle_at": "2026-10-19T05:00:00+00:00",
            "last_result": "ok, 0 new alerts",
            "next_cycle_at": None,
        }
        tmp_data["state"].write_text(json.dumps(state))

        assert daemon_status() == 0
        out = capsys.readouterr().out
        assert "Daemon stopped" in out
        assert "1800s" in out
        assert "New alerts: 4" in out
        assert "Forced cycles: 1" in out
