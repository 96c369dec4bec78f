"""Alert scheduler: one scan on boot, then one per fixed interval.

Scheduled cycles keep a fixed cadence measured from boot. A cycle that
overruns its slot does not trigger catch-up cycles; the next one runs at the
following slot. A forced cycle, where every derived alert is reported as new,
can be requested from another shell with `wxalert daemon --force`. That sends
SIGUSR1 to the running process, and the cycle runs out of band without
shifting the schedule.

Usage:
    wxalert daemon --interval 1800
    wxalert daemon --force
    wxalert daemon --status
    wxalert daemon --stop
"""

import json
import logging
import os
import signal
import time
from datetime import UTC, datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path

from wxalert.config.schema import AlertEngineConfig
from wxalert.pipeline.scan_pipeline import ScanPipeline

logger = logging.getLogger(__name__)

RUN_DIR = Path("data")
PID_FILE = RUN_DIR / "wxalert.pid"
STATE_FILE = RUN_DIR / "daemon_state.json"
LOG_FILE = Path("logs") / "daemon.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 5
STOP_TIMEOUT = 30

STATUS_FIELDS = [
    ("PID", "pid"),
    ("Started", "started_at"),
    ("Cycles", "cycles"),
    ("Forced cycles", "forced_cycles"),
    ("Failed cycles", "failed_cycles"),
    ("New alerts", "new_alerts"),
    ("Last cycle", "last_cycle_at"),
    ("Last result", "last_result"),
    ("Next cycle", "next_cycle_at"),
]


class DaemonAlreadyRunning(RuntimeError):
    pass


class AlertDaemon:
    def __init__(
        self,
        config: AlertEngineConfig,
        db_path: str = "data/wxalert.db",
        interval: int | None = None,
    ):
        self.config = config
        self.db_path = db_path
        self.interval = interval or config.ops.scan_interval_minutes * 60
        self.stats = {"cycles": 0, "forced_cycles": 0, "failed_cycles": 0, "new_alerts": 0}
        self._running = False
        self._force_requested = False
        self._started_at: str | None = None
        self._last_cycle_at: str | None = None
        self._last_result: str | None = None
        self._clock = time.monotonic
        self._sleep = time.sleep

    def start(self) -> None:
        """Take the PID file, log to a rotating file, and run until signalled."""
        pid = running_pid()
        if pid is not None:
            raise DaemonAlreadyRunning(f"Daemon already running (pid {pid})")

        RUN_DIR.mkdir(parents=True, exist_ok=True)
        PID_FILE.write_text(str(os.getpid()))
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS
        )
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root_logger = logging.getLogger()
        root_logger.addHandler(handler)

        self._install_signal_handlers()
        self._started_at = datetime.now(UTC).isoformat()
        enabled = sum(1 for loc in self.config.locations if loc.enabled)
        logger.info(
            "Scheduler started: pid=%d every %ds over %d locations",
            os.getpid(), self.interval, enabled,
        )
        try:
            self.run_forever()
        finally:
            PID_FILE.unlink(missing_ok=True)
            self._save_state(None)
            logger.info(
                "Scheduler stopped after %d cycles (%d failed)",
                self.stats["cycles"], self.stats["failed_cycles"],
            )
            root_logger.removeHandler(handler)
            handler.close()

    def run_forever(self) -> None:
        self._running = True
        next_due = self._clock()
        while self._running:
            now = self._clock()
            if self._force_requested:
                self._force_requested = False
                self.run_cycle(force=True)
            elif now >= next_due:
                # Missed slots collapse into this one
                while next_due <= now:
                    next_due += self.interval
                self.run_cycle()
            self._save_state(next_due)
            self._sleep_until(next_due)

    def run_cycle(self, force: bool = False) -> bool:
        """Run one scan. Returns True when every location was derived."""
        self.stats["cycles"] += 1
        if force:
            self.stats["forced_cycles"] += 1
        n = self.stats["cycles"]
        logger.info("Cycle #%d starting%s", n, " (forced)" if force else "")
        self._last_cycle_at = datetime.now(UTC).isoformat()

        try:
            summary = ScanPipeline(self.config, self.db_path, force=force).run()
        except Exception:
            # One bad cycle must not end the schedule
            logger.exception("Cycle #%d crashed", n)
            self.stats["failed_cycles"] += 1
            self._last_result = "crashed"
            return False

        self.stats["new_alerts"] += summary.alerts_new
        if summary.errors:
            self.stats["failed_cycles"] += 1
            self._last_result = (
                f"{summary.locations_failed}/{summary.locations_scanned} locations failed"
            )
            logger.warning("Cycle #%d: %s", n, self._last_result)
            return False
        self._last_result = f"ok, {summary.alerts_new} new alerts"
        logger.info("Cycle #%d: %s", n, self._last_result)
        return True

    def _sleep_until(self, deadline: float) -> None:
        # Short naps so signals are noticed promptly
        while self._running and not self._force_requested:
            remaining = deadline - self._clock()
            if remaining <= 0:
                return
            self._sleep(min(1.0, remaining))

    def _install_signal_handlers(self) -> None:
        def _stop(signum: int, frame: object) -> None:
            logger.info("Received %s, stopping", signal.Signals(signum).name)
            self._running = False

        def _force(signum: int, frame: object) -> None:
            logger.info("Forced cycle requested")
            self._force_requested = True

        signal.signal(signal.SIGTERM, _stop)
        signal.signal(signal.SIGINT, _stop)
        signal.signal(signal.SIGUSR1, _force)

    def _save_state(self, next_due: float | None) -> None:
        next_cycle_at = None
        if next_due is not None:
            wait = max(0.0, next_due - self._clock())
            next_cycle_at = (datetime.now(UTC) + timedelta(seconds=wait)).isoformat()
        state = {
            "pid": os.getpid(),
            "started_at": self._started_at,
            "interval": self.interval,
            **self.stats,
            "last_cycle_at": self._last_cycle_at,
            "last_result": self._last_result,
            "next_cycle_at": next_cycle_at,
        }
        STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
        STATE_FILE.write_text(json.dumps(state, indent=2))


def running_pid() -> int | None:
    """PID of the live daemon, or None. A stale or corrupt PID file is removed."""
    try:
        pid = int(PID_FILE.read_text().strip())
    except FileNotFoundError:
        return None
    except ValueError:
        PID_FILE.unlink(missing_ok=True)
        return None
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        PID_FILE.unlink(missing_ok=True)
        return None
    except PermissionError:
        # Alive, but owned by another user
        pass
    return pid


def stop_daemon() -> int:
    pid = running_pid()
    if pid is None:
        print("No daemon running")
        return 1
    os.kill(pid, signal.SIGTERM)
    print(f"Sent SIGTERM to daemon (pid {pid}), waiting for the current cycle")
    deadline = time.monotonic() + STOP_TIMEOUT
    while time.monotonic() < deadline:
        if running_pid() is None:
            print("Daemon stopped")
            return 0
        time.sleep(0.5)
    print(f"Daemon still running after {STOP_TIMEOUT}s")
    return 1


def request_forced_scan() -> int:
    pid = running_pid()
    if pid is None:
        print("No daemon running; use `wxalert scan --force` instead")
        return 1
    os.kill(pid, signal.SIGUSR1)
    print(f"Forced cycle requested (pid {pid})")
    return 0


def daemon_status() -> int:
    if not STATE_FILE.exists():
        print("No daemon state found")
        return 1
    state = json.loads(STATE_FILE.read_text())
    print(f"Daemon {'running' if running_pid() is not None else 'stopped'}")
    print(f"  Interval: {state.get('interval', '?')}s")
    for label, key in STATUS_FIELDS:
        print(f"  {label}: {state.get(key, '?')}")
    return 0
