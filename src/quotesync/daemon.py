"""
quotesync daemon — the timed sync trigger.

Runs a sync cycle on a background thread every ``sync_interval``
seconds until stopped. Results and errors are kept in a small
lock-protected state object for status queries.
"""

from __future__ import annotations

import logging
import os
import signal
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from . import QUOTESYNC_HOME
from .models import SyncReport, SyncStatus
from .sync.engine import SyncEngine

logger = logging.getLogger("quotesync.daemon")

PID_FILE = "daemon.pid"
LOG_DIR = "logs"


class DaemonConfig:
    """Configuration for the sync daemon.

    Attributes:
        home: quotesync home directory.
        sync_interval: Seconds between sync cycles. None uses config.yaml.
        log_file: Path for daemon log output.
    """

    def __init__(self, home: Optional[Path] = None, sync_interval: Optional[int] = None):
        self.home = (home or Path(QUOTESYNC_HOME)).expanduser()
        self.sync_interval = sync_interval

        log_dir = self.home / LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = log_dir / "daemon.log"


class DaemonState:
    """Thread-safe record of what the daemon has done."""

    def __init__(self):
        self._lock = threading.Lock()
        self.started_at: Optional[datetime] = None
        self.last_report: Optional[SyncReport] = None
        self.syncs_completed: int = 0
        self.syncs_failed: int = 0
        self.errors: list[str] = []
        self.running: bool = False

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "running": self.running,
                "started_at": self.started_at.isoformat() if self.started_at else None,
                "syncs_completed": self.syncs_completed,
                "syncs_failed": self.syncs_failed,
                "last_message": self.last_report.message if self.last_report else None,
                "recent_errors": self.errors[-10:],
                "pid": os.getpid(),
            }

    def record_report(self, report: SyncReport) -> None:
        with self._lock:
            self.last_report = report
            if report.status == SyncStatus.OK:
                self.syncs_completed += 1
            elif report.status == SyncStatus.FAILED:
                self.syncs_failed += 1

    def record_error(self, error: str) -> None:
        """Record an error, keeping only the last 50."""
        with self._lock:
            ts = datetime.now(timezone.utc).isoformat()
            self.errors.append(f"[{ts}] {error}")
            if len(self.errors) > 50:
                self.errors = self.errors[-50:]


class SyncDaemon:
    """Background worker running sync cycles on an interval.

    Args:
        config: Daemon configuration.
        engine: Engine to drive. Built from ``config.home`` if omitted.
    """

    def __init__(self, config: DaemonConfig, engine: Optional[SyncEngine] = None):
        self.config = config
        self.engine = engine or SyncEngine(config.home)
        self.state = DaemonState()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._log_handler: Optional[logging.Handler] = None

    @property
    def interval(self) -> int:
        return self.config.sync_interval or self.engine.config.sync_interval

    def start(self, install_signals: bool = True) -> None:
        """Start the sync worker thread.

        Args:
            install_signals: Register SIGTERM/SIGINT handlers. Only
                possible from the main thread.
        """
        self._write_pid()
        self._setup_logging()
        if install_signals:
            self._setup_signals()

        self.state.running = True
        self.state.started_at = datetime.now(timezone.utc)

        logger.info(
            "Daemon starting — home=%s remote=%s sync=%ds",
            self.config.home, self.engine.remote.name, self.interval,
        )

        self._thread = threading.Thread(target=self._sync_loop, name="quotesync-sync", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the worker. An in-flight cycle is allowed to finish."""
        logger.info("Daemon stopping...")
        self._stop_event.set()
        self.state.running = False

        if self._thread:
            self._thread.join(timeout=5)

        self._remove_pid()
        if self._log_handler:
            logging.getLogger().removeHandler(self._log_handler)
            self._log_handler.close()
            self._log_handler = None
        logger.info("Daemon stopped.")

    def run_forever(self) -> None:
        """Block until stop is signaled."""
        try:
            while not self._stop_event.is_set():
                self._stop_event.wait(timeout=1)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    def _sync_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                report = self.engine.sync_now()
                self.state.record_report(report)
                if report.status == SyncStatus.FAILED:
                    self.state.record_error(report.message)
            except Exception as exc:
                logger.error("Sync error: %s", exc)
                self.state.record_error(f"Sync: {exc}")

            self._stop_event.wait(timeout=self.interval)

    def _setup_logging(self) -> None:
        """Add a file handler for the daemon log."""
        handler = logging.FileHandler(self.config.log_file)
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s")
        )
        root = logging.getLogger()
        root.addHandler(handler)
        root.setLevel(logging.INFO)
        self._log_handler = handler

    def _setup_signals(self) -> None:
        for sig in (signal.SIGTERM, signal.SIGINT):
            signal.signal(sig, self._handle_signal)

    def _handle_signal(self, signum, frame):
        logger.info("Received signal %s — stopping", signal.Signals(signum).name)
        self._stop_event.set()

    def _write_pid(self) -> None:
        pid_path = self.config.home / PID_FILE
        pid_path.parent.mkdir(parents=True, exist_ok=True)
        pid_path.write_text(str(os.getpid()), encoding="utf-8")

    def _remove_pid(self) -> None:
        pid_path = self.config.home / PID_FILE
        if pid_path.exists():
            pid_path.unlink()


def read_pid(home: Optional[Path] = None) -> Optional[int]:
    """Read the daemon PID, or None if no live daemon owns the home."""
    home = (home or Path(QUOTESYNC_HOME)).expanduser()
    pid_path = home / PID_FILE
    if not pid_path.exists():
        return None
    try:
        pid = int(pid_path.read_text(encoding="utf-8").strip())
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        pid_path.unlink(missing_ok=True)
        return None


def is_running(home: Optional[Path] = None) -> bool:
    return read_pid(home) is not None
