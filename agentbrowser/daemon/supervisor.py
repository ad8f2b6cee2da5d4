"""Start-on-demand supervision of the browser daemon.

The supervisor makes sure a daemon for the session is listening before the
client sends anything. It never waits on the daemon beyond the readiness
poll and never restarts it later.

Two invocations racing for the same session may both spawn a daemon; the
daemon is expected to keep only one of them (exclusive socket bind).

The PID file is not checked against the process that created the socket,
so a reused PID can make a dead daemon look alive.
"""

import logging
import os
import subprocess
import sys
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional

from agentbrowser.core.configs import (
    DAEMON_ENV,
    SESSION_ENV,
    ClientSettings,
    ReadinessPolicy,
    SessionConfig,
)
from agentbrowser.daemon.paths import get_pid_path, get_socket_path
from agentbrowser.errors import (
    DaemonNotFound,
    DaemonSpawnFailed,
    DaemonStartTimeout,
)

logger = logging.getLogger(__name__)

DAEMON_SCRIPT = "daemon.js"
PID_MIN = -(2 ** 31)
PID_MAX = 2 ** 31 - 1


class ProcessLiveness(ABC):
    """Answers whether a PID belongs to a live process."""

    @abstractmethod
    def is_alive(self, pid: int) -> bool:
        pass


class SignalLiveness(ProcessLiveness):
    """Probe with signal 0, which checks existence without delivering anything."""

    def is_alive(self, pid: int) -> bool:
        if pid <= 0:
            return False
        try:
            os.kill(pid, 0)
        except (ProcessLookupError, PermissionError, OverflowError):
            return False
        return True


def default_candidates(
    cli_path: Optional[Path] = None,
    cwd: Optional[Path] = None,
) -> List[Path]:
    """
    Places to look for daemon.js, in order.

    Args:
        cli_path: Path of the running CLI, defaults to sys.argv[0]
        cwd: Working directory, defaults to the current one
    """
    cli_path = cli_path or Path(sys.argv[0])
    cli_dir = cli_path.resolve().parent
    cwd = cwd or Path.cwd()
    return [
        cli_dir / DAEMON_SCRIPT,
        cli_dir.parent / "dist" / DAEMON_SCRIPT,
        cwd / "dist" / DAEMON_SCRIPT,
    ]


def _launch(command: List[str], env: dict) -> None:
    """Start the daemon detached from this process and its terminal."""
    subprocess.Popen(
        command,
        env=env,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


class DaemonSupervisor:
    """
    Ensures exactly one reachable daemon per session, best effort.

    Every collaborator with side effects can be swapped for tests:
    liveness, launcher, clock and sleep.
    """

    def __init__(
        self,
        session: SessionConfig,
        settings: Optional[ClientSettings] = None,
        liveness: Optional[ProcessLiveness] = None,
        candidates: Optional[List[Path]] = None,
        launcher: Callable[[List[str], dict], None] = _launch,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        settings = settings or ClientSettings()
        self.session = session
        self.socket_path = get_socket_path(session)
        self.pid_path = get_pid_path(session)
        self.policy: ReadinessPolicy = settings.readiness
        self.node_path = settings.node_path
        self.liveness = liveness or SignalLiveness()

        self.candidates = list(candidates) if candidates is not None else default_candidates()
        if settings.daemon_path is not None:
            self.candidates.insert(0, settings.daemon_path)

        self._launcher = launcher
        self._clock = clock
        self._sleep = sleep

    def read_pid(self) -> Optional[int]:
        """PID recorded by the daemon, or None if absent or unreadable."""
        try:
            pid = int(self.pid_path.read_text().strip())
        except (OSError, ValueError):
            return None
        # PIDs are C ints; anything wider is not a PID
        if not PID_MIN <= pid <= PID_MAX:
            return None
        return pid

    def is_running(self) -> bool:
        """
        Check if the daemon is up.

        Returns True only if:
        1. PID file exists and holds a PID
        2. That process is alive
        3. Socket file exists
        """
        pid = self.read_pid()
        if pid is None:
            logger.debug("No usable PID file at %s", self.pid_path)
            return False
        if not self.liveness.is_alive(pid):
            logger.debug("Daemon PID %d is not alive", pid)
            return False
        return self.socket_path.exists()

    def find_daemon(self) -> Path:
        """First existing daemon script among the candidates."""
        for candidate in self.candidates:
            if candidate.exists():
                return candidate
        raise DaemonNotFound(
            "Daemon not found. Run from project directory or ensure "
            f"{DAEMON_SCRIPT} is alongside the agent-browser executable."
        )

    def ensure(self) -> None:
        """
        Make sure the session's daemon is running, starting it if needed.

        Raises:
            DaemonNotFound: If no daemon script exists at any candidate path
            DaemonSpawnFailed: If the daemon process could not be started
            DaemonStartTimeout: If the socket did not appear in time
        """
        if self.is_running():
            return

        daemon_path = self.find_daemon()
        env = dict(os.environ)
        env[DAEMON_ENV] = "1"
        env[SESSION_ENV] = self.session.name

        logger.info("Starting daemon %s for session '%s'", daemon_path, self.session.name)
        try:
            self._launcher([self.node_path, str(daemon_path)], env)
        except OSError as e:
            raise DaemonSpawnFailed(f"Failed to start daemon: {e}") from e

        self.wait_until_ready()

    def wait_until_ready(self) -> None:
        """Poll for the socket until the readiness budget runs out."""
        deadline = self._clock() + self.policy.timeout
        while True:
            if self.socket_path.exists():
                logger.debug("Daemon socket ready at %s", self.socket_path)
                return
            if self._clock() >= deadline:
                raise DaemonStartTimeout(
                    f"Daemon failed to start within {self.policy.timeout:g}s"
                )
            self._sleep(self.policy.interval)
