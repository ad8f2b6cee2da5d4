"""Filesystem addresses of a session's daemon.

Both the socket and the PID file are owned by the daemon; the client only
computes where they are and reads them.
"""

from pathlib import Path

from agentbrowser.core.configs import SessionConfig

PREFIX = "agent-browser"


def get_socket_path(session: SessionConfig) -> Path:
    """Get socket path for session."""
    return session.tmp_dir / f"{PREFIX}-{session.name}.sock"


def get_pid_path(session: SessionConfig) -> Path:
    """Get PID file path for session."""
    return session.tmp_dir / f"{PREFIX}-{session.name}.pid"
