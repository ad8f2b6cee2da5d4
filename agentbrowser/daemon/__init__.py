"""Daemon plumbing for agent-browser.

The browser itself lives in a long-running Node daemon (daemon.js). This
package holds everything the CLI needs to reach it:

- paths: socket and PID file locations per session
- DaemonSupervisor: starts the daemon on demand and waits for its socket
- DaemonClient: sends one JSON line request, reads one JSON line response
- protocol: the wire format shared by both directions
"""

from agentbrowser.daemon.client import DaemonClient
from agentbrowser.daemon.paths import get_pid_path, get_socket_path
from agentbrowser.daemon.protocol import (
    Response,
    serialize_request,
    deserialize_request,
    serialize_response,
    deserialize_response,
)
from agentbrowser.daemon.supervisor import DaemonSupervisor, SignalLiveness

__all__ = [
    "DaemonClient",
    "DaemonSupervisor",
    "SignalLiveness",
    "Response",
    "get_pid_path",
    "get_socket_path",
    "serialize_request",
    "deserialize_request",
    "serialize_response",
    "deserialize_response",
]
