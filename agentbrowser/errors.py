"""Error types raised by the agent-browser client.

Every error is terminal for the invocation: the CLI reports the message
and exits with status 1. Nothing here is retried.
"""

from typing import Optional


class AgentBrowserError(Exception):
    """Base class for all client-side failures."""


class UnknownCommand(AgentBrowserError):
    """The command-line tokens did not map to any action."""

    def __init__(self, command: str = ""):
        self.command = command
        super().__init__(f"Unknown command: {command}")


# Supervisor level

class DaemonError(AgentBrowserError):
    """The daemon could not be found, started, or reached in time."""


class DaemonNotFound(DaemonError):
    pass


class DaemonSpawnFailed(DaemonError):
    pass


class DaemonStartTimeout(DaemonError):
    pass


# Transport level

class TransportError(AgentBrowserError):
    """A request could not be exchanged with the daemon."""


class ConnectFailed(TransportError):
    pass


class SendFailed(TransportError):
    pass


class ReceiveFailed(TransportError):
    pass


class InvalidResponse(TransportError):
    """The daemon answered with something that is not a Response document."""

    def __init__(self, message: str, raw: Optional[str] = None):
        self.raw = raw
        super().__init__(message)
