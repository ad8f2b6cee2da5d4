"""Lightweight client for daemon communication.

This module provides a thin client that connects to the daemon via Unix socket,
writes one request line and reads one response line.

Usage:
    client = DaemonClient(SessionConfig.from_env())
    response = client.send({"id": "r1", "action": "url"})
"""

import logging
import socket
from typing import Any, Dict, Optional

from agentbrowser.core.configs import ClientSettings, SessionConfig
from agentbrowser.daemon.paths import get_socket_path
from agentbrowser.daemon.protocol import (
    Response,
    serialize_request,
    deserialize_response,
)
from agentbrowser.errors import (
    ConnectFailed,
    InvalidResponse,
    ReceiveFailed,
    SendFailed,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536


class DaemonClient:
    """
    Lightweight client for daemon communication.

    Designed for minimal overhead:
    - Uses stdlib socket (no external deps)
    - Simple JSON line protocol
    - One connection per request, no retries
    """

    def __init__(
        self,
        session: SessionConfig,
        settings: Optional[ClientSettings] = None,
    ):
        """
        Initialize client.

        Args:
            session: Session whose daemon socket to use
            settings: Timeouts; defaults to 30s read and 5s write
        """
        settings = settings or ClientSettings()
        self.session = session
        self.socket_path = get_socket_path(session)
        self.read_timeout = settings.read_timeout
        self.write_timeout = settings.write_timeout

    def send(self, request: Dict[str, Any]) -> Response:
        """
        Send request to daemon and return its response.

        Raises:
            ConnectFailed: If the socket cannot be reached
            SendFailed: If the request cannot be written in time
            ReceiveFailed: If no response line arrives in time
            InvalidResponse: If the response line is not a Response document
        """
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.settimeout(self.write_timeout)
            try:
                sock.connect(str(self.socket_path))
            except OSError as e:
                raise ConnectFailed(f"Failed to connect: {e}") from e

            logger.debug("-> %s %s", request.get("id"), request.get("action"))
            try:
                sock.sendall(serialize_request(request))
            except OSError as e:
                raise SendFailed(f"Failed to send: {e}") from e

            sock.settimeout(self.read_timeout)
            line = self._read_line(sock)
        finally:
            sock.close()

        try:
            response = deserialize_response(line)
        except ValueError as e:
            raw = line.decode("utf-8", errors="replace")
            raise InvalidResponse(f"Invalid response: {e}", raw=raw) from e

        logger.debug("<- %s success=%s", request.get("id"), response.success)
        return response

    def _read_line(self, sock: socket.socket) -> bytes:
        """Read until the first newline; bytes after it are discarded."""
        chunks = []
        while True:
            try:
                chunk = sock.recv(CHUNK_SIZE)
            except OSError as e:
                raise ReceiveFailed(f"Failed to read: {e}") from e
            if not chunk:
                break
            if b"\n" in chunk:
                chunks.append(chunk[: chunk.index(b"\n")])
                return b"".join(chunks)
            chunks.append(chunk)

        # EOF before a newline: whatever arrived is the response
        if not chunks:
            raise ReceiveFailed("Failed to read: connection closed by daemon")
        return b"".join(chunks)
