"""
Tests for daemon/client.py and daemon/protocol.py.

A mock daemon (threaded socketserver on a real Unix socket) stands in for
daemon.js so the full write-one-line / read-one-line exchange is exercised.
"""

import json
import shutil
import socketserver
import tempfile
import threading
import unittest
from pathlib import Path

from agentbrowser.core.configs import ClientSettings, SessionConfig
from agentbrowser.daemon.client import DaemonClient
from agentbrowser.daemon.paths import get_socket_path
from agentbrowser.daemon.protocol import (
    Response,
    deserialize_request,
    deserialize_response,
    serialize_request,
    serialize_response,
)
from agentbrowser.errors import (
    ConnectFailed,
    InvalidResponse,
    ReceiveFailed,
    TransportError,
)


class MockDaemon:
    """Unix socket server answering each request line with handler(request_bytes)."""

    def __init__(self, socket_path: Path, handler):
        self.received = []
        outer = self

        class Handler(socketserver.StreamRequestHandler):
            def handle(self):
                line = self.rfile.readline()
                outer.received.append(line)
                reply = handler(line)
                if reply:
                    self.wfile.write(reply)

        self.server = socketserver.ThreadingUnixStreamServer(str(socket_path), Handler)
        self.server.daemon_threads = True
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)

    def __enter__(self):
        self.thread.start()
        return self

    def __exit__(self, *exc):
        self.server.shutdown()
        self.server.server_close()


def echo_request(line: bytes) -> bytes:
    """Reply with the decoded request as data."""
    request = deserialize_request(line)
    return serialize_response(Response(success=True, data={"echo": request}))


class TestDaemonClient(unittest.TestCase):
    """Test cases for DaemonClient.send."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.session = SessionConfig(name="t", tmp_dir=self.temp_dir)
        self.settings = ClientSettings(read_timeout=2.0, write_timeout=2.0)
        self.client = DaemonClient(self.session, self.settings)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _daemon(self, handler):
        return MockDaemon(get_socket_path(self.session), handler)

    def test_request_round_trip(self):
        request = {"id": "r123", "action": "fill", "selector": "#q", "value": "héllo wörld"}

        with self._daemon(echo_request) as daemon:
            response = self.client.send(request)

        self.assertTrue(response.success)
        self.assertEqual(response.data["echo"], request)
        self.assertEqual(len(daemon.received), 1)
        self.assertTrue(daemon.received[0].endswith(b"\n"))
        self.assertEqual(daemon.received[0].count(b"\n"), 1)

    def test_failure_response_is_returned_not_raised(self):
        reply = b'{"success": false, "data": null, "error": "Element not found"}\n'
        with self._daemon(lambda line: reply):
            response = self.client.send({"id": "r1", "action": "click", "selector": "#x"})

        self.assertFalse(response.success)
        self.assertEqual(response.error, "Element not found")

    def test_only_first_line_is_used(self):
        reply = b'{"success": true, "data": {"url": "https://a"}}\n{"success": false}\n'
        with self._daemon(lambda line: reply):
            response = self.client.send({"id": "r1", "action": "url"})
        self.assertEqual(response.data, {"url": "https://a"})

    def test_response_without_trailing_newline_before_close(self):
        with self._daemon(lambda line: b'{"success": true, "data": null}'):
            response = self.client.send({"id": "r1", "action": "back"})
        self.assertTrue(response.success)

    def test_connect_failed_without_daemon(self):
        with self.assertRaises(ConnectFailed) as context:
            self.client.send({"id": "r1", "action": "back"})
        self.assertIn("Failed to connect", str(context.exception))

    def test_closed_without_reply(self):
        with self._daemon(lambda line: b""):
            with self.assertRaises(ReceiveFailed):
                self.client.send({"id": "r1", "action": "back"})

    def test_invalid_json_keeps_raw_text(self):
        with self._daemon(lambda line: b"oops not json\n"):
            with self.assertRaises(InvalidResponse) as context:
                self.client.send({"id": "r1", "action": "back"})
        self.assertEqual(context.exception.raw, "oops not json")
        self.assertIsInstance(context.exception, TransportError)

    def test_wrong_shape_is_invalid(self):
        with self._daemon(lambda line: b'{"data": 1}\n'):
            with self.assertRaises(InvalidResponse):
                self.client.send({"id": "r1", "action": "back"})

    def test_read_timeout(self):
        release = threading.Event()

        def stall(line):
            release.wait(5)
            return b""

        client = DaemonClient(self.session, ClientSettings(read_timeout=0.2, write_timeout=1.0))
        with self._daemon(stall):
            try:
                with self.assertRaises(ReceiveFailed):
                    client.send({"id": "r1", "action": "wait", "timeout": 10000})
            finally:
                release.set()


class TestProtocol(unittest.TestCase):
    """Test cases for the wire format helpers."""

    def test_request_is_single_line(self):
        data = serialize_request({"id": "r1", "action": "evaluate", "script": "a\nb"})
        self.assertTrue(data.endswith(b"\n"))
        self.assertEqual(data.count(b"\n"), 1)
        self.assertEqual(json.loads(data)["script"], "a\nb")

    def test_deserialize_response_defaults(self):
        response = deserialize_response(b'{"success": false}')
        self.assertIsNone(response.data)
        self.assertIsNone(response.error)
        self.assertEqual(response.error_message, "Unknown error")

    def test_deserialize_response_rejects_non_objects(self):
        for data in (b"[]", b'"ok"', b'{"success": "yes"}', b'{"success": true, "error": 5}'):
            with self.assertRaises(ValueError, msg=data):
                deserialize_response(data)

    def test_failure_envelope(self):
        self.assertEqual(
            Response.failure("boom").to_dict(),
            {"success": False, "data": None, "error": "boom"},
        )


if __name__ == "__main__":
    unittest.main()
