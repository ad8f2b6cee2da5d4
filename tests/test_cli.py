"""
Tests for ui/cli.py - the end-to-end command flow, mostly with the daemon
layers patched out.
"""

import json
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from agentbrowser.core.configs import ClientSettings, SessionConfig
from agentbrowser.daemon.protocol import Response
from agentbrowser.errors import ConnectFailed, DaemonNotFound
from agentbrowser.ui.cli import app

runner = CliRunner()


class TestCli(unittest.TestCase):
    """Test cases for the agent-browser command."""

    def setUp(self):
        self.supervisor_cls = self._patch("agentbrowser.ui.cli.DaemonSupervisor")
        self.client_cls = self._patch("agentbrowser.ui.cli.DaemonClient")
        self._patch("agentbrowser.ui.cli.get_client_settings", return_value=ClientSettings())
        self.client = self.client_cls.return_value
        self.client.send.return_value = Response(success=True, data={"url": "https://example.com"})

    def _patch(self, target, **kwargs):
        patcher = patch(target, **kwargs)
        mock = patcher.start()
        self.addCleanup(patcher.stop)
        return mock

    def _sent_request(self):
        return self.client.send.call_args[0][0]

    def test_successful_command(self):
        result = runner.invoke(app, ["open", "example.com"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("https://example.com", result.output)
        self.supervisor_cls.return_value.ensure.assert_called_once()
        self.assertEqual(self._sent_request()["action"], "navigate")
        self.assertEqual(self._sent_request()["url"], "https://example.com")

    def test_snapshot_flags_pass_through(self):
        self.client.send.return_value = Response(success=True, data={"snapshot": "- doc"})

        result = runner.invoke(app, ["snapshot", "-i", "--depth", "3", "-s", "#main"])

        self.assertEqual(result.exit_code, 0)
        request = self._sent_request()
        self.assertIs(request["interactive"], True)
        self.assertEqual(request["maxDepth"], 3)
        self.assertEqual(request["selector"], "#main")
        self.assertIn("- doc", result.output)

    def test_unknown_command_never_contacts_daemon(self):
        result = runner.invoke(app, ["frobnicate"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Unknown command", result.output)
        self.assertIn("frobnicate", result.output)
        self.supervisor_cls.assert_not_called()
        self.client_cls.assert_not_called()

    def test_missing_argument_is_unknown_command(self):
        result = runner.invoke(app, ["click"])
        self.assertEqual(result.exit_code, 1)
        self.client_cls.assert_not_called()

    def test_action_failure_exits_1(self):
        self.client.send.return_value = Response(success=False, error="Element not found")

        result = runner.invoke(app, ["click", "#missing"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Element not found", result.output)

    def test_json_mode_prints_response(self):
        self.client.send.return_value = Response(success=True, data={"title": "Example"})

        result = runner.invoke(app, ["get", "title", "--json"])

        self.assertEqual(result.exit_code, 0)
        self.assertEqual(
            json.loads(result.output),
            {"success": True, "data": {"title": "Example"}, "error": None},
        )

    def test_supervisor_error_in_json_mode_is_wrapped(self):
        self.supervisor_cls.return_value.ensure.side_effect = DaemonNotFound("Daemon not found.")

        result = runner.invoke(app, ["--json", "back"])

        self.assertEqual(result.exit_code, 1)
        self.assertEqual(
            json.loads(result.output),
            {"success": False, "data": None, "error": "Daemon not found."},
        )
        self.client_cls.assert_not_called()

    def test_transport_error_in_human_mode(self):
        self.client.send.side_effect = ConnectFailed("Failed to connect: refused")

        result = runner.invoke(app, ["reload"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Failed to connect: refused", result.output)

    def test_bad_configuration_exits_1(self):
        with patch("agentbrowser.ui.cli.get_client_settings", side_effect=ValueError("bad")):
            result = runner.invoke(app, ["back"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error loading configuration: bad", result.output)
        self.supervisor_cls.assert_not_called()

    def test_help(self):
        for args in ([], ["--help"], ["open", "-h"]):
            result = runner.invoke(app, args)
            self.assertEqual(result.exit_code, 0, args)
            self.assertIn("Usage: agent-browser", result.output)
        self.client_cls.assert_not_called()

    def test_install_skips_daemon(self):
        handle_install = MagicMock(return_value=0)
        with patch("agentbrowser.ui.install_commands.handle_install", handle_install):
            result = runner.invoke(app, ["install", "--with-deps"])

        self.assertEqual(result.exit_code, 0)
        handle_install.assert_called_once_with(with_deps=True)
        self.supervisor_cls.assert_not_called()

    def test_install_failure_exit_code(self):
        with patch("agentbrowser.ui.install_commands.handle_install", return_value=1) as handle:
            result = runner.invoke(app, ["install"])

        self.assertEqual(result.exit_code, 1)
        handle.assert_called_once_with(with_deps=False)


class TestCliWithRealSupervisor(unittest.TestCase):
    """Test cases where the real DaemonSupervisor inspects session files."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.temp_dir, ignore_errors=True)
        session = SessionConfig(name="cli", tmp_dir=self.temp_dir)

        for target, kwargs in (
            ("agentbrowser.ui.cli.SessionConfig.from_env", {"return_value": session}),
            ("agentbrowser.ui.cli.get_client_settings", {"return_value": ClientSettings()}),
            (
                "agentbrowser.daemon.supervisor.default_candidates",
                {"return_value": [self.temp_dir / "missing" / "daemon.js"]},
            ),
        ):
            patcher = patch(target, **kwargs)
            patcher.start()
            self.addCleanup(patcher.stop)

        # A corrupt PID file next to an existing socket file
        (self.temp_dir / "agent-browser-cli.pid").write_text("99999999999999999999")
        (self.temp_dir / "agent-browser-cli.sock").touch()

    def test_json_mode_reports_envelope(self):
        result = runner.invoke(app, ["--json", "back"])

        self.assertIsInstance(result.exception, SystemExit)
        self.assertEqual(result.exit_code, 1)
        document = json.loads(result.output)
        self.assertEqual(document["success"], False)
        self.assertIsNone(document["data"])
        self.assertIn("Daemon not found", document["error"])

    def test_human_mode_reports_error(self):
        result = runner.invoke(app, ["back"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Daemon not found", result.output)


if __name__ == "__main__":
    unittest.main()
