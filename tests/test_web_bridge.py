"""Unit tests for the HTTP bridge."""
import unittest
from unittest.mock import patch
from wakeguard.config import Config
from wakeguard.host import HostActivity
from wakeguard.models import SessionState
from wakeguard.web.server import create_app, find_free_port
from fakes import FakePlatform


class TestWebBridge(unittest.TestCase):
    """Channel calls over HTTP."""

    def setUp(self) -> None:
        self.print_patcher = patch('builtins.print')
        self.print_patcher.start()
        self.platform = FakePlatform()
        self.host = HostActivity(platform=self.platform,
                                 config=Config(config_path="/nonexistent/wakeguard.json"))
        self.host.configure_channels()
        self.client = create_app(self.host).test_client()

    def tearDown(self) -> None:
        self.print_patcher.stop()

    def test_enable_over_http(self) -> None:
        response = self.client.post("/channel/pnp_device_monitor/wakelock/enableWakeLock")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {"result": True})
        self.assertEqual(self.host.controller.state, SessionState.HELD)

    def test_disable_over_http(self) -> None:
        self.client.post("/channel/pnp_device_monitor/wakelock/enableWakeLock")
        response = self.client.post("/channel/pnp_device_monitor/wakelock/disableWakeLock")

        self.assertEqual(response.get_json(), {"result": True})
        self.assertEqual(self.host.controller.state, SessionState.IDLE)

    def test_unknown_method_is_501(self) -> None:
        response = self.client.post("/channel/pnp_device_monitor/wakelock/reboot")

        self.assertEqual(response.status_code, 501)
        self.assertEqual(response.get_json(), {"error": "not implemented"})

    def test_unknown_channel_is_404(self) -> None:
        response = self.client.post("/channel/other/enableWakeLock")

        self.assertEqual(response.status_code, 404)

    def test_status_reports_session(self) -> None:
        response = self.client.get("/status")
        data = response.get_json()
        self.assertEqual(data["state"], "idle")
        self.assertEqual(data["platform"], "Fake")

        self.client.post("/channel/pnp_device_monitor/wakelock/enableWakeLock")
        data = self.client.get("/status").get_json()

        self.assertEqual(data["state"], "held")
        self.assertEqual(data["max_duration"], 600)
        self.assertIsNotNone(data["acquired_at"])
        self.assertTrue(data["last_result"]["ok"])

    def test_failure_still_replies_true(self) -> None:
        self.platform.fail_acquire = OSError("denied")

        response = self.client.post("/channel/pnp_device_monitor/wakelock/enableWakeLock")

        self.assertEqual(response.get_json(), {"result": True})
        data = self.client.get("/status").get_json()
        self.assertFalse(data["last_result"]["ok"])
        self.assertEqual(data["last_result"]["reason"], "denied")


class TestFindFreePort(unittest.TestCase):

    @patch('wakeguard.web.server.socket.socket')
    def test_skips_busy_ports(self, mock_socket: object) -> None:
        sock = mock_socket.return_value.__enter__.return_value  # type: ignore[attr-defined]
        sock.bind.side_effect = [OSError("busy"), None]

        self.assertEqual(find_free_port([1111, 2222]), 2222)

    @patch('wakeguard.web.server.socket.socket')
    def test_all_busy_raises(self, mock_socket: object) -> None:
        sock = mock_socket.return_value.__enter__.return_value  # type: ignore[attr-defined]
        sock.bind.side_effect = OSError("busy")

        with self.assertRaises(RuntimeError):
            find_free_port([1111])


if __name__ == "__main__":
    unittest.main()
