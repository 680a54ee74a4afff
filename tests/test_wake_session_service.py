"""Unit tests for WakeSessionController."""
import tempfile
import unittest
from unittest.mock import patch
from wakeguard.models import SessionState
from wakeguard.platform.base import WakeLockFlag, WindowFlag, WakeLockError
from wakeguard.services.wake_session_service import WakeSessionController
from fakes import FakePlatform


class TestWakeSessionController(unittest.TestCase):
    """Test enable/disable/teardown transitions."""

    def setUp(self) -> None:
        self.platform = FakePlatform()
        self.controller = WakeSessionController(self.platform, self.platform)
        # Keep test output quiet
        self.print_patcher = patch('builtins.print')
        self.mock_print = self.print_patcher.start()

    def tearDown(self) -> None:
        self.print_patcher.stop()

    def _logged(self) -> str:
        return "\n".join(str(c.args[0]) for c in self.mock_print.call_args_list)

    def test_initial_state_is_idle(self) -> None:
        self.assertEqual(self.controller.state, SessionState.IDLE)
        self.assertIsNone(self.controller.session)

    def test_enable_holds_lock_and_keeps_screen_on(self) -> None:
        result = self.controller.enable()

        self.assertTrue(result.ok)
        self.assertEqual(self.controller.state, SessionState.HELD)
        self.assertTrue(self.platform.has_flags(WindowFlag.KEEP_SCREEN_ON))
        self.assertTrue(self.platform.keep_screen_on)
        self.assertIsNotNone(self.controller.session.acquired_at)
        self.assertIn("WakeLock: Wake lock enabled successfully", self._logged())

    def test_enable_requests_partial_lock_with_ceiling(self) -> None:
        self.controller.enable()

        tag, flags, timeout = self.platform.acquire_calls[0]
        self.assertEqual(tag, "PNPDeviceMonitor:WakeLock")
        self.assertEqual(flags, WakeLockFlag.PARTIAL_WAKE_LOCK | WakeLockFlag.ACQUIRE_CAUSES_WAKEUP)
        self.assertEqual(timeout, 600)
        self.assertGreaterEqual(self.platform.wake_count, 1)

    def test_enable_sets_all_display_flags(self) -> None:
        self.controller.enable()

        self.assertTrue(self.platform.has_flags(
            WindowFlag.KEEP_SCREEN_ON | WindowFlag.SHOW_WHEN_LOCKED | WindowFlag.TURN_SCREEN_ON
        ))

    def test_disable_returns_to_idle_and_clears_stay_on(self) -> None:
        self.controller.enable()
        result = self.controller.disable()

        self.assertTrue(result.ok)
        self.assertEqual(self.controller.state, SessionState.IDLE)
        self.assertFalse(self.platform.has_flags(WindowFlag.KEEP_SCREEN_ON))
        self.assertFalse(self.platform.keep_screen_on)
        self.assertEqual(self.platform.held_handles, [])
        self.assertIsNone(self.controller.session.handle)
        self.assertIn("WakeLock: Wake lock disabled successfully", self._logged())

    def test_disable_keeps_host_window_flags(self) -> None:
        """Only the stay-on flag is cleared."""
        self.controller.enable()
        self.controller.disable()

        self.assertTrue(self.platform.has_flags(WindowFlag.SHOW_WHEN_LOCKED))

    def test_disable_twice_is_noop(self) -> None:
        self.controller.enable()
        self.controller.disable()
        released = list(self.platform.handles)

        result = self.controller.disable()

        self.assertTrue(result.ok)
        self.assertEqual(self.controller.state, SessionState.IDLE)
        self.assertEqual(self.platform.handles, released)

    def test_disable_without_enable_is_noop(self) -> None:
        result = self.controller.disable()

        self.assertTrue(result.ok)
        self.assertEqual(self.controller.state, SessionState.IDLE)
        self.assertEqual(self.platform.acquire_calls, [])

    def test_enable_twice_refreshes_single_lock(self) -> None:
        """A repeated enable re-acquires and releases the old lock."""
        self.controller.enable()
        first_session = self.controller.session
        first_handle = first_session.handle
        first_acquired = first_session.acquired_at

        result = self.controller.enable()

        self.assertTrue(result.ok)
        self.assertIs(self.controller.session, first_session)
        self.assertEqual(len(self.platform.acquire_calls), 2)
        self.assertEqual(len(self.platform.held_handles), 1)
        self.assertFalse(first_handle.is_held)
        self.assertIsNot(self.controller.session.handle, first_handle)
        self.assertGreaterEqual(self.controller.session.acquired_at, first_acquired)

    def test_teardown_after_enable_releases_lock(self) -> None:
        self.controller.enable()

        result = self.controller.teardown()

        self.assertTrue(result.ok)
        self.assertEqual(self.controller.state, SessionState.IDLE)
        self.assertEqual(self.platform.held_handles, [])

    def test_acquire_failure_is_logged_not_raised(self) -> None:
        self.platform.fail_acquire = WakeLockError("systemd-inhibit missing")

        result = self.controller.enable()

        self.assertFalse(result.ok)
        self.assertEqual(result.reason, "systemd-inhibit missing")
        self.assertEqual(self.controller.state, SessionState.IDLE)
        self.assertIn("WakeLock: Error enabling wake lock", self._logged())

    def test_failed_refresh_keeps_previous_lock(self) -> None:
        self.controller.enable()
        self.platform.fail_acquire = RuntimeError("denied")

        result = self.controller.enable()

        self.assertFalse(result.ok)
        self.assertEqual(self.controller.state, SessionState.HELD)
        self.assertEqual(len(self.platform.held_handles), 1)

    def test_release_failure_is_logged_not_raised(self) -> None:
        self.controller.enable()
        self.platform.fail_release = OSError("gone")

        result = self.controller.disable()

        self.assertFalse(result.ok)
        self.assertIn("WakeLock: Error disabling wake lock", self._logged())

    def test_failed_release_on_refresh_is_retried_by_disable(self) -> None:
        self.controller.enable()
        self.platform.fail_release = OSError("busy")

        result = self.controller.enable()
        self.assertFalse(result.ok)
        self.assertEqual(len(self.controller.session.stale_handles), 1)

        self.platform.fail_release = None
        self.assertTrue(self.controller.disable().ok)

        self.assertEqual(self.platform.held_handles, [])
        self.assertEqual(self.controller.session.stale_handles, [])

    def test_unwritable_debug_log_does_not_fail_enable(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir, \
                patch('wakeguard.config.DEBUG_MODE', True), \
                patch('wakeguard.config.DEBUG_LOG_PATH', tmpdir):
            # The log path is a directory, so every write fails
            self.assertTrue(self.controller.enable().ok)
            self.platform.fail_release = OSError("gone")
            self.assertFalse(self.controller.disable().ok)

        self.assertEqual(self.controller.state, SessionState.HELD)

    def test_expired_lock_reads_idle(self) -> None:
        """The OS-side timeout ends the session without a disable call."""
        self.controller.enable()
        self.platform.handles[0].expire()

        self.assertEqual(self.controller.state, SessionState.IDLE)
        self.assertTrue(self.controller.disable().ok)

    def test_no_sequence_raises(self) -> None:
        self.platform.fail_release = OSError("gone")
        for op in ["enable", "enable", "disable", "disable", "enable", "teardown", "disable"]:
            result = getattr(self.controller, op)()
            self.assertIsNotNone(result)


if __name__ == "__main__":
    unittest.main()
