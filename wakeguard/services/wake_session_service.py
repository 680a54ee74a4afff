"""Keep-awake session controller and its channel handler."""
import datetime
from typing import Optional
from ..config import WAKE_LOCK_TAG, WAKE_LOCK_TIMEOUT_SEC, LOG_TAG
from ..log import log_debug, log_error
from ..models import OpResult, SessionState, WakeSession
from ..platform.base import PowerController, DisplayController, WakeLockFlag, WindowFlag
from ..channel import MethodCall, MethodResult, MethodCallHandler

ENABLE_METHOD = "enableWakeLock"
DISABLE_METHOD = "disableWakeLock"

WAKE_LOCK_FLAGS = WakeLockFlag.PARTIAL_WAKE_LOCK | WakeLockFlag.ACQUIRE_CAUSES_WAKEUP
KEEP_AWAKE_WINDOW_FLAGS = (
    WindowFlag.KEEP_SCREEN_ON | WindowFlag.SHOW_WHEN_LOCKED | WindowFlag.TURN_SCREEN_ON
)


class WakeSessionController:
    """
    Owns the single keep-awake session of the process.

    Every operation is best effort: platform failures are logged and
    reported as a failed OpResult, never raised. Calls are expected to be
    serialized by the caller.
    """

    def __init__(self, power: PowerController, display: DisplayController,
                 tag: str = WAKE_LOCK_TAG,
                 max_duration: int = WAKE_LOCK_TIMEOUT_SEC) -> None:
        self.power = power
        self.display = display
        self.tag = tag
        self.max_duration = max_duration
        self.session: Optional[WakeSession] = None
        self.last_result: OpResult = OpResult.success()

    @property
    def state(self) -> SessionState:
        if self.session is None:
            return SessionState.IDLE
        return self.session.state

    @property
    def is_held(self) -> bool:
        return self.state is SessionState.HELD

    def enable(self) -> OpResult:
        """
        Acquire a wake lock and keep the display on.

        Enabling while held acquires a fresh lock before releasing the old
        one, which restarts the timeout and keeps a single lock held.
        """
        if self.session is None:
            self.session = WakeSession(max_duration=self.max_duration)
        session = self.session

        try:
            handle = self.power.acquire_wake_lock(self.tag, WAKE_LOCK_FLAGS, session.max_duration)
            if session.handle is not None:
                # Parked until released so a failed release never orphans it
                session.stale_handles.append(session.handle)
            session.handle = handle
            session.acquired_at = datetime.datetime.now()
            self._release_stale(session)

            self.display.add_flags(KEEP_AWAKE_WINDOW_FLAGS)
        except Exception as e:
            log_error(LOG_TAG, "Error enabling wake lock", e)
            self.last_result = OpResult.failed(str(e) or type(e).__name__)
            return self.last_result

        log_debug(LOG_TAG, "Wake lock enabled successfully")
        self.last_result = OpResult.success()
        return self.last_result

    def disable(self) -> OpResult:
        """Release the wake lock if held and stop forcing the display on."""
        try:
            session = self.session
            if session is not None:
                self._release_stale(session)
                if session.handle is not None and session.handle.is_held:
                    self.power.release_wake_lock(session.handle)
                session.handle = None
                session.acquired_at = None

            self.display.clear_flags(WindowFlag.KEEP_SCREEN_ON)
        except Exception as e:
            log_error(LOG_TAG, "Error disabling wake lock", e)
            self.last_result = OpResult.failed(str(e) or type(e).__name__)
            return self.last_result

        log_debug(LOG_TAG, "Wake lock disabled successfully")
        self.last_result = OpResult.success()
        return self.last_result

    def _release_stale(self, session: WakeSession) -> None:
        while session.stale_handles:
            stale = session.stale_handles[0]
            if stale.is_held:
                self.power.release_wake_lock(stale)
            session.stale_handles.pop(0)

    def teardown(self) -> OpResult:
        """Host is going away; release whatever is held."""
        return self.disable()


def create_wake_lock_handler(controller: WakeSessionController) -> MethodCallHandler:
    """Build the channel handler serving enableWakeLock/disableWakeLock."""

    def handle(call: MethodCall, result: MethodResult) -> None:
        if call.method == ENABLE_METHOD:
            controller.enable()
            result.success(True)
        elif call.method == DISABLE_METHOD:
            controller.disable()
            result.success(True)
        else:
            result.not_implemented()

    return handle
