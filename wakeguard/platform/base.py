"""Base platform abstraction."""
import atexit
import os
import subprocess
import weakref
from abc import ABC, abstractmethod
from enum import IntFlag
from typing import Optional, List


class WakeLockFlag(IntFlag):
    """Wake lock level and behaviour flags."""
    PARTIAL_WAKE_LOCK = 0x00000001
    ACQUIRE_CAUSES_WAKEUP = 0x10000000


class WindowFlag(IntFlag):
    """Display persistence flags of the host window."""
    KEEP_SCREEN_ON = 0x00000080
    SHOW_WHEN_LOCKED = 0x00080000
    TURN_SCREEN_ON = 0x00200000


class WakeLockError(Exception):
    """Raised when the platform cannot acquire a wake lock."""


# Handles not yet released, dropped at interpreter exit
_live_handles: "weakref.WeakSet[WakeLockHandle]" = weakref.WeakSet()


def release_live_handles() -> None:
    for handle in list(_live_handles):
        handle.release()


atexit.register(release_live_handles)


class WakeLockHandle:
    """
    A held wake lock.

    The lock lives as long as its inhibitor process. The inhibitor ends
    after the lock timeout or as soon as this process is gone, whichever
    comes first, so an unreleased lock never outlives either.
    """

    def __init__(self, tag: str, process: subprocess.Popen, timeout_sec: float) -> None:
        self.tag = tag
        self.timeout_sec = timeout_sec
        self._process: Optional[subprocess.Popen] = process
        _live_handles.add(self)

    @property
    def is_held(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def release(self) -> None:
        process = self._process
        if process is None:
            return
        self._process = None
        if process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=2)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()

    def __repr__(self) -> str:
        return f"WakeLockHandle(tag={self.tag!r}, held={self.is_held})"


class PowerController(ABC):
    """Acquire and release wake locks."""

    @abstractmethod
    def acquire_wake_lock(self, tag: str, flags: WakeLockFlag, timeout_sec: float) -> WakeLockHandle:
        """Acquire a wake lock that expires after timeout_sec. Raises WakeLockError."""
        pass

    @abstractmethod
    def release_wake_lock(self, handle: WakeLockHandle) -> None:
        pass


class DisplayController(ABC):
    """Window flags controlling whether the display stays on."""

    def __init__(self) -> None:
        self._window_flags = WindowFlag(0)

    @property
    def window_flags(self) -> WindowFlag:
        return self._window_flags

    def has_flags(self, flags: WindowFlag) -> bool:
        return (self._window_flags & flags) == flags

    def add_flags(self, flags: WindowFlag) -> None:
        """Set flags on the host window. TURN_SCREEN_ON wakes the display every time it is added."""
        newly_set = flags & ~self._window_flags
        self._window_flags |= flags

        if newly_set & WindowFlag.KEEP_SCREEN_ON:
            self._apply_keep_screen_on(True)
        if newly_set & WindowFlag.SHOW_WHEN_LOCKED:
            self._apply_show_when_locked(True)
        if flags & WindowFlag.TURN_SCREEN_ON:
            self.wake_screen()

    def clear_flags(self, flags: WindowFlag) -> None:
        cleared = flags & self._window_flags
        self._window_flags &= ~flags

        if cleared & WindowFlag.KEEP_SCREEN_ON:
            self._apply_keep_screen_on(False)
        if cleared & WindowFlag.SHOW_WHEN_LOCKED:
            self._apply_show_when_locked(False)

    def set_stay_on(self, on: bool) -> None:
        if on:
            self.add_flags(WindowFlag.KEEP_SCREEN_ON)
        else:
            self.clear_flags(WindowFlag.KEEP_SCREEN_ON)

    @abstractmethod
    def wake_screen(self) -> bool:
        """Turn the display on if it is off."""
        pass

    @abstractmethod
    def _apply_keep_screen_on(self, enabled: bool) -> bool:
        pass

    @abstractmethod
    def _apply_show_when_locked(self, enabled: bool) -> bool:
        pass


class PlatformBase(PowerController, DisplayController):
    """Abstract base for platform-specific operations."""

    # Subclasses override these
    WAKE_LOCK_COMMAND: List[str] = [
        "systemd-inhibit", "--what={what}", "--who={tag}",
        "--why=Keep device awake", "--mode=block",
        "timeout", "{timeout}", "tail", "--pid={pid}", "-f", "/dev/null",
    ]
    WAKE_SCREEN_COMMAND: Optional[List[str]] = ["xset", "dpms", "force", "on"]
    KEEP_SCREEN_ON_COMMAND: Optional[List[str]] = ["xset", "s", "off", "-dpms"]
    RESTORE_SCREEN_COMMAND: Optional[List[str]] = ["xset", "s", "on", "+dpms"]
    LOCK_DISABLE_COMMAND: Optional[List[str]] = None
    LOCK_ENABLE_COMMAND: Optional[List[str]] = None

    # An inhibitor that exits within this window was refused. acquire_wake_lock
    # blocks the caller for this long, the only wait on the enable path.
    STARTUP_GRACE_SEC: float = 0.1

    @property
    @abstractmethod
    def name(self) -> str:
        """Platform name for logging."""
        pass

    def acquire_wake_lock(self, tag: str, flags: WakeLockFlag, timeout_sec: float) -> WakeLockHandle:
        what = "sleep" if flags & WakeLockFlag.PARTIAL_WAKE_LOCK else "sleep:idle"
        cmd = [part.format(what=what, tag=tag, timeout=int(timeout_sec), pid=os.getpid())
               for part in self.WAKE_LOCK_COMMAND]
        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise WakeLockError(f"Could not start {cmd[0]}: {e}") from e

        try:
            returncode = process.wait(timeout=self.STARTUP_GRACE_SEC)
        except subprocess.TimeoutExpired:
            pass
        else:
            raise WakeLockError(f"{cmd[0]} exited immediately with status {returncode}")

        handle = WakeLockHandle(tag, process, timeout_sec)
        if flags & WakeLockFlag.ACQUIRE_CAUSES_WAKEUP:
            self.wake_screen()
        return handle

    def release_wake_lock(self, handle: WakeLockHandle) -> None:
        handle.release()

    def wake_screen(self) -> bool:
        if not self.WAKE_SCREEN_COMMAND or not self._is_x11():
            return False
        return self._run_command(self.WAKE_SCREEN_COMMAND)

    def _apply_keep_screen_on(self, enabled: bool) -> bool:
        cmd = self.KEEP_SCREEN_ON_COMMAND if enabled else self.RESTORE_SCREEN_COMMAND
        if not cmd or not self._is_x11():
            return False
        return self._run_command(cmd)

    def _apply_show_when_locked(self, enabled: bool) -> bool:
        """Keep the session from locking while the flag is set."""
        cmd = self.LOCK_DISABLE_COMMAND if enabled else self.LOCK_ENABLE_COMMAND
        if not cmd:
            return False
        return self._run_command(cmd)

    # Shared helpers
    def _check_command(self, cmd: str) -> bool:
        """Check if command exists."""
        try:
            subprocess.run(["which", cmd], capture_output=True, check=True)
            return True
        except (subprocess.CalledProcessError, FileNotFoundError):
            return False

    def _run_command(self, cmd: List[str]) -> bool:
        """Execute command, return success."""
        try:
            result = subprocess.run(cmd, check=False, capture_output=True)
            return result.returncode == 0
        except FileNotFoundError:
            return False

    def _is_x11(self) -> bool:
        """Check if running on X11."""
        session_type = os.environ.get("XDG_SESSION_TYPE", "").lower()
        return session_type == "x11" or os.environ.get("DISPLAY") is not None


class ScreenSaverInhibitMixin:
    """
    Keep the screen on through org.freedesktop.ScreenSaver on the session bus.

    Falls back to the xset commands when DBus is not available.
    """

    SCREENSAVER_SERVICE = "org.freedesktop.ScreenSaver"
    SCREENSAVER_PATH = "/org/freedesktop/ScreenSaver"

    _screensaver_cookie: Optional[int] = None

    def _screensaver_interface(self):  # type: ignore[no-untyped-def]
        import dbus  # type: ignore[import-untyped]

        bus = dbus.SessionBus()  # type: ignore[reportUnknownMemberType]
        obj = bus.get_object(self.SCREENSAVER_SERVICE, self.SCREENSAVER_PATH)  # type: ignore[reportUnknownMemberType]
        return dbus.Interface(obj, self.SCREENSAVER_SERVICE)  # type: ignore[reportUnknownMemberType]

    def _apply_keep_screen_on(self, enabled: bool) -> bool:
        try:
            interface = self._screensaver_interface()
            if enabled:
                if self._screensaver_cookie is None:
                    self._screensaver_cookie = int(interface.Inhibit("wakeguard", "Keep screen on"))
            elif self._screensaver_cookie is not None:
                interface.UnInhibit(self._screensaver_cookie)
                self._screensaver_cookie = None
            return True
        except Exception as e:
            print(f"DBus screensaver inhibit failed: {e}")
        return super()._apply_keep_screen_on(enabled)  # type: ignore[misc]
