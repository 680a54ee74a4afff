"""
Host lifecycle: wires the platform, the session controller and the channel.

The host follows the usual activity lifecycle:
    on_create()          - window flags for a kiosk-style always-on display
    configure_channels() - register the wake lock channel handler
    on_destroy()         - release the wake lock before the process exits
"""
from contextlib import ExitStack
from typing import Dict, Optional, TYPE_CHECKING
from .channel import MethodChannel
from .config import CHANNEL_NAME, LOG_TAG, Config, settings
from .log import log_debug, log_error
from .models import OpResult
from .platform import PlatformBase, get_platform
from .services.wake_session_service import (
    WakeSessionController, KEEP_AWAKE_WINDOW_FLAGS, create_wake_lock_handler
)

if TYPE_CHECKING:
    from .web import WebBridge


class HostActivity:
    """Owns the session controller for the lifetime of the host process."""

    def __init__(self, platform: Optional[PlatformBase] = None,
                 config: Optional[Config] = None) -> None:
        self.platform = platform if platform is not None else get_platform()
        self.config = config if config is not None else settings
        self.controller = WakeSessionController(self.platform, self.platform)
        self.channels: Dict[str, MethodChannel] = {}
        self.destroyed = False

    def on_create(self) -> None:
        if self.config.keep_screen_on_at_start:
            self.platform.add_flags(KEEP_AWAKE_WINDOW_FLAGS)
        log_debug(LOG_TAG, f"Host created on {self.platform.name}")

    def configure_channels(self) -> MethodChannel:
        channel = MethodChannel(CHANNEL_NAME)
        channel.set_method_call_handler(create_wake_lock_handler(self.controller))
        self.channels[channel.name] = channel
        return channel

    @property
    def wake_lock_channel(self) -> MethodChannel:
        return self.channels[CHANNEL_NAME]

    def start_bridge(self) -> Optional['WebBridge']:
        """Start the HTTP bridge if this host's config asks for it."""
        if not self.config.web_bridge_enabled:
            return None
        from .web import WebBridge

        bridge = WebBridge(self)
        bridge.start()
        return bridge

    def on_destroy(self) -> OpResult:
        """
        Release the wake lock and restore every window flag. Safe to call
        more than once.

        Handlers are detached first so no new call gets in, then teardown
        waits for any call already in flight on a channel.
        """
        for channel in self.channels.values():
            channel.set_method_call_handler(None)

        with ExitStack() as stack:
            for channel in self.channels.values():
                stack.enter_context(channel.serialized())
            result = self.controller.teardown()
            try:
                # Lock suppression is a persistent desktop setting
                self.platform.clear_flags(KEEP_AWAKE_WINDOW_FLAGS)
            except Exception as e:
                log_error(LOG_TAG, "Error restoring window flags", e)
                result = OpResult.failed(str(e) or type(e).__name__)

        self.destroyed = True
        return result
