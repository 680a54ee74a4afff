"""GNOME platform implementation."""
from .base import PlatformBase, ScreenSaverInhibitMixin


class GNOMEPlatform(ScreenSaverInhibitMixin, PlatformBase):
    """GNOME-specific implementation."""

    LOCK_DISABLE_COMMAND = ["gsettings", "set", "org.gnome.desktop.screensaver",
                            "lock-enabled", "false"]
    LOCK_ENABLE_COMMAND = ["gsettings", "set", "org.gnome.desktop.screensaver",
                           "lock-enabled", "true"]

    @property
    def name(self) -> str:
        return "GNOME"

    def wake_screen(self) -> bool:
        """xset on X11, simulated user activity through DBus on Wayland."""
        if self._is_x11():
            return super().wake_screen()

        try:
            interface = self._screensaver_interface()
            interface.SimulateUserActivity()
            return True
        except Exception as e:
            print(f"DBus wake failed: {e}")
            return False
