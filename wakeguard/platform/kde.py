"""KDE Plasma platform implementation."""
from .base import PlatformBase, ScreenSaverInhibitMixin


class KDEPlatform(ScreenSaverInhibitMixin, PlatformBase):
    """KDE Plasma-specific implementation."""

    LOCK_DISABLE_COMMAND = ["kwriteconfig5", "--file", "kscreenlockerrc",
                            "--group", "Daemon", "--key", "Autolock", "false"]
    LOCK_ENABLE_COMMAND = ["kwriteconfig5", "--file", "kscreenlockerrc",
                           "--group", "Daemon", "--key", "Autolock", "true"]

    @property
    def name(self) -> str:
        return "KDE Plasma"

    def _apply_show_when_locked(self, enabled: bool) -> bool:
        """Plasma 6 ships kwriteconfig6 instead."""
        cmd = self.LOCK_DISABLE_COMMAND if enabled else self.LOCK_ENABLE_COMMAND
        if not self._check_command(cmd[0]) and self._check_command("kwriteconfig6"):
            cmd = ["kwriteconfig6"] + cmd[1:]
        return self._run_command(cmd)
