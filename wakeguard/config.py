import os
import json
from typing import Any, Dict, List

CHANNEL_NAME: str = "pnp_device_monitor/wakelock"
WAKE_LOCK_TAG: str = "PNPDeviceMonitor:WakeLock"
WAKE_LOCK_TIMEOUT_SEC: int = 10 * 60  # 10 minutes
LOG_TAG: str = "WakeLock"

# Preferred ports for the HTTP bridge, tried in order
WEB_PORTS: List[int] = [5051, 8081, 5001]

# Force a platform backend ("kde", "gnome", "generic")
PLATFORM_OVERRIDE: str = os.environ.get("WAKEGUARD_PLATFORM", "").lower()

# User configuration file path
USER_CONFIG_PATH: str = os.path.expanduser("~/.config/wakeguard/settings.json")

# Debug mode - appends detailed logging to DEBUG_LOG_PATH
DEBUG_MODE: bool = os.environ.get("WAKEGUARD_DEBUG", "0") == "1"
DEBUG_LOG_PATH: str = os.path.expanduser("~/.local/share/wakeguard_debug.log")


# --- Dynamic Configuration Class ---

class Config:
    """
    Manages dynamic application settings loaded from the user's JSON file.

    This class holds settings that can be reloaded at runtime.
    """
    DEFAULT_KEEP_SCREEN_ON_AT_START: bool = True
    DEFAULT_WEB_BRIDGE_ENABLED: bool = False

    def __init__(self, config_path: str = USER_CONFIG_PATH):
        self.config_path = config_path
        self._user_config: Dict[str, Any] = {}

        self.keep_screen_on_at_start: bool = self.DEFAULT_KEEP_SCREEN_ON_AT_START
        self.web_bridge_enabled: bool = self.DEFAULT_WEB_BRIDGE_ENABLED

        self.reload()

    def _load_user_config(self) -> Dict[str, Any]:
        """Load user configuration from file."""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
            except (json.JSONDecodeError, IOError) as e:
                print(f"Ignoring unreadable config {self.config_path}: {e}")
        return {}

    def reload(self) -> None:
        """
        Reload configuration from disk, updating this object's attributes.
        """
        self._user_config = self._load_user_config()

        self.keep_screen_on_at_start = bool(self._user_config.get(
            'keep_screen_on_at_start', self.DEFAULT_KEEP_SCREEN_ON_AT_START
        ))
        self.web_bridge_enabled = bool(self._user_config.get(
            'web_bridge_enabled', self.DEFAULT_WEB_BRIDGE_ENABLED
        ))


# --- Singleton Instance ---
settings = Config()
