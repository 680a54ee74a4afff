"""Generic X11 fallback implementation."""
from .base import PlatformBase


class GenericPlatform(PlatformBase):
    """Fallback for unknown desktop environments."""

    # No portable way to suppress the lock screen; the flag is only recorded
    LOCK_DISABLE_COMMAND = None
    LOCK_ENABLE_COMMAND = None

    @property
    def name(self) -> str:
        return "Generic"
