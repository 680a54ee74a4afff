"""
Data models for the application.
"""
import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional
from .config import WAKE_LOCK_TIMEOUT_SEC


class SessionState(Enum):
    IDLE = "idle"
    HELD = "held"


@dataclass
class OpResult:
    """Outcome of a controller operation; failures never leave the controller."""
    ok: bool
    reason: str = ""

    @classmethod
    def success(cls) -> 'OpResult':
        return cls(ok=True)

    @classmethod
    def failed(cls, reason: str) -> 'OpResult':
        return cls(ok=False, reason=reason)


@dataclass
class WakeSession:
    """The single keep-awake session owned by a controller."""
    handle: Optional[Any] = None
    max_duration: int = WAKE_LOCK_TIMEOUT_SEC
    acquired_at: Optional[datetime.datetime] = None
    # Replaced handles whose release has not gone through yet
    stale_handles: List[Any] = field(default_factory=list)

    @property
    def held(self) -> bool:
        # The handle goes stale on its own once the OS-side timeout expires
        return self.handle is not None and self.handle.is_held

    @property
    def state(self) -> SessionState:
        return SessionState.HELD if self.held else SessionState.IDLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "held": self.held,
            "max_duration": self.max_duration,
            "acquired_at": self.acquired_at.isoformat() if self.held and self.acquired_at else None,
        }
