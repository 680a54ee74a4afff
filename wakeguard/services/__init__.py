"""Business logic services."""
from .wake_session_service import WakeSessionController, create_wake_lock_handler

__all__ = ['WakeSessionController', 'create_wake_lock_handler']
