"""UI components."""
from .tray import TrayApp

__all__ = ['TrayApp']
