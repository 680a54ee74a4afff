"""Local HTTP bridge for out-of-process callers."""
from .server import WebBridge, create_app, find_free_port

__all__ = ['WebBridge', 'create_app', 'find_free_port']
