"""
Local HTTP serving of a ServingSession (Flask).
"""

from .app import create_server, find_free_port, serve

__all__ = ["create_server", "find_free_port", "serve"]
