"""
Engine HTTP API
"""

from .server import EngineServer

__all__ = ["EngineServer"]
