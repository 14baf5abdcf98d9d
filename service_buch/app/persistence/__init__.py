"""
Store adapters for catalog entries.
"""

from .base import BuchStore
from .memory import MemoryBuchStore
from .mongo import MongoBuchStore

__all__ = ["BuchStore", "MemoryBuchStore", "MongoBuchStore"]
