"""
Core interfaces (protocols) for extensibility.
All backends must implement these protocols to be swappable.
"""

from .storage import PersistentStorage

__all__ = [
    "PersistentStorage",
]
