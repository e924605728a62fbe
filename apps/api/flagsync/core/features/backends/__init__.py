"""
Definition store backends.
"""

from .memory import MemoryDefinitionStore

__all__ = [
    "MemoryDefinitionStore",
]
