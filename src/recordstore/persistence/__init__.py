"""Persistence layer - adapters the pipelines delegate to."""

from recordstore.persistence.adapter import Adapter
from recordstore.persistence.memory import MemoryAdapter

__all__ = ["Adapter", "MemoryAdapter"]
