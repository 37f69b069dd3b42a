"""
In-memory test doubles.
"""
from .in_memory_store import InMemorySummaryStore

__all__ = ["InMemorySummaryStore"]
