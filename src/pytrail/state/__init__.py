"""State/store layer.

The history store is the single owner of tracked positions; repositories
persist it between process runs.
"""

from pytrail.state.repository import HistoryRepository, InMemoryHistoryRepository, JsonFileHistoryRepository
from pytrail.state.store import HistoryStore

__all__ = [
    "HistoryRepository",
    "HistoryStore",
    "InMemoryHistoryRepository",
    "JsonFileHistoryRepository",
]
