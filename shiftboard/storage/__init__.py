"""Storage adapters for the shift board.

Return type conventions:
- Writes return StorageResult: caller must check .success (or call
  .raise_for_failure()) before relying on the write.
- Reads return plain records; an unreachable backend raises ConnectivityError.
"""

from shiftboard.storage.base import (
    ConnectivityError,
    Storage,
    StorageError,
    StorageResult,
)
from shiftboard.storage.json_store import JsonFileStorage
from shiftboard.storage.memory import MemoryStorage

__all__ = [
    "ConnectivityError",
    "Storage",
    "StorageError",
    "StorageResult",
    "JsonFileStorage",
    "MemoryStorage",
]
