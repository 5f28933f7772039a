"""Adapters layer - concrete implementations of port interfaces.

Outbound adapters implement the storage engine the handle layer
forwards to.
"""

from bdb_handles.adapters.outbound import FileStorageEngine

__all__ = [
    # Outbound adapters
    "FileStorageEngine",
]
