"""Outbound adapters - implementations of the StorageEngine port.

FileStorageEngine is always available. BerkeleyDBEngine needs the
``berkeleydb`` distribution and is imported on demand from
``bdb_handles.adapters.outbound.berkeleydb_engine``.
"""

from bdb_handles.adapters.outbound.file_engine import (
    FileCursor,
    FileDatabase,
    FileEnvironment,
    FileStorageEngine,
)

__all__ = [
    "FileStorageEngine",
    "FileDatabase",
    "FileEnvironment",
    "FileCursor",
]
