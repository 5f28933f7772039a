"""Outbound ports - interfaces for external dependencies.

The only external dependency of the handle layer is the embedded
storage engine itself.
"""

from bdb_handles.ports.outbound.storage_engine import (
    CursorHandle,
    DbHandle,
    EnvHandle,
    StorageEngine,
    TxnHandle,
)

__all__ = [
    "StorageEngine",
    "DbHandle",
    "EnvHandle",
    "CursorHandle",
    "TxnHandle",
]
