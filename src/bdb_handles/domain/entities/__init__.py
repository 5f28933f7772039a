"""Domain entities for the handle layer.

Exports:
    - HandleGuard: Owns an engine handle and enforces the lifecycle
      state machine shared by databases, environments and cursors.
"""

from bdb_handles.domain.entities.handle import HandleGuard

__all__ = [
    "HandleGuard",
]
