"""Lifecycle states shared by Database, Environment and Cursor handles."""

from __future__ import annotations

from enum import Enum, auto


class HandleState(Enum):
    """Handle lifecycle states.

    State machine:

        UNOPENED ──open()──> OPENED ──close()──> CLOSED
            │                   │
            │                   ├──remove()──> REMOVED
            │                   └──rename()──> RENAMED
            │
            ├──close()───> CLOSED
            ├──remove()──> REMOVED
            └──rename()──> RENAMED

    A failed open() still moves the handle to OPENED. Cursors are born
    OPENED and can only move to CLOSED.
    """

    UNOPENED = auto()
    """Engine handle allocated, open() not attempted yet."""

    OPENED = auto()
    """An open() attempt has been recorded."""

    CLOSED = auto()
    """close() was called. The engine handle is gone."""

    REMOVED = auto()
    """remove() was called. The engine handle is gone."""

    RENAMED = auto()
    """rename() was called. The engine handle is gone."""

    def is_terminal(self) -> bool:
        """Check if the handle can no longer be used."""
        return self in (HandleState.CLOSED, HandleState.REMOVED, HandleState.RENAMED)

    def can_open(self) -> bool:
        """Check if an open() attempt is still allowed."""
        return self == HandleState.UNOPENED
