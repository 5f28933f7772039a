"""Cursor - sequential positioning inside one database.

Cursors are created by Database.cursor() and stay bound to that
database's engine handle. Moving past either end raises NotFoundError,
which is the normal loop-termination signal; iterating a cursor stops on
it automatically.

Once the owning database is closed, removed or renamed the engine has
already discarded the cursor: move() raises CursorClosedError without an
engine call and close() only marks the cursor closed.
"""

from __future__ import annotations

from typing import Any, Iterator

from bdb_handles.application.engine_gateway import EngineGateway
from bdb_handles.application.managed_handle import ManagedHandle
from bdb_handles.domain.value_objects import CursorMode, HandleState
from bdb_handles.ports.inbound.handles import CursorClosedError, DatabasePort, NotFoundError


class Cursor(ManagedHandle):
    """Wrapper around one engine cursor handle."""

    kind = "cursor"
    closed_error = CursorClosedError

    def __init__(self, database: DatabasePort, handle: Any, gateway: EngineGateway) -> None:
        super().__init__(handle, gateway, state=HandleState.OPENED)
        self._database = database

    @property
    def database(self) -> DatabasePort:
        return self._database

    def move(self, mode: CursorMode) -> tuple[bytes, bytes]:
        """Reposition the cursor and return the pair at the new position.

        NEXT on a fresh cursor starts at the first pair, PREV at the last.

        Raises:
            CursorClosedError: If the cursor or its database is closed.
            NotFoundError: When the move runs off either end.
        """
        handle = self._live()
        if self._database.is_closed:
            self._gateway.rejected(self.kind, "closed")
            raise CursorClosedError("cursor's database is closed")
        key, value = self._gateway.call(
            "cursor_get", self._gateway.engine.cursor_get, handle, int(mode)
        )
        return key, value

    def first(self) -> tuple[bytes, bytes]:
        return self.move(CursorMode.FIRST)

    def last(self) -> tuple[bytes, bytes]:
        return self.move(CursorMode.LAST)

    def next(self) -> tuple[bytes, bytes]:
        return self.move(CursorMode.NEXT)

    def prev(self) -> tuple[bytes, bytes]:
        return self.move(CursorMode.PREV)

    def close(self) -> None:
        """Close the cursor.

        Raises:
            CursorClosedError: If the cursor is already closed.
            EngineError: If the engine reports a failure.
        """
        handle = self._release()
        if self._database.is_closed:
            return
        self._gateway.call("cursor_close", self._gateway.engine.cursor_close, handle)

    def __iter__(self) -> Iterator[tuple[bytes, bytes]]:
        """Yield pairs moving forward until the end of the database."""
        while True:
            try:
                yield self.move(CursorMode.NEXT)
            except NotFoundError:
                return
