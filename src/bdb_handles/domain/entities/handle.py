"""Handle state guard shared by every resource wrapper.

Each wrapper (Database, Environment, Cursor) embeds one HandleGuard that
owns the opaque engine handle and gates every operation on the current
lifecycle state. The guard never talks to the engine.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from bdb_handles.domain.value_objects import HandleState
from bdb_handles.ports.inbound.handles import AlreadyOpenError, ClosedHandleError

H = TypeVar("H")


class HandleGuard(Generic[H]):
    """Owns one engine handle and enforces the handle state machine.

    The engine handle is held until the first terminal transition and then
    cleared, so it can never be handed to the engine twice.

    Example:
        guard = HandleGuard("database", handle, DatabaseClosedError)
        guard.check_live()       # returns the handle
        guard.mark_opened()      # records the open attempt
        handle = guard.release() # terminal, guard.handle is now None
    """

    def __init__(
        self,
        kind: str,
        handle: H,
        closed_error: type[ClosedHandleError],
        state: HandleState = HandleState.UNOPENED,
    ) -> None:
        """Initialize the guard.

        Args:
            kind: Resource kind used in error messages.
            handle: The engine handle to own.
            closed_error: Error raised once the handle is terminal.
            state: Initial state (cursors start OPENED).
        """
        self._kind = kind
        self._handle: H | None = handle
        self._closed_error = closed_error
        self._state = state

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def handle(self) -> H | None:
        """The owned engine handle, or None once terminal."""
        return self._handle

    def is_terminal(self) -> bool:
        return self._state.is_terminal()

    def check_live(self) -> H:
        """Return the engine handle if the resource is not terminal.

        Raises:
            ClosedHandleError: The resource-specific subclass.
        """
        if self._state.is_terminal() or self._handle is None:
            raise self._closed_error()
        return self._handle

    def mark_opened(self) -> H:
        """Record an open attempt and return the engine handle.

        Raises:
            ClosedHandleError: If the resource is terminal.
            AlreadyOpenError: If an open attempt was already recorded.
        """
        handle = self.check_live()
        if not self._state.can_open():
            raise AlreadyOpenError(self._kind)
        self._state = HandleState.OPENED
        return handle

    def release(self, state: HandleState = HandleState.CLOSED) -> H:
        """Move to a terminal state and give up the engine handle.

        Args:
            state: The terminal state to enter.

        Returns:
            The engine handle, for one final engine call.

        Raises:
            ClosedHandleError: If the resource is already terminal.
            ValueError: If state is not terminal.
        """
        if not state.is_terminal():
            raise ValueError(f"{state.name} is not a terminal state")
        handle = self.check_live()
        self._handle = None
        self._state = state
        return handle

    def __repr__(self) -> str:
        return f"HandleGuard({self._kind}, {self._state.name})"
