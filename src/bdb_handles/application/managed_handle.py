"""Base class shared by the Database, Environment and Cursor wrappers.

ManagedHandle pairs one HandleGuard with one EngineGateway and gives the
wrappers three primitives:

- ``_live()``: the engine handle, or the resource's closed error
- ``_begin_open()``: record the single open attempt
- ``_release(state)``: enter a terminal state and take the handle for
  one last engine call

Guard rejections are counted before they propagate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from bdb_handles.application.engine_gateway import EngineGateway
from bdb_handles.domain.entities import HandleGuard
from bdb_handles.domain.value_objects import HandleState
from bdb_handles.infrastructure.logging import get_logger
from bdb_handles.ports.inbound.handles import AlreadyOpenError, ClosedHandleError


logger = get_logger(__name__)


class ManagedHandle(ABC):
    """A resource wrapper that owns exactly one engine handle."""

    kind = "handle"
    closed_error: type[ClosedHandleError] = ClosedHandleError

    def __init__(
        self,
        handle: Any,
        gateway: EngineGateway,
        state: HandleState = HandleState.UNOPENED,
    ) -> None:
        self._guard: HandleGuard[Any] = HandleGuard(self.kind, handle, self.closed_error, state)
        self._gateway = gateway
        gateway.handle_acquired(self.kind)
        logger.debug("handle_created", kind=self.kind, state=state)

    @property
    def state(self) -> HandleState:
        return self._guard.state

    @property
    def is_closed(self) -> bool:
        """True once the handle reached a terminal state."""
        return self._guard.is_terminal()

    def _live(self) -> Any:
        try:
            return self._guard.check_live()
        except ClosedHandleError:
            self._gateway.rejected(self.kind, "closed")
            raise

    def _begin_open(self) -> Any:
        try:
            handle = self._guard.mark_opened()
        except ClosedHandleError:
            self._gateway.rejected(self.kind, "closed")
            raise
        except AlreadyOpenError:
            self._gateway.rejected(self.kind, "already_open")
            raise
        logger.debug("handle_opened", kind=self.kind)
        return handle

    def _release(self, state: HandleState = HandleState.CLOSED) -> Any:
        try:
            handle = self._guard.release(state)
        except ClosedHandleError:
            self._gateway.rejected(self.kind, "closed")
            raise
        self._gateway.handle_released(self.kind)
        logger.debug("handle_released", kind=self.kind, state=state)
        return handle

    @abstractmethod
    def close(self) -> None:
        """Release the engine handle with the resource's own engine call."""
        ...

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close if still live."""
        if not self.is_closed:
            self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(state={self.state.name})"


def as_bytes(value: Any, name: str) -> bytes:
    """Copy a bytes-like key or value; anything else is a caller error."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"{name} must be bytes-like, got {type(value).__name__}")
