"""Translation of engine status codes into the error taxonomy.

Every engine call returns an integer status. The translator turns that
status into either success or an EngineError carrying the raw code and
the engine's own description of it. The engine's reserved "not found"
code becomes a NotFoundError, which is still an EngineError.

The translator performs no retries and keeps no state beyond the engine
it reads descriptions from.
"""

from __future__ import annotations

from bdb_handles.domain.value_objects import DB_SUCCESS
from bdb_handles.ports.inbound.handles import EngineError, NotFoundError
from bdb_handles.ports.outbound.storage_engine import StorageEngine


class ErrorTranslator:
    """Maps engine status codes to EngineError instances."""

    def __init__(self, engine: StorageEngine) -> None:
        self._engine = engine

    def translate(self, status: int) -> EngineError | None:
        """Translate a status code.

        Args:
            status: Status code returned by an engine call.

        Returns:
            None on success, otherwise the matching EngineError.
        """
        if status == DB_SUCCESS:
            return None
        message = self._engine.strerror(status)
        if status == self._engine.not_found_code:
            return NotFoundError(status, message)
        return EngineError(status, message)

    def check(self, status: int) -> None:
        """Raise the translated error for a nonzero status."""
        error = self.translate(status)
        if error is not None:
            raise error

    def is_not_found(self, status: int) -> bool:
        return status == self._engine.not_found_code
