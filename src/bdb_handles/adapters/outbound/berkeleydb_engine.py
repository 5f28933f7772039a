"""Berkeley DB implementation of the StorageEngine port.

This adapter forwards every call to a real Berkeley DB library through
the ``berkeleydb`` distribution (install the ``bdb`` extra). The library
raises exceptions; the adapter turns them back into the status codes the
port promises, so the handle layer sees the same contract as with the
file engine.

Flag, type and mode values are mapped onto the constants of the linked
library rather than passed as raw integers, since those values are only
stable within one Berkeley DB release line.

Record-number databases (RECNO, QUEUE) take integer keys in the library;
the adapter converts them to and from 4-byte native-endian keys.
"""

from __future__ import annotations

import errno
import logging
import os
import struct
from typing import Any

from berkeleydb import db as bdb

from bdb_handles.domain.value_objects import (
    DB_SUCCESS,
    CursorMode,
    DatabaseType,
    EnvironmentFlag,
    OpenFlag,
)


logger = logging.getLogger(__name__)

RECNO_FORMAT = "=I"

_DB_TYPES = {
    DatabaseType.BTREE: bdb.DB_BTREE,
    DatabaseType.HASH: bdb.DB_HASH,
    DatabaseType.RECNO: bdb.DB_RECNO,
    DatabaseType.QUEUE: bdb.DB_QUEUE,
    DatabaseType.UNKNOWN: bdb.DB_UNKNOWN,
}

_OPEN_FLAGS = {
    OpenFlag.CREATE: bdb.DB_CREATE,
    OpenFlag.EXCL: bdb.DB_EXCL,
    OpenFlag.RDONLY: bdb.DB_RDONLY,
    OpenFlag.TRUNCATE: bdb.DB_TRUNCATE,
}

_ENV_FLAGS = {
    EnvironmentFlag.CREATE: bdb.DB_CREATE,
    EnvironmentFlag.INIT_MPOOL: bdb.DB_INIT_MPOOL,
}

_CURSOR_MODES = {
    CursorMode.FIRST: bdb.DB_FIRST,
    CursorMode.LAST: bdb.DB_LAST,
    CursorMode.NEXT: bdb.DB_NEXT,
    CursorMode.PREV: bdb.DB_PREV,
}

_RECORD_TYPES = (bdb.DB_RECNO, bdb.DB_QUEUE)


def _to_native(flags: int, mapping: dict[Any, int]) -> int | None:
    """Map our flag bits onto library bits; None if unknown bits are set."""
    native = 0
    remaining = int(flags)
    for ours, theirs in mapping.items():
        if flags & ours:
            native |= theirs
            remaining &= ~int(ours)
    return None if remaining else native


def _from_native(native: int, mapping: dict[Any, int]) -> int:
    flags = 0
    for ours, theirs in mapping.items():
        if native & theirs:
            flags |= int(ours)
    return flags


class BerkeleyDBEngine:
    """StorageEngine backed by the Berkeley DB C library.

    Example:
        engine = BerkeleyDBEngine()
        status, db = engine.db_create(None)
        engine.db_open(db, None, "/tmp/a.db", DatabaseType.HASH, OpenFlag.CREATE, 0)
    """

    def __init__(self) -> None:
        # Last message seen per status code, for strerror()
        self._messages: dict[int, str] = {}

    @property
    def not_found_code(self) -> int:
        return bdb.DB_NOTFOUND

    def _status(self, exc: bdb.DBError) -> int:
        code = exc.args[0] if exc.args and isinstance(exc.args[0], int) else errno.EIO
        if len(exc.args) > 1:
            self._messages[code] = str(exc.args[1])
        logger.debug(f"Berkeley DB returned {code}: {exc}")
        return code

    # =========================================================================
    # Database handles
    # =========================================================================

    def db_create(self, env: Any | None) -> tuple[int, Any | None]:
        try:
            handle = bdb.DB(env) if env is not None else bdb.DB()
            # Raise DBNotFoundError from DB.get instead of returning None
            handle.set_get_returns_none(0)
        except bdb.DBError as e:
            return self._status(e), None
        return DB_SUCCESS, handle

    def db_open(
        self,
        db: Any,
        txn: Any | None,
        filename: str | None,
        dbtype: int,
        flags: int,
        mode: int,
    ) -> int:
        native_type = _DB_TYPES.get(dbtype)
        native_flags = _to_native(flags, _OPEN_FLAGS)
        if native_type is None or native_flags is None:
            return errno.EINVAL
        try:
            db.open(
                filename or None,
                dbtype=native_type,
                flags=native_flags,
                mode=mode,
                txn=txn,
            )
        except bdb.DBError as e:
            return self._status(e)
        return DB_SUCCESS

    def db_close(self, db: Any, flags: int) -> int:
        try:
            db.close(flags)
        except bdb.DBError as e:
            return self._status(e)
        return DB_SUCCESS

    def db_get_open_flags(self, db: Any) -> tuple[int, int]:
        try:
            native = db.get_open_flags()
        except bdb.DBError as e:
            return self._status(e), 0
        return DB_SUCCESS, _from_native(native, _OPEN_FLAGS)

    def db_remove(self, db: Any, filename: str) -> int:
        try:
            db.remove(filename)
        except bdb.DBError as e:
            return self._status(e)
        return DB_SUCCESS

    def db_rename(self, db: Any, old_name: str, new_name: str) -> int:
        try:
            db.rename(old_name, None, new_name)
        except bdb.DBError as e:
            return self._status(e)
        return DB_SUCCESS

    def db_put(self, db: Any, key: bytes, value: bytes, flags: int) -> int:
        try:
            db.put(self._key_in(db, key), bytes(value), flags=flags)
        except bdb.DBError as e:
            return self._status(e)
        except struct.error:
            return errno.EINVAL
        return DB_SUCCESS

    def db_get(self, db: Any, key: bytes) -> tuple[int, bytes | None]:
        try:
            value = db.get(self._key_in(db, key))
        except bdb.DBError as e:
            return self._status(e), None
        except struct.error:
            return errno.EINVAL, None
        if value is None:
            return bdb.DB_NOTFOUND, None
        return DB_SUCCESS, bytes(value)

    def db_del(self, db: Any, key: bytes) -> int:
        try:
            db.delete(self._key_in(db, key))
        except bdb.DBError as e:
            return self._status(e)
        except struct.error:
            return errno.EINVAL
        return DB_SUCCESS

    def _key_in(self, db: Any, key: bytes) -> bytes | int:
        if db.get_type() in _RECORD_TYPES:
            return struct.unpack(RECNO_FORMAT, bytes(key))[0]
        return bytes(key)

    # =========================================================================
    # Cursors
    # =========================================================================

    def db_cursor(self, db: Any) -> tuple[int, Any | None]:
        try:
            cursor = db.cursor()
        except bdb.DBError as e:
            return self._status(e), None
        return DB_SUCCESS, cursor

    def cursor_get(self, cursor: Any, mode: int) -> tuple[int, bytes | None, bytes | None]:
        native_mode = _CURSOR_MODES.get(mode)
        if native_mode is None:
            return errno.EINVAL, None, None
        try:
            record = cursor.get(native_mode)
        except bdb.DBError as e:
            return self._status(e), None, None
        if record is None:
            return bdb.DB_NOTFOUND, None, None
        key, value = record
        if isinstance(key, int):
            key = struct.pack(RECNO_FORMAT, key)
        return DB_SUCCESS, bytes(key), bytes(value)

    def cursor_close(self, cursor: Any) -> int:
        try:
            cursor.close()
        except bdb.DBError as e:
            return self._status(e)
        return DB_SUCCESS

    # =========================================================================
    # Environments
    # =========================================================================

    def env_create(self) -> tuple[int, Any | None]:
        try:
            env = bdb.DBEnv()
        except bdb.DBError as e:
            return self._status(e), None
        return DB_SUCCESS, env

    def env_open(self, env: Any, home: str, flags: int, mode: int) -> int:
        native_flags = _to_native(flags, _ENV_FLAGS)
        if native_flags is None:
            return errno.EINVAL
        try:
            env.open(home, native_flags, mode)
        except bdb.DBError as e:
            return self._status(e)
        return DB_SUCCESS

    def env_close(self, env: Any, flags: int) -> int:
        try:
            env.close(flags)
        except bdb.DBError as e:
            return self._status(e)
        return DB_SUCCESS

    # =========================================================================
    # Utilities
    # =========================================================================

    def strerror(self, code: int) -> str:
        if code in self._messages:
            return self._messages[code]
        if code > 0:
            return os.strerror(code)
        return f"Berkeley DB error {code}"

    def version(self) -> str:
        major, minor, patch = bdb.version()[:3]
        return f"Berkeley DB {major}.{minor}.{patch}"
