"""File-based reference implementation of the StorageEngine port.

This adapter keeps the Berkeley DB call contract (status codes, flag
semantics, permission handling, environment home directories) without
linking a native library. It is the default engine and the one the test
suite drives.

File Format:
    - Header: magic (8 bytes) + version (4) + database type (4) + record count (4)
    - Records: key length (4) + value length (4) + key bytes + value bytes

Records are held in memory while the database is open and written back
on close through a temp file renamed over the original, so nothing is
durable before close and a failed write leaves the old file intact.
Unnamed databases never touch the filesystem.

Environments are directories containing a region file. Database file
names opened inside an environment resolve relative to its home.

Thread Safety:
    Internal tables are guarded by one lock. Calls on the same handle
    must still be serialized by the caller.
"""

from __future__ import annotations

import errno
import logging
import os
import stat
import struct
import tempfile
import threading
from bisect import bisect_left, bisect_right, insort
from dataclasses import dataclass, field
from pathlib import Path

from bdb_handles.domain.value_objects import (
    DB_KEYEXIST,
    DB_NOTFOUND,
    DB_SUCCESS,
    DEFAULT_FILE_MODE,
    CursorMode,
    DatabaseType,
    EnvironmentFlag,
    OpenFlag,
)


logger = logging.getLogger(__name__)

HEADER_MAGIC = b"BDBHNDL\x00"
HEADER_VERSION = 1
HEADER_FORMAT = ">8sIII"  # magic, version, dbtype, record_count
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
RECORD_FORMAT = ">II"  # key length, value length
RECORD_HEADER_SIZE = struct.calcsize(RECORD_FORMAT)

# Record numbers are stored as native-endian unsigned 32-bit keys
RECNO_FORMAT = "=I"
RECNO_SIZE = struct.calcsize(RECNO_FORMAT)

REGION_FILE = "__db.001"
ENGINE_NAME = "bdb_handles file engine"
ENGINE_VERSION = "1.0.0"

_OPEN_FLAGS = OpenFlag.CREATE | OpenFlag.EXCL | OpenFlag.RDONLY | OpenFlag.TRUNCATE
_ENV_FLAGS = EnvironmentFlag.CREATE | EnvironmentFlag.INIT_MPOOL

_MESSAGES = {
    DB_NOTFOUND: "DB_NOTFOUND: No matching key/data pair found",
    DB_KEYEXIST: "DB_KEYEXIST: Key/data pair already exists",
}


class _FormatError(Exception):
    """Raised internally when a data file cannot be parsed."""


@dataclass
class FileEnvironment:
    """Engine-side state of an environment handle."""

    home: Path | None = None
    flags: int = 0
    opened: bool = False
    closed: bool = False


@dataclass
class FileDatabase:
    """Engine-side state of a database handle."""

    env: FileEnvironment | None = None
    path: Path | None = None
    dbtype: DatabaseType | None = None
    flags: int = 0
    opened: bool = False
    closed: bool = False
    dirty: bool = False
    records: dict[bytes, bytes] = field(default_factory=dict)
    cursors: list[FileCursor] = field(default_factory=list)
    # Keys in cursor order: sorted for BTREE and RECNO, insertion order for HASH
    keys: list[bytes] = field(default_factory=list)
    # Bumped whenever the key set changes; cursors cache their index against it
    generation: int = 0

    @property
    def readonly(self) -> bool:
        return bool(self.flags & OpenFlag.RDONLY)

    @property
    def ordered(self) -> bool:
        return self.dbtype != DatabaseType.HASH

    def load(self, records: dict[bytes, bytes]) -> None:
        """Replace the record set and rebuild the key index."""
        self.records = records
        if self.ordered:
            self.keys = sorted(records, key=self.sort_key)
        else:
            self.keys = list(records)
        self.generation += 1

    def insert(self, key: bytes, value: bytes) -> None:
        if key not in self.records:
            if self.ordered:
                insort(self.keys, key, key=self.sort_key)
            else:
                self.keys.append(key)
            self.generation += 1
        self.records[key] = value

    def delete(self, key: bytes) -> bool:
        if self.records.pop(key, None) is None:
            return False
        if self.ordered:
            del self.keys[self.locate(key)]
        else:
            self.keys.remove(key)
        self.generation += 1
        return True

    def locate(self, key: bytes) -> int:
        """Return the insertion point of ``key`` in an ordered key index."""
        return bisect_left(self.keys, self.sort_key(key), key=self.sort_key)

    def sort_key(self, key: bytes) -> bytes | int:
        return _sort_key(self.dbtype, key)


@dataclass
class FileCursor:
    """Engine-side state of a cursor handle."""

    db: FileDatabase
    position: bytes | None = None
    closed: bool = False
    # Index of ``position`` in db.keys, valid while generation matches
    index: int = -1
    generation: int = -1


class FileStorageEngine:
    """File-based implementation of the StorageEngine protocol.

    Example:
        engine = FileStorageEngine()
        status, db = engine.db_create(None)
        engine.db_open(db, None, "/tmp/a.db", DatabaseType.BTREE, OpenFlag.CREATE, 0)
        engine.db_put(db, b"key", b"value", 0)
        engine.db_close(db, 0)
    """

    def __init__(self, default_mode: int = DEFAULT_FILE_MODE) -> None:
        """Initialize the engine.

        Args:
            default_mode: Permission bits for new files when a caller
                passes mode 0. The process umask still applies.
        """
        self._default_mode = default_mode
        self._lock = threading.Lock()

    @property
    def not_found_code(self) -> int:
        return DB_NOTFOUND

    # =========================================================================
    # Database handles
    # =========================================================================

    def db_create(self, env: FileEnvironment | None) -> tuple[int, FileDatabase | None]:
        if env is not None and (not env.opened or env.closed):
            return errno.EINVAL, None
        return DB_SUCCESS, FileDatabase(env=env)

    def db_open(
        self,
        db: FileDatabase,
        txn: object | None,
        filename: str | None,
        dbtype: int,
        flags: int,
        mode: int,
    ) -> int:
        if db.closed or db.opened or txn is not None:
            return errno.EINVAL
        if db.env is not None and db.env.closed:
            return errno.EINVAL
        try:
            requested = DatabaseType(dbtype)
        except ValueError:
            return errno.EINVAL
        if flags & ~_OPEN_FLAGS:
            return errno.EINVAL
        if flags & OpenFlag.RDONLY and flags & OpenFlag.TRUNCATE:
            return errno.EINVAL

        if not filename:
            if requested == DatabaseType.UNKNOWN:
                return errno.EINVAL
            db.dbtype = requested
            db.flags = flags
            db.opened = True
            logger.debug(f"Opened unnamed {requested.name} database")
            return DB_SUCCESS

        path = self._resolve(db.env, filename)
        with self._lock:
            if path.exists():
                status = self._open_existing(db, path, requested, flags)
            else:
                status = self._create_new(db, path, requested, flags, mode)
        if status == DB_SUCCESS:
            db.path = path
            db.flags = flags
            db.opened = True
            logger.debug(f"Opened {db.dbtype.name} database: {path}")
        return status

    def _open_existing(
        self, db: FileDatabase, path: Path, requested: DatabaseType, flags: int
    ) -> int:
        if flags & OpenFlag.CREATE and flags & OpenFlag.EXCL:
            return errno.EEXIST
        if not flags & OpenFlag.RDONLY and not os.access(path, os.W_OK):
            return errno.EACCES
        try:
            stored, records = _read_file(path)
        except OSError as e:
            return e.errno or errno.EIO
        except _FormatError:
            return errno.EINVAL

        if flags & OpenFlag.TRUNCATE:
            db.dbtype = stored if requested == DatabaseType.UNKNOWN else requested
            db.load({})
            db.dirty = True
            return DB_SUCCESS

        if requested not in (DatabaseType.UNKNOWN, stored):
            return errno.EINVAL
        db.dbtype = stored
        db.load(records)
        return DB_SUCCESS

    def _create_new(
        self, db: FileDatabase, path: Path, requested: DatabaseType, flags: int, mode: int
    ) -> int:
        if not flags & OpenFlag.CREATE:
            return errno.ENOENT
        if requested == DatabaseType.UNKNOWN or flags & OpenFlag.RDONLY:
            return errno.EINVAL
        try:
            fd = os.open(path, os.O_RDWR | os.O_CREAT | os.O_EXCL, mode or self._default_mode)
            with os.fdopen(fd, "wb") as f:
                _write_records(f, requested, {})
        except OSError as e:
            return e.errno or errno.EIO
        db.dbtype = requested
        db.load({})
        return DB_SUCCESS

    def db_close(self, db: FileDatabase, flags: int) -> int:
        if db.closed:
            return errno.EINVAL
        db.closed = True
        for cursor in db.cursors:
            cursor.closed = True
        db.cursors.clear()

        if db.opened and db.path is not None and db.dirty and not db.readonly:
            with self._lock:
                try:
                    _replace_file(db.path, db.dbtype, db.records)
                except OSError as e:
                    return e.errno or errno.EIO
            db.dirty = False
        logger.debug(f"Closed database: {db.path}")
        return DB_SUCCESS

    def db_get_open_flags(self, db: FileDatabase) -> tuple[int, int]:
        if db.closed or not db.opened:
            return errno.EINVAL, 0
        return DB_SUCCESS, db.flags

    def db_remove(self, db: FileDatabase, filename: str) -> int:
        if db.closed:
            return errno.EINVAL
        # The handle is consumed whether or not the remove succeeds
        db.closed = True
        if db.opened or not filename:
            return errno.EINVAL
        path = self._resolve(db.env, filename)
        with self._lock:
            try:
                os.remove(path)
            except OSError as e:
                return e.errno or errno.EIO
        logger.debug(f"Removed database file: {path}")
        return DB_SUCCESS

    def db_rename(self, db: FileDatabase, old_name: str, new_name: str) -> int:
        if db.closed:
            return errno.EINVAL
        db.closed = True
        if db.opened or not old_name or not new_name:
            return errno.EINVAL
        old_path = self._resolve(db.env, old_name)
        new_path = self._resolve(db.env, new_name)
        with self._lock:
            try:
                os.rename(old_path, new_path)
            except OSError as e:
                return e.errno or errno.EIO
        logger.debug(f"Renamed database file: {old_path} -> {new_path}")
        return DB_SUCCESS

    def db_put(self, db: FileDatabase, key: bytes, value: bytes, flags: int) -> int:
        status = self._check_access(db, key, write=True)
        if status != DB_SUCCESS:
            return status
        if flags != 0:
            return errno.EINVAL
        with self._lock:
            db.insert(bytes(key), bytes(value))
            db.dirty = True
        return DB_SUCCESS

    def db_get(self, db: FileDatabase, key: bytes) -> tuple[int, bytes | None]:
        status = self._check_access(db, key, write=False)
        if status != DB_SUCCESS:
            return status, None
        value = db.records.get(bytes(key))
        if value is None:
            return DB_NOTFOUND, None
        return DB_SUCCESS, bytes(value)

    def db_del(self, db: FileDatabase, key: bytes) -> int:
        status = self._check_access(db, key, write=True)
        if status != DB_SUCCESS:
            return status
        with self._lock:
            if not db.delete(bytes(key)):
                return DB_NOTFOUND
            db.dirty = True
        return DB_SUCCESS

    def _check_access(self, db: FileDatabase, key: bytes, write: bool) -> int:
        if db.closed or not db.opened:
            return errno.EINVAL
        if write and db.readonly:
            return errno.EACCES
        if db.dbtype is not None and db.dbtype.is_record_based():
            if len(key) != RECNO_SIZE or struct.unpack(RECNO_FORMAT, key)[0] == 0:
                return errno.EINVAL
        return DB_SUCCESS

    # =========================================================================
    # Cursors
    # =========================================================================

    def db_cursor(self, db: FileDatabase) -> tuple[int, FileCursor | None]:
        if db.closed or not db.opened:
            return errno.EINVAL, None
        cursor = FileCursor(db=db)
        db.cursors.append(cursor)
        return DB_SUCCESS, cursor

    def cursor_get(
        self, cursor: FileCursor, mode: int
    ) -> tuple[int, bytes | None, bytes | None]:
        if cursor.closed or cursor.db.closed:
            return errno.EINVAL, None, None
        try:
            mode = CursorMode(mode)
        except ValueError:
            return errno.EINVAL, None, None

        with self._lock:
            db = cursor.db
            index = self._target_index(cursor, mode)
            if index is None or not 0 <= index < len(db.keys):
                return DB_NOTFOUND, None, None
            key = db.keys[index]
            cursor.position = key
            cursor.index = index
            cursor.generation = db.generation
            return DB_SUCCESS, bytes(key), bytes(db.records[key])

    def _target_index(self, cursor: FileCursor, mode: CursorMode) -> int | None:
        db = cursor.db
        if mode == CursorMode.FIRST or (mode == CursorMode.NEXT and cursor.position is None):
            return 0
        if mode == CursorMode.LAST or (mode == CursorMode.PREV and cursor.position is None):
            return len(db.keys) - 1

        step = 1 if mode == CursorMode.NEXT else -1
        if cursor.generation == db.generation:
            return cursor.index + step

        # Keys were added or removed since the last move
        if not db.ordered:
            if cursor.position not in db.records:
                return None
            return db.keys.index(cursor.position) + step

        position = db.sort_key(cursor.position)
        if mode == CursorMode.NEXT:
            return bisect_right(db.keys, position, key=db.sort_key)
        return bisect_left(db.keys, position, key=db.sort_key) - 1

    def cursor_close(self, cursor: FileCursor) -> int:
        if cursor.closed:
            return errno.EINVAL
        cursor.closed = True
        if cursor in cursor.db.cursors:
            cursor.db.cursors.remove(cursor)
        return DB_SUCCESS

    # =========================================================================
    # Environments
    # =========================================================================

    def env_create(self) -> tuple[int, FileEnvironment | None]:
        return DB_SUCCESS, FileEnvironment()

    def env_open(self, env: FileEnvironment, home: str, flags: int, mode: int) -> int:
        if env.opened or env.closed:
            return errno.EINVAL
        if flags & ~_ENV_FLAGS:
            return errno.EINVAL
        home_path = Path(home)
        if not home_path.is_dir():
            return errno.ENOENT

        region = home_path / REGION_FILE
        with self._lock:
            if not region.exists():
                if not flags & EnvironmentFlag.CREATE:
                    return errno.ENOENT
                if not flags & EnvironmentFlag.INIT_MPOOL:
                    return errno.EINVAL
                try:
                    fd = os.open(region, os.O_RDWR | os.O_CREAT, mode or self._default_mode)
                    with os.fdopen(fd, "wb") as f:
                        f.write(f"{ENGINE_NAME} {ENGINE_VERSION}\n".encode())
                except OSError as e:
                    return e.errno or errno.EIO

        env.home = home_path
        env.flags = flags
        env.opened = True
        logger.debug(f"Opened environment: {home_path}")
        return DB_SUCCESS

    def env_close(self, env: FileEnvironment, flags: int) -> int:
        if env.closed:
            return errno.EINVAL
        env.closed = True
        logger.debug(f"Closed environment: {env.home}")
        return DB_SUCCESS

    # =========================================================================
    # Utilities
    # =========================================================================

    def strerror(self, code: int) -> str:
        if code == DB_SUCCESS:
            return "Successful return: 0"
        if code in _MESSAGES:
            return _MESSAGES[code]
        if code > 0:
            return os.strerror(code)
        return f"Unknown error: {code}"

    def version(self) -> str:
        return f"{ENGINE_NAME} {ENGINE_VERSION}"

    def _resolve(self, env: FileEnvironment | None, filename: str) -> Path:
        path = Path(filename)
        if env is not None and env.home is not None and not path.is_absolute():
            return env.home / path
        return path


def _sort_key(dbtype: DatabaseType | None, key: bytes) -> bytes | int:
    if dbtype is not None and dbtype.is_record_based():
        return struct.unpack(RECNO_FORMAT, key)[0]
    return key


def _write_records(f, dbtype: DatabaseType, records: dict[bytes, bytes]) -> None:
    f.write(struct.pack(HEADER_FORMAT, HEADER_MAGIC, HEADER_VERSION, dbtype, len(records)))
    for key, value in records.items():
        f.write(struct.pack(RECORD_FORMAT, len(key), len(value)))
        f.write(key)
        f.write(value)
    f.flush()
    os.fsync(f.fileno())


def _replace_file(path: Path, dbtype: DatabaseType, records: dict[bytes, bytes]) -> None:
    """Write records to a temp file beside ``path``, then rename it over ``path``.

    The old file stays intact until the new one is fully on disk.
    """
    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            os.chmod(temp_name, stat.S_IMODE(os.stat(path).st_mode))
            _write_records(f, dbtype, records)
        os.replace(temp_name, path)
    except OSError:
        if os.path.exists(temp_name):
            os.remove(temp_name)
        raise


def _read_file(path: Path) -> tuple[DatabaseType, dict[bytes, bytes]]:
    data = path.read_bytes()
    if len(data) < HEADER_SIZE:
        raise _FormatError(f"header too short: {path}")

    magic, version, dbtype, count = struct.unpack_from(HEADER_FORMAT, data, 0)
    if magic != HEADER_MAGIC or version != HEADER_VERSION:
        raise _FormatError(f"not a database file: {path}")
    try:
        stored = DatabaseType(dbtype)
    except ValueError as e:
        raise _FormatError(f"bad database type {dbtype}: {path}") from e

    records: dict[bytes, bytes] = {}
    offset = HEADER_SIZE
    for _ in range(count):
        if offset + RECORD_HEADER_SIZE > len(data):
            raise _FormatError(f"truncated record header: {path}")
        key_len, value_len = struct.unpack_from(RECORD_FORMAT, data, offset)
        offset += RECORD_HEADER_SIZE
        end = offset + key_len + value_len
        if end > len(data):
            raise _FormatError(f"truncated record: {path}")
        records[data[offset:offset + key_len]] = data[offset + key_len:end]
        offset = end
    return stored, records
