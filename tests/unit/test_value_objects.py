"""Unit tests for flag, type and state value objects."""

from __future__ import annotations

import pytest

from bdb_handles.domain.value_objects import (
    DB_BTREE,
    DB_CREATE,
    DB_INIT_MPOOL,
    DB_NEXT,
    DB_NOTFOUND,
    DB_RDONLY,
    DEFAULT_FILE_MODE,
    CursorMode,
    DatabaseType,
    EnvironmentFlag,
    HandleState,
    OpenFlag,
)


@pytest.mark.unit
class TestEngineValues:
    """Tests for the numeric values passed to the engine."""

    def test_database_types(self) -> None:
        """Database types carry the engine's numbering."""
        assert DatabaseType.BTREE == 1
        assert DatabaseType.HASH == 2
        assert DatabaseType.RECNO == 3
        assert DatabaseType.QUEUE == 4
        assert DatabaseType.UNKNOWN == 5

    def test_open_flags_combine(self) -> None:
        """Open flags are bit flags."""
        flags = OpenFlag.CREATE | OpenFlag.EXCL

        assert int(flags) == 0x5
        assert OpenFlag.CREATE in flags
        assert OpenFlag.RDONLY not in flags

    def test_environment_flags(self) -> None:
        """INIT_MPOOL shares RDONLY's bit but is a separate flag type."""
        assert int(EnvironmentFlag.INIT_MPOOL) == int(OpenFlag.RDONLY)
        assert int(EnvironmentFlag.CREATE | EnvironmentFlag.INIT_MPOOL) == 0x401

    def test_cursor_modes(self) -> None:
        """Cursor modes carry the engine's numbering."""
        assert [int(m) for m in CursorMode] == [7, 15, 16, 23]

    def test_aliases(self) -> None:
        """Engine-style aliases point at the enum members."""
        assert DB_BTREE is DatabaseType.BTREE
        assert DB_CREATE is OpenFlag.CREATE
        assert DB_RDONLY is OpenFlag.RDONLY
        assert DB_INIT_MPOOL is EnvironmentFlag.INIT_MPOOL
        assert DB_NEXT is CursorMode.NEXT

    def test_reserved_codes(self) -> None:
        """The not-found code and default mode."""
        assert DB_NOTFOUND == -30988
        assert DEFAULT_FILE_MODE == 0o660

    @pytest.mark.parametrize(
        "dbtype,expected",
        [
            (DatabaseType.BTREE, False),
            (DatabaseType.HASH, False),
            (DatabaseType.RECNO, True),
            (DatabaseType.QUEUE, True),
        ],
    )
    def test_is_record_based(self, dbtype: DatabaseType, expected: bool) -> None:
        """Only RECNO and QUEUE are keyed by record number."""
        assert dbtype.is_record_based() is expected


@pytest.mark.unit
class TestHandleState:
    """Tests for HandleState."""

    def test_terminal_states(self) -> None:
        """CLOSED, REMOVED and RENAMED are terminal."""
        terminal = {s for s in HandleState if s.is_terminal()}
        assert terminal == {HandleState.CLOSED, HandleState.REMOVED, HandleState.RENAMED}

    def test_only_unopened_can_open(self) -> None:
        """An open attempt is only allowed once."""
        assert HandleState.UNOPENED.can_open()
        for state in HandleState:
            if state != HandleState.UNOPENED:
                assert not state.can_open()
