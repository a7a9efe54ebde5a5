"""SQLite database connection and schema management."""

from __future__ import annotations

import contextlib
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from shared.dal.exceptions import StoreError

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

logger = structlog.get_logger()

# range of an SQLite INTEGER column value (signed 64-bit)
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS games (
    game_id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    created_at TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1
);

CREATE INDEX IF NOT EXISTS idx_games_created_at
    ON games (created_at);

CREATE TABLE IF NOT EXISTS player_profiles (
    profile_id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_player_profiles_name
    ON player_profiles (name);

CREATE TABLE IF NOT EXISTS players (
    player_id TEXT PRIMARY KEY,
    game_id TEXT NOT NULL REFERENCES games (game_id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    position INTEGER NOT NULL DEFAULT 0,
    total_score INTEGER NOT NULL DEFAULT 0,
    profile_id TEXT,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_players_game_id
    ON players (game_id);

CREATE TABLE IF NOT EXISTS score_entries (
    entry_id TEXT PRIMARY KEY,
    player_id TEXT NOT NULL REFERENCES players (player_id) ON DELETE CASCADE,
    game_id TEXT NOT NULL REFERENCES games (game_id) ON DELETE CASCADE,
    points INTEGER NOT NULL,
    played INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_score_entries_player_id
    ON score_entries (player_id);

CREATE INDEX IF NOT EXISTS idx_score_entries_game_id
    ON score_entries (game_id);

CREATE TABLE IF NOT EXISTS tally_tokens (
    token_id TEXT PRIMARY KEY,
    player_id TEXT NOT NULL REFERENCES players (player_id) ON DELETE CASCADE,
    game_id TEXT NOT NULL REFERENCES games (game_id) ON DELETE CASCADE,
    is_used INTEGER NOT NULL DEFAULT 0,
    position INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_tally_tokens_game_id
    ON tally_tokens (game_id);
"""


def to_db_timestamp(value: datetime) -> str:
    """Serialize a datetime as a UTC ISO string so that text ordering is chronological.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


class Database:
    """SQLite database wrapper with schema management.

    Row access goes through fetch_one/fetch_all and writes through
    transaction(); both translate sqlite3 errors into StoreError.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = str(path)
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Return the active connection or raise if disconnected."""
        if self._conn is None:
            raise RuntimeError("Database is not connected")
        return self._conn

    def connect(self) -> None:
        """Open the database, apply pragmas and create the schema."""
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.execute("PRAGMA busy_timeout=5000")
        self._conn.executescript(_SCHEMA_SQL)
        logger.debug("database connected", path=self._path)

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements as one transaction.

        Commits on success. Any failure rolls everything back; sqlite3
        errors are re-raised as StoreError.
        """
        conn = self.connection
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            logger.warning("store write failed, rolled back", error=str(exc))
            raise StoreError(str(exc)) from exc
        except Exception:
            conn.rollback()
            raise

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        try:
            row = self.connection.execute(sql, tuple(params)).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        return dict(row) if row is not None else None

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        try:
            rows = self.connection.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        return [dict(row) for row in rows]
