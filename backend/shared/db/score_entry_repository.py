"""SQLite-backed score ledger."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from shared.dal.exceptions import StoreError
from shared.dal.models import ScoreEntry
from shared.dal.score_entry_repository import ScoreEntryRepository
from shared.db.connection import SQLITE_INT_MAX, SQLITE_INT_MIN, to_db_timestamp

if TYPE_CHECKING:
    import sqlite3
    from collections.abc import Sequence

    from shared.db.connection import Database


class SqliteScoreEntryRepository(ScoreEntryRepository):
    """SQLite implementation of ScoreEntryRepository.

    The entry insert and the increment of players.total_score share one
    transaction, so a failure leaves neither behind. Entries are read back
    in rowid order, which is insertion order.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def record_entry(self, entry: ScoreEntry) -> int:
        async with self._lock:
            with self._db.transaction() as conn:
                return self._append(conn, entry)

    async def record_penalty(self, entry: ScoreEntry, token_ids: Sequence[str]) -> int:
        async with self._lock:
            with self._db.transaction() as conn:
                total = self._append(conn, entry)
                if token_ids:
                    placeholders = ", ".join("?" for _ in token_ids)
                    conn.execute(
                        f"UPDATE tally_tokens SET is_used = 1 WHERE player_id = ? AND token_id IN ({placeholders})",  # noqa: S608
                        (entry.player_id, *token_ids),
                    )
                return total

    async def get_player_entries(self, player_id: str) -> list[ScoreEntry]:
        rows = self._db.fetch_all(
            "SELECT * FROM score_entries WHERE player_id = ? ORDER BY rowid",
            (player_id,),
        )
        return [ScoreEntry.model_validate(row) for row in rows]

    async def get_game_entries(self, game_id: str) -> list[ScoreEntry]:
        rows = self._db.fetch_all(
            "SELECT * FROM score_entries WHERE game_id = ? ORDER BY rowid",
            (game_id,),
        )
        return [ScoreEntry.model_validate(row) for row in rows]

    @staticmethod
    def _append(conn: sqlite3.Connection, entry: ScoreEntry) -> int:
        """Insert the entry and bump the owner's cached total. Returns the new total.

        The new total is checked against SQLite's INTEGER range first; past it
        SQLite would silently store a REAL.
        """
        row = conn.execute("SELECT total_score FROM players WHERE player_id = ?", (entry.player_id,)).fetchone()
        if row is None:
            raise StoreError(f"Player '{entry.player_id}' not found while recording an entry")
        total = row[0] + entry.points
        if not SQLITE_INT_MIN <= total <= SQLITE_INT_MAX:
            raise StoreError(f"Total of player '{entry.player_id}' would overflow: {row[0]} + {entry.points}")

        conn.execute(
            "INSERT INTO score_entries (entry_id, player_id, game_id, points, played, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                entry.entry_id,
                entry.player_id,
                entry.game_id,
                entry.points,
                int(entry.played),
                to_db_timestamp(entry.created_at),
            ),
        )
        conn.execute(
            "UPDATE players SET total_score = ? WHERE player_id = ?",
            (total, entry.player_id),
        )
        return total
