"""SQLite-backed per-game player repository."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from shared.dal.models import Player
from shared.dal.player_repository import PlayerRepository
from shared.db.connection import to_db_timestamp

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shared.db.connection import Database

logger = structlog.get_logger()


class SqlitePlayerRepository(PlayerRepository):
    """SQLite implementation of PlayerRepository."""

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_players(self, players: Sequence[Player]) -> None:
        """Insert a batch of players in a single transaction."""
        async with self._lock:
            with self._db.transaction() as conn:
                conn.executemany(
                    "INSERT INTO players (player_id, game_id, name, position, total_score, profile_id, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?)",
                    [
                        (
                            p.player_id,
                            p.game_id,
                            p.name,
                            p.position,
                            p.total_score,
                            p.profile_id,
                            to_db_timestamp(p.created_at),
                        )
                        for p in players
                    ],
                )

    async def get_player(self, player_id: str) -> Player | None:
        row = self._db.fetch_one("SELECT * FROM players WHERE player_id = ?", (player_id,))
        if row is None:
            return None
        return Player.model_validate(row)

    async def get_players(self, game_id: str) -> list[Player]:
        rows = self._db.fetch_all(
            "SELECT * FROM players WHERE game_id = ? ORDER BY position, rowid",
            (game_id,),
        )
        return [Player.model_validate(row) for row in rows]

    async def get_players_for_games(self, game_ids: Sequence[str]) -> list[Player]:
        if not game_ids:
            return []
        placeholders = ", ".join("?" for _ in game_ids)
        rows = self._db.fetch_all(
            f"SELECT * FROM players WHERE game_id IN ({placeholders}) ORDER BY game_id, position, rowid",  # noqa: S608
            tuple(game_ids),
        )
        return [Player.model_validate(row) for row in rows]

    async def set_total_score(self, player_id: str, total_score: int) -> None:
        async with self._lock:
            with self._db.transaction() as conn:
                cursor = conn.execute(
                    "UPDATE players SET total_score = ? WHERE player_id = ?",
                    (total_score, player_id),
                )
            if cursor.rowcount == 0:
                logger.warning("set_total_score had no effect (player not found)", player_id=player_id)

    async def delete_player(self, player_id: str) -> bool:
        async with self._lock:
            with self._db.transaction() as conn:
                cursor = conn.execute("DELETE FROM players WHERE player_id = ?", (player_id,))
            return cursor.rowcount > 0
