"""SQLite-backed game repository."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from shared.dal.game_repository import GameRepository
from shared.dal.models import Game
from shared.db.connection import to_db_timestamp

if TYPE_CHECKING:
    from shared.db.connection import Database

logger = structlog.get_logger()


class SqliteGameRepository(GameRepository):
    """SQLite implementation of GameRepository.

    Deleting a game relies on ON DELETE CASCADE to remove its players,
    score entries and tally tokens.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_game(self, game: Game) -> None:
        async with self._lock:
            with self._db.transaction() as conn:
                conn.execute(
                    "INSERT INTO games (game_id, name, created_at, is_active) VALUES (?, ?, ?, ?)",
                    (game.game_id, game.name, to_db_timestamp(game.created_at), int(game.is_active)),
                )

    async def get_game(self, game_id: str) -> Game | None:
        row = self._db.fetch_one("SELECT * FROM games WHERE game_id = ?", (game_id,))
        if row is None:
            return None
        return Game.model_validate(row)

    async def list_games(self, is_active: bool | None = None) -> list[Game]:  # noqa: FBT001
        """Return games ordered by created_at descending."""
        if is_active is None:
            rows = self._db.fetch_all("SELECT * FROM games ORDER BY created_at DESC, rowid DESC")
        else:
            rows = self._db.fetch_all(
                "SELECT * FROM games WHERE is_active = ? ORDER BY created_at DESC, rowid DESC",
                (int(is_active),),
            )
        return [Game.model_validate(row) for row in rows]

    async def set_active(self, game_id: str, is_active: bool) -> None:  # noqa: FBT001
        async with self._lock:
            with self._db.transaction() as conn:
                cursor = conn.execute(
                    "UPDATE games SET is_active = ? WHERE game_id = ?",
                    (int(is_active), game_id),
                )
            if cursor.rowcount == 0:
                logger.warning("set_active had no effect (game not found)", game_id=game_id)

    async def delete_game(self, game_id: str) -> bool:
        async with self._lock:
            with self._db.transaction() as conn:
                cursor = conn.execute("DELETE FROM games WHERE game_id = ?", (game_id,))
            return cursor.rowcount > 0
