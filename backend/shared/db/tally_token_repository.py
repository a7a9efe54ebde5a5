"""SQLite-backed tally token repository."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from shared.dal.models import TallyToken
from shared.dal.tally_token_repository import TallyTokenRepository
from shared.db.connection import to_db_timestamp

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shared.db.connection import Database

logger = structlog.get_logger()


class SqliteTallyTokenRepository(TallyTokenRepository):
    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_tokens(self, tokens: Sequence[TallyToken]) -> None:
        async with self._lock:
            with self._db.transaction() as conn:
                conn.executemany(
                    "INSERT INTO tally_tokens (token_id, player_id, game_id, is_used, position, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    [
                        (
                            t.token_id,
                            t.player_id,
                            t.game_id,
                            int(t.is_used),
                            t.position,
                            to_db_timestamp(t.created_at),
                        )
                        for t in tokens
                    ],
                )

    async def get_token(self, token_id: str) -> TallyToken | None:
        row = self._db.fetch_one("SELECT * FROM tally_tokens WHERE token_id = ?", (token_id,))
        if row is None:
            return None
        return TallyToken.model_validate(row)

    async def get_tokens(self, game_id: str) -> list[TallyToken]:
        rows = self._db.fetch_all(
            "SELECT * FROM tally_tokens WHERE game_id = ? ORDER BY position, rowid",
            (game_id,),
        )
        return [TallyToken.model_validate(row) for row in rows]

    async def set_used(self, token_id: str, is_used: bool) -> None:  # noqa: FBT001
        async with self._lock:
            with self._db.transaction() as conn:
                cursor = conn.execute(
                    "UPDATE tally_tokens SET is_used = ? WHERE token_id = ?",
                    (int(is_used), token_id),
                )
            if cursor.rowcount == 0:
                logger.warning("set_used had no effect (token not found)", token_id=token_id)
