from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from shared.dal.models import Game, Player
from shared.db.connection import Database
from shared.db.game_repository import SqliteGameRepository
from shared.db.player_repository import SqlitePlayerRepository

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture
def db(tmp_path: Path) -> Iterator[Database]:
    database = Database(tmp_path / "test.db")
    database.connect()
    yield database
    database.close()


@pytest.fixture
async def seated(db: Database) -> tuple[Game, list[Player]]:
    """A game "g1" with players p1 (Ana) and p2 (Bor)."""
    game = Game(game_id="g1", name="Tarok")
    players = [
        Player(player_id="p1", game_id="g1", name="Ana", position=0),
        Player(player_id="p2", game_id="g1", name="Bor", position=1),
    ]
    await SqliteGameRepository(db).create_game(game)
    await SqlitePlayerRepository(db).create_players(players)
    return game, players
