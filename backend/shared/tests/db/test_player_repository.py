"""Tests for SqlitePlayerRepository."""

from __future__ import annotations

import pytest

from shared.dal.exceptions import StoreError
from shared.dal.models import Game, Player, ScoreEntry
from shared.db.connection import Database
from shared.db.game_repository import SqliteGameRepository
from shared.db.player_repository import SqlitePlayerRepository
from shared.db.score_entry_repository import SqliteScoreEntryRepository


@pytest.fixture
def repo(db: Database) -> SqlitePlayerRepository:
    return SqlitePlayerRepository(db)


class TestCreatePlayers:
    async def test_players_come_back_in_seat_order(self, repo: SqlitePlayerRepository, seated) -> None:
        _game, players = seated
        await repo.create_players([Player(player_id="p0", game_id="g1", name="Cene", position=2)])

        assert [p.player_id for p in await repo.get_players("g1")] == ["p1", "p2", "p0"]
        assert await repo.get_player("p1") == players[0]

    async def test_unknown_game_rejected_atomically(self, repo: SqlitePlayerRepository) -> None:
        batch = [
            Player(player_id="x1", game_id="missing", name="Ana"),
            Player(player_id="x2", game_id="missing", name="Bor"),
        ]
        with pytest.raises(StoreError):
            await repo.create_players(batch)

        assert await repo.get_player("x1") is None

    async def test_profile_link_is_kept(self, repo: SqlitePlayerRepository, seated) -> None:  # noqa: ARG002
        await repo.create_players([Player(player_id="p3", game_id="g1", name="Dana", profile_id="prof-1")])

        player = await repo.get_player("p3")
        assert player is not None
        assert player.profile_id == "prof-1"


class TestGetPlayersForGames:
    async def test_collects_across_games(self, db: Database, repo: SqlitePlayerRepository, seated) -> None:  # noqa: ARG002
        await SqliteGameRepository(db).create_game(Game(game_id="g2", name="Tarok"))
        await repo.create_players([Player(player_id="q1", game_id="g2", name="Ana")])

        players = await repo.get_players_for_games(["g1", "g2"])

        assert sorted(p.player_id for p in players) == ["p1", "p2", "q1"]

    async def test_empty_input(self, repo: SqlitePlayerRepository) -> None:
        assert await repo.get_players_for_games([]) == []


class TestSetTotalScore:
    async def test_overwrites_cached_total(self, repo: SqlitePlayerRepository, seated) -> None:  # noqa: ARG002
        await repo.set_total_score("p1", 70)

        player = await repo.get_player("p1")
        assert player is not None
        assert player.total_score == 70

    async def test_unknown_player_logs_warning(self, repo: SqlitePlayerRepository, caplog) -> None:
        await repo.set_total_score("nope", 10)

        assert "set_total_score had no effect" in caplog.text


class TestDeletePlayer:
    async def test_removes_player_and_entries(self, db: Database, repo: SqlitePlayerRepository, seated) -> None:  # noqa: ARG002
        await SqliteScoreEntryRepository(db).record_entry(ScoreEntry(player_id="p1", game_id="g1", points=30))

        assert await repo.delete_player("p1") is True
        assert await repo.get_player("p1") is None
        assert db.fetch_all("SELECT * FROM score_entries") == []

    async def test_unknown_player_returns_false(self, repo: SqlitePlayerRepository) -> None:
        assert await repo.delete_player("nope") is False
