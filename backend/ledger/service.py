"""Ledger service coordinating games, players, scores, tally tokens and statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ledger.exceptions import GameFinishedError, NotFoundError
from ledger.ledger import plan_penalties, reconcile, running_totals, score_progression, validate_points
from ledger.ranking import leaders, sort_by_rank
from ledger.settings import LedgerSettings
from ledger.statistics import aggregate, leaderboard
from ledger.types import (
    FinishedGame,
    FinishedGamePlayer,
    GameStandings,
    PlayerLedger,
    RecordedScore,
    StandingRow,
)
from shared.dal.models import Game, Player, PlayerProfile, ScoreEntry, TallyToken
from shared.db import (
    SqliteGameRepository,
    SqlitePlayerRepository,
    SqliteProfileRepository,
    SqliteScoreEntryRepository,
    SqliteTallyTokenRepository,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ledger.types import LeaderboardRow
    from shared.dal import (
        GameRepository,
        PlayerRepository,
        ProfileRepository,
        ScoreEntryRepository,
        TallyTokenRepository,
    )
    from shared.db import Database

logger = structlog.get_logger()


class LedgerService:
    """Apply the ledger rules to the persistent store.

    Holds no cached state of its own: every total it reports is the value
    the store confirmed, so a failed write never leaves a stale total behind.
    Store failures (StoreError) propagate to the caller unchanged.
    """

    def __init__(
        self,
        *,
        game_repo: GameRepository,
        player_repo: PlayerRepository,
        entry_repo: ScoreEntryRepository,
        token_repo: TallyTokenRepository,
        profile_repo: ProfileRepository,
        settings: LedgerSettings | None = None,
    ) -> None:
        self._games = game_repo
        self._players = player_repo
        self._entries = entry_repo
        self._tokens = token_repo
        self._profiles = profile_repo
        self._settings = settings or LedgerSettings()

    @classmethod
    def for_database(cls, db: Database, settings: LedgerSettings | None = None) -> LedgerService:
        """Wire a service to the SQLite repositories of a connected database."""
        return cls(
            game_repo=SqliteGameRepository(db),
            player_repo=SqlitePlayerRepository(db),
            entry_repo=SqliteScoreEntryRepository(db),
            token_repo=SqliteTallyTokenRepository(db),
            profile_repo=SqliteProfileRepository(db),
            settings=settings,
        )

    @property
    def settings(self) -> LedgerSettings:
        return self._settings

    # games

    async def create_game(self, name: str | None = None) -> Game:
        game = Game(name=(name or "").strip() or self._settings.default_game_name)
        await self._games.create_game(game)
        logger.info("game created", game_id=game.game_id, name=game.name)
        return game

    async def get_game(self, game_id: str) -> Game:
        game = await self._games.get_game(game_id)
        if game is None:
            raise NotFoundError("game", game_id)
        return game

    async def list_games(self, is_active: bool | None = None) -> list[Game]:  # noqa: FBT001
        return await self._games.list_games(is_active)

    async def delete_game(self, game_id: str) -> None:
        if not await self._games.delete_game(game_id):
            raise NotFoundError("game", game_id)
        logger.info("game deleted", game_id=game_id)

    async def finish_game(self, game_id: str) -> list[ScoreEntry]:
        """Charge penalties for unused tally tokens, then mark the game finished.

        Returns the penalty entries that were created. If marking the game
        finished fails after the penalties went through, calling this again
        is safe: the tokens are already used, so no second penalty is charged.
        """
        await self._require_active_game(game_id, "finish game")
        penalties = await self.apply_end_of_game_penalties(game_id)
        await self._games.set_active(game_id, is_active=False)
        logger.info("game finished", game_id=game_id, penalties=len(penalties))
        return penalties

    async def standings(self, game_id: str) -> GameStandings:
        game = await self.get_game(game_id)
        players = await self._players.get_players(game_id)
        tokens = await self._tokens.get_tokens(game_id)
        rows = [
            StandingRow(player=player, rank=player_rank, tokens=[t for t in tokens if t.player_id == player.player_id])
            for player, player_rank in sort_by_rank(players)
        ]
        return GameStandings(game=game, rows=rows, leaders=[p.name for p in leaders(players)])

    async def progression(self, game_id: str) -> dict[str, list[int]]:
        """Per-player score series over every entry of the game, keyed by player id."""
        await self.get_game(game_id)
        players = await self._players.get_players(game_id)
        entries = await self._entries.get_game_entries(game_id)
        return score_progression([p.player_id for p in players], entries)

    # players

    async def get_player(self, player_id: str) -> Player:
        player = await self._players.get_player(player_id)
        if player is None:
            raise NotFoundError("player", player_id)
        return player

    async def add_players(
        self,
        game_id: str,
        names: Sequence[str] = (),
        profile_ids: Sequence[str] = (),
    ) -> list[Player]:
        """Add players by name and/or existing profile id, names seated first.

        Every profile id is checked before anything is written, so an unknown
        id leaves the game and the profile list untouched. Profiles are
        created for names seen for the first time.
        """
        await self._require_active_game(game_id, "add players")
        for profile_id in profile_ids:
            if await self._profiles.get_profile(profile_id) is None:
                raise NotFoundError("profile", profile_id)
        profiles = [await self.find_or_create_profile(name) for name in names]
        return await self.add_profiles(game_id, [*(p.profile_id for p in profiles), *profile_ids])

    async def add_profiles(self, game_id: str, profile_ids: Sequence[str]) -> list[Player]:
        """Seat the given profiles after the existing players.

        Profiles already present in the game (same profile or same name)
        are skipped. Returns only the newly created players.
        """
        await self._require_active_game(game_id, "add players")
        existing = await self._players.get_players(game_id)
        taken_ids = {p.profile_id for p in existing if p.profile_id}
        taken_names = {p.name for p in existing}

        new_players: list[Player] = []
        for profile_id in dict.fromkeys(profile_ids):
            profile = await self._profiles.get_profile(profile_id)
            if profile is None:
                raise NotFoundError("profile", profile_id)
            if profile.profile_id in taken_ids or profile.name in taken_names:
                continue
            new_players.append(
                Player(
                    game_id=game_id,
                    name=profile.name,
                    position=len(existing) + len(new_players),
                    profile_id=profile.profile_id,
                ),
            )
            taken_names.add(profile.name)

        if new_players:
            await self._players.create_players(new_players)
            logger.info("players added", game_id=game_id, count=len(new_players))
        return new_players

    async def delete_player(self, player_id: str) -> None:
        if not await self._players.delete_player(player_id):
            raise NotFoundError("player", player_id)
        logger.info("player deleted", player_id=player_id)

    # ledger

    async def record_score(self, player_id: str, points: int, *, played: bool = False) -> RecordedScore:
        """Append a score entry and return the store-confirmed new total.

        Invalid points are rejected before anything is written. A new total
        of exactly zero sets tally_reset_required.
        """
        validate_points(points)
        player = await self.get_player(player_id)
        entry = ScoreEntry(player_id=player.player_id, game_id=player.game_id, points=points, played=played)
        total = await self._entries.record_entry(entry)
        logger.info(
            "score recorded",
            game_id=player.game_id,
            player_id=player_id,
            points=points,
            played=played,
            total_score=total,
        )
        return RecordedScore(entry=entry, total_score=total, tally_reset_required=total == 0)

    async def player_ledger(self, player_id: str) -> PlayerLedger:
        player = await self.get_player(player_id)
        entries = await self._entries.get_player_entries(player_id)
        reconcile(player, entries)
        return PlayerLedger(
            player=player,
            entries=entries,
            running_totals=running_totals(entries),
            played_rounds=sum(1 for e in entries if e.played),
        )

    async def recompute(self, player_id: str, *, repair: bool = True) -> int:
        """Re-derive a player's total from its entries.

        With repair set, a disagreeing cached total is overwritten with the
        ledger sum. Returns the ledger sum either way.
        """
        player = await self.get_player(player_id)
        entries = await self._entries.get_player_entries(player_id)
        result = reconcile(player, entries)
        if repair and not result.is_consistent:
            await self._players.set_total_score(player_id, result.ledger_total)
            logger.info("cached total repaired", player_id=player_id, total_score=result.ledger_total)
        return result.ledger_total

    async def apply_end_of_game_penalties(self, game_id: str) -> list[ScoreEntry]:
        """Turn every unused tally token into penalty points.

        Each player with unused tokens gets one played=False entry worth
        count * penalty_per_token; the entry, the total and the token flags
        are written together. Players without unused tokens are left alone,
        so repeating the call creates nothing new.
        """
        await self.get_game(game_id)
        players = await self._players.get_players(game_id)
        tokens = await self._tokens.get_tokens(game_id)

        created: list[ScoreEntry] = []
        for plan in plan_penalties(players, tokens, self._settings.penalty_per_token):
            entry = ScoreEntry(player_id=plan.player_id, game_id=game_id, points=plan.points, played=False)
            total = await self._entries.record_penalty(entry, plan.token_ids)
            created.append(entry)
            logger.info(
                "tally penalty applied",
                game_id=game_id,
                player_id=plan.player_id,
                unused_tokens=len(plan.token_ids),
                points=plan.points,
                total_score=total,
            )
        return created

    # tally tokens

    async def add_tally_round(self, game_id: str) -> list[TallyToken]:
        """Give every player one new unused token in the next round position."""
        await self._require_active_game(game_id, "add tally tokens")
        players = await self._players.get_players(game_id)
        if not players:
            return []
        existing = await self._tokens.get_tokens(game_id)
        position = max((t.position for t in existing), default=-1) + 1
        tokens = [TallyToken(player_id=p.player_id, game_id=game_id, position=position) for p in players]
        await self._tokens.create_tokens(tokens)
        logger.info("tally round added", game_id=game_id, position=position)
        return tokens

    async def toggle_token(self, token_id: str) -> TallyToken:
        token = await self._tokens.get_token(token_id)
        if token is None:
            raise NotFoundError("token", token_id)
        await self._require_active_game(token.game_id, "toggle tally token")
        await self._tokens.set_used(token_id, is_used=not token.is_used)
        return token.model_copy(update={"is_used": not token.is_used})

    # profiles

    async def find_or_create_profile(self, name: str) -> PlayerProfile:
        """Return the profile with this exact name, creating it if needed."""
        name = name.strip()
        existing = await self._profiles.get_by_name(name)
        if existing is not None:
            return existing
        profile = PlayerProfile(name=name)
        try:
            await self._profiles.create_profile(profile)
        except ValueError:
            # created concurrently under the same name
            existing = await self._profiles.get_by_name(name)
            if existing is None:
                raise
            return existing
        logger.info("profile created", profile_id=profile.profile_id, name=name)
        return profile

    async def search_profiles(self, query: str = "") -> list[PlayerProfile]:
        """Profiles whose name contains query, case-insensitively, ordered by name."""
        needle = query.strip().casefold()
        profiles = await self._profiles.list_profiles()
        return [p for p in profiles if needle in p.name.casefold()]

    # statistics

    async def finished_games(self) -> list[FinishedGame]:
        games = await self._games.list_games(is_active=False)
        players = await self._players.get_players_for_games([g.game_id for g in games])
        return [
            FinishedGame(
                date=game.created_at,
                players=[
                    FinishedGamePlayer(name=p.name, total_score=p.total_score, profile_id=p.profile_id)
                    for p in players
                    if p.game_id == game.game_id
                ],
            )
            for game in games
        ]

    async def statistics(self) -> list[LeaderboardRow]:
        """Leaderboard over every finished game, with a form label per player."""
        stats = aggregate(await self.finished_games(), key=self._settings.stats_key)
        return leaderboard(stats, window=self._settings.form_window)

    async def _require_active_game(self, game_id: str, action: str) -> Game:
        game = await self.get_game(game_id)
        if not game.is_active:
            raise GameFinishedError(game_id, action)
        return game
