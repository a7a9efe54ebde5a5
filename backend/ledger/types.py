"""
Pydantic models for ledger results and statistics.

These cross the boundary to the presentation layer, so they are frozen
and serialize cleanly with model_dump(mode="json").
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, computed_field

from shared.dal.models import Game, Player, ScoreEntry, TallyToken


class FormLabel(StrEnum):
    """Qualitative summary of a player's recent finishes."""

    HOT = "hot"
    EXCELLENT = "excellent"
    AVERAGE = "average"
    COLD = "cold"
    NO_DATA = "no_data"


class AggregationKey(StrEnum):
    """How players of different games are recognized as the same person."""

    NAME = "name"  # exact display name
    PROFILE = "profile"  # linked profile id, falling back to the name


class RecordedScore(BaseModel, frozen=True):
    entry: ScoreEntry
    total_score: int  # confirmed by the store
    # the new total is exactly zero; callers prompt for a tally token action
    tally_reset_required: bool = False


class PenaltyPlan(BaseModel, frozen=True):
    """Penalty owed by one player for tokens left unused at game end."""

    player_id: str
    points: int
    token_ids: tuple[str, ...]


class Reconciliation(BaseModel, frozen=True):
    """Cached total of a player compared with the sum of its ledger."""

    player_id: str
    cached_total: int
    ledger_total: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_consistent(self) -> bool:
        return self.cached_total == self.ledger_total


class PlayerLedger(BaseModel, frozen=True):
    """A player's entries with their running totals, oldest first."""

    player: Player
    entries: list[ScoreEntry]
    running_totals: list[int]
    played_rounds: int


class StandingRow(BaseModel, frozen=True):
    player: Player
    rank: int
    tokens: list[TallyToken] = Field(default_factory=list)


class GameStandings(BaseModel, frozen=True):
    """Current state of one game, players in rank order."""

    game: Game
    rows: list[StandingRow]
    leaders: list[str]  # names of the players sharing the top non-zero total


class FinishedGamePlayer(BaseModel, frozen=True):
    name: str
    total_score: int
    profile_id: str | None = None


class FinishedGame(BaseModel, frozen=True):
    """Input to cross-session aggregation: one finished game."""

    date: datetime
    players: list[FinishedGamePlayer]


class RankRecord(BaseModel, frozen=True):
    rank: int = Field(ge=1)
    date: datetime


class PlayerStats(BaseModel, frozen=True):
    """Aggregated finishes of one player across finished games."""

    key: str
    name: str
    total_games: int = 0
    wins: int = 0
    second: int = 0
    third: int = 0
    history: tuple[RankRecord, ...] = ()  # most recent first

    @computed_field  # type: ignore[prop-decorator]
    @property
    def other_finishes(self) -> int:
        return self.total_games - self.wins - self.second - self.third


class LeaderboardRow(BaseModel, frozen=True):
    position: int
    stats: PlayerStats
    form: FormLabel
