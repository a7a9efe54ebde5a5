"""Persistence models for the data access layer.

Rows read back from storage are validated through these models, so the
rest of the code never handles loosely-typed records.
"""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, Field


def new_id() -> str:
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class Game(BaseModel, frozen=True):
    """A scoring session."""

    game_id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=utc_now)
    is_active: bool = True  # flips to False exactly once, when the game is finished


class Player(BaseModel, frozen=True):
    """A participant within a single game."""

    player_id: str = Field(default_factory=new_id)
    game_id: str
    name: str = Field(min_length=1)
    position: int = Field(default=0, ge=0)  # seat order within the game
    # cached sum of the player's score entries; see ledger.ledger.reconcile
    total_score: int = 0
    profile_id: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


class ScoreEntry(BaseModel, frozen=True):
    """One immutable point delta. Insertion order is the chronological order."""

    entry_id: str = Field(default_factory=new_id)
    player_id: str
    game_id: str
    points: int
    played: bool = False  # the player took part in the round (vs. an adjustment)
    created_at: datetime = Field(default_factory=utc_now)


class TallyToken(BaseModel, frozen=True):
    """A per-player token ("radelc"); unused tokens become penalties at game end."""

    token_id: str = Field(default_factory=new_id)
    player_id: str
    game_id: str
    is_used: bool = False
    position: int = Field(default=0, ge=0)  # index of the round the token was added in
    created_at: datetime = Field(default_factory=utc_now)


class PlayerProfile(BaseModel, frozen=True):
    """A reusable named identity shared across games."""

    profile_id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=utc_now)
