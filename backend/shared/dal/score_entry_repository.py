"""Abstract interface for the append-only score ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shared.dal.models import ScoreEntry


class ScoreEntryRepository(ABC):
    """Abstract interface for score entry persistence.

    Writes that touch the ledger also keep Player.total_score in step,
    inside the same transaction.
    """

    @abstractmethod
    async def record_entry(self, entry: ScoreEntry) -> int:
        """Append an entry, increment the owner's total, and return the new total."""

    @abstractmethod
    async def record_penalty(self, entry: ScoreEntry, token_ids: Sequence[str]) -> int:
        """Append a penalty entry, mark the given tokens used, and return the new total."""

    @abstractmethod
    async def get_player_entries(self, player_id: str) -> list[ScoreEntry]:
        """Return a player's entries in insertion order."""

    @abstractmethod
    async def get_game_entries(self, game_id: str) -> list[ScoreEntry]:
        """Return all entries of a game in insertion order."""
