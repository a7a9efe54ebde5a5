"""Abstract interface for per-game player persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shared.dal.models import Player


class PlayerRepository(ABC):
    """Abstract interface for player persistence.

    Implementations can use SQLite, PostgreSQL, etc.
    """

    @abstractmethod
    async def create_players(self, players: Sequence[Player]) -> None: ...

    @abstractmethod
    async def get_player(self, player_id: str) -> Player | None: ...

    @abstractmethod
    async def get_players(self, game_id: str) -> list[Player]:
        """Return the players of a game in seat order."""

    @abstractmethod
    async def get_players_for_games(self, game_ids: Sequence[str]) -> list[Player]: ...

    @abstractmethod
    async def set_total_score(self, player_id: str, total_score: int) -> None: ...

    @abstractmethod
    async def delete_player(self, player_id: str) -> bool:
        """Delete a player together with its entries and tokens."""
