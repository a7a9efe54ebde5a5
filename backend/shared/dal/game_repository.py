"""Abstract interface for game persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shared.dal.models import Game


class GameRepository(ABC):
    """Abstract interface for game persistence."""

    @abstractmethod
    async def create_game(self, game: Game) -> None: ...

    @abstractmethod
    async def get_game(self, game_id: str) -> Game | None: ...

    @abstractmethod
    async def list_games(self, is_active: bool | None = None) -> list[Game]:  # noqa: FBT001
        """Return games newest first, optionally filtered by the active flag."""

    @abstractmethod
    async def set_active(self, game_id: str, is_active: bool) -> None: ...  # noqa: FBT001

    @abstractmethod
    async def delete_game(self, game_id: str) -> bool:
        """Delete a game together with its players, entries and tokens."""
