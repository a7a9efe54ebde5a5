"""Abstract interface for tally token persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shared.dal.models import TallyToken


class TallyTokenRepository(ABC):
    @abstractmethod
    async def create_tokens(self, tokens: Sequence[TallyToken]) -> None: ...

    @abstractmethod
    async def get_token(self, token_id: str) -> TallyToken | None: ...

    @abstractmethod
    async def get_tokens(self, game_id: str) -> list[TallyToken]:
        """Return a game's tokens ordered by round position."""

    @abstractmethod
    async def set_used(self, token_id: str, is_used: bool) -> None: ...  # noqa: FBT001
