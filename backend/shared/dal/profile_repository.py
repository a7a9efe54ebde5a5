"""Abstract interface for player profile persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shared.dal.models import PlayerProfile


class ProfileRepository(ABC):
    @abstractmethod
    async def create_profile(self, profile: PlayerProfile) -> None:
        """Insert a profile. Raises ValueError when the name is already taken."""

    @abstractmethod
    async def get_profile(self, profile_id: str) -> PlayerProfile | None: ...

    @abstractmethod
    async def get_by_name(self, name: str) -> PlayerProfile | None:
        """Look up a profile by exact name."""

    @abstractmethod
    async def list_profiles(self) -> list[PlayerProfile]:
        """Return all profiles ordered by name."""
