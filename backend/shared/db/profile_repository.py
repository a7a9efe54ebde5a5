"""SQLite-backed player profile repository."""

from __future__ import annotations

import asyncio
import sqlite3
from typing import TYPE_CHECKING

from shared.dal.exceptions import StoreError
from shared.dal.models import PlayerProfile
from shared.dal.profile_repository import ProfileRepository
from shared.db.connection import to_db_timestamp

if TYPE_CHECKING:
    from shared.db.connection import Database


class SqliteProfileRepository(ProfileRepository):
    """SQLite implementation of ProfileRepository.

    Relies on the unique index on name and maps IntegrityError to a
    domain ValueError.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_profile(self, profile: PlayerProfile) -> None:
        """Insert a profile. Raises ValueError on duplicate id or name."""
        async with self._lock:
            conn = self._db.connection
            try:
                conn.execute(
                    "INSERT INTO player_profiles (profile_id, name, created_at) VALUES (?, ?, ?)",
                    (profile.profile_id, profile.name, to_db_timestamp(profile.created_at)),
                )
                conn.commit()
            except sqlite3.IntegrityError as exc:
                conn.rollback()
                error_msg = str(exc).lower()
                if "player_profiles.name" in error_msg or "idx_player_profiles_name" in error_msg:
                    raise ValueError(f"Profile name '{profile.name}' already taken") from exc
                raise ValueError(str(exc)) from exc
            except sqlite3.Error as exc:
                conn.rollback()
                raise StoreError(str(exc)) from exc

    async def get_profile(self, profile_id: str) -> PlayerProfile | None:
        row = self._db.fetch_one("SELECT * FROM player_profiles WHERE profile_id = ?", (profile_id,))
        if row is None:
            return None
        return PlayerProfile.model_validate(row)

    async def get_by_name(self, name: str) -> PlayerProfile | None:
        row = self._db.fetch_one("SELECT * FROM player_profiles WHERE name = ?", (name,))
        if row is None:
            return None
        return PlayerProfile.model_validate(row)

    async def list_profiles(self) -> list[PlayerProfile]:
        rows = self._db.fetch_all("SELECT * FROM player_profiles ORDER BY name")
        return [PlayerProfile.model_validate(row) for row in rows]
