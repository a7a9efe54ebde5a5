"""SQLite database layer: connection management and repository implementations."""

from shared.db.connection import Database
from shared.db.game_repository import SqliteGameRepository
from shared.db.player_repository import SqlitePlayerRepository
from shared.db.profile_repository import SqliteProfileRepository
from shared.db.score_entry_repository import SqliteScoreEntryRepository
from shared.db.tally_token_repository import SqliteTallyTokenRepository

__all__ = [
    "Database",
    "SqliteGameRepository",
    "SqlitePlayerRepository",
    "SqliteProfileRepository",
    "SqliteScoreEntryRepository",
    "SqliteTallyTokenRepository",
]
