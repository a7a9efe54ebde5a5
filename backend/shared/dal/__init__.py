"""Data access layer: repository interfaces and shared persistence models."""

from shared.dal.exceptions import StoreError
from shared.dal.game_repository import GameRepository
from shared.dal.models import Game, Player, PlayerProfile, ScoreEntry, TallyToken
from shared.dal.player_repository import PlayerRepository
from shared.dal.profile_repository import ProfileRepository
from shared.dal.score_entry_repository import ScoreEntryRepository
from shared.dal.tally_token_repository import TallyTokenRepository

__all__ = [
    "Game",
    "GameRepository",
    "Player",
    "PlayerProfile",
    "PlayerRepository",
    "ProfileRepository",
    "ScoreEntry",
    "ScoreEntryRepository",
    "StoreError",
    "TallyToken",
    "TallyTokenRepository",
]
