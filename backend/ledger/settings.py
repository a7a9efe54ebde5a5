"""Ledger configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings

from ledger.formatting import DEFAULT_GAME_NAME
from ledger.ledger import MAX_POINTS
from ledger.types import AggregationKey


class LedgerSettings(BaseSettings):
    model_config = {"env_prefix": "TAROK_"}

    # points charged per tally token still unused when the game is finished
    penalty_per_token: int = Field(default=-50, lt=0, ge=-MAX_POINTS)
    # number of recent finishes the form label looks at
    form_window: int = Field(default=5, ge=1)
    stats_key: AggregationKey = AggregationKey.NAME
    default_game_name: str = Field(default=DEFAULT_GAME_NAME, min_length=1)
