"""
Cross-session statistics over finished games.

Each finished game is ranked on its own (competition ranking over that
game's players). Finishes are then accumulated per player, where "the same
player" is decided by the aggregation key: the exact display name by
default, or the linked profile id when one exists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ledger.ranking import competition_positions
from ledger.types import AggregationKey, FormLabel, LeaderboardRow, PlayerStats, RankRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from datetime import datetime

    from ledger.types import FinishedGame, FinishedGamePlayer

DEFAULT_FORM_WINDOW = 5

# form points per finishing rank; anything below third scores nothing
_FORM_POINTS = {1: 10, 2: 5, 3: 2}
HOT_MIN_WINS = 3
EXCELLENT_MIN_AVERAGE = 3.5
AVERAGE_MIN_AVERAGE = 1.5


@dataclass
class _Tally:
    """Mutable accumulator for one player; frozen into PlayerStats at the end."""

    name: str
    name_date: datetime | None = None
    total_games: int = 0
    wins: int = 0
    second: int = 0
    third: int = 0
    history: list[RankRecord] = field(default_factory=list)

    def add(self, name: str, rank: int, date: datetime) -> None:
        self.total_games += 1
        if rank == 1:
            self.wins += 1
        elif rank == 2:  # noqa: PLR2004
            self.second += 1
        elif rank == 3:  # noqa: PLR2004
            self.third += 1
        self.history.append(RankRecord(rank=rank, date=date))
        # display the name used in the most recent game
        if self.name_date is None or date >= self.name_date:
            self.name = name
            self.name_date = date

    def freeze(self, key: str) -> PlayerStats:
        history = sorted(self.history, key=lambda r: r.date, reverse=True)
        return PlayerStats(
            key=key,
            name=self.name,
            total_games=self.total_games,
            wins=self.wins,
            second=self.second,
            third=self.third,
            history=tuple(history),
        )


def player_key(player: FinishedGamePlayer, key: AggregationKey = AggregationKey.NAME) -> str:
    if key == AggregationKey.PROFILE and player.profile_id:
        return player.profile_id
    return player.name


def aggregate(
    finished_games: Iterable[FinishedGame],
    *,
    key: AggregationKey = AggregationKey.NAME,
) -> dict[str, PlayerStats]:
    """
    Accumulate per-player finishes across finished games.

    Ties count for every tied player: two players sharing first place both
    get a win. Each player's history ends up sorted newest first whatever
    order the games came in.
    """
    tallies: dict[str, _Tally] = {}
    for game in finished_games:
        ranks = competition_positions(p.total_score for p in game.players)
        for player, player_rank in zip(game.players, ranks, strict=True):
            player_id = player_key(player, key)
            tally = tallies.setdefault(player_id, _Tally(name=player.name))
            tally.add(player.name, player_rank, game.date)
    return {player_id: tally.freeze(player_id) for player_id, tally in tallies.items()}


def medal_key(stats: PlayerStats) -> tuple[int, int, int]:
    return (stats.wins, stats.second, stats.third)


def form_trend(history: Sequence[RankRecord], window: int = DEFAULT_FORM_WINDOW) -> FormLabel:
    """
    Classify recent form from the newest `window` finishes.

    Rank 1 scores 10, rank 2 scores 5, rank 3 scores 2, anything else 0.
    First match wins: at least three wins is HOT, then the average score
    decides between EXCELLENT (>= 3.5), AVERAGE (>= 1.5) and COLD.
    """
    if window < 1:
        raise ValueError(f"form window must be positive, got {window}")
    recent = sorted(history, key=lambda r: r.date, reverse=True)[:window]
    if not recent:
        return FormLabel.NO_DATA

    wins = sum(1 for r in recent if r.rank == 1)
    if wins >= HOT_MIN_WINS:
        return FormLabel.HOT

    average = sum(_FORM_POINTS.get(r.rank, 0) for r in recent) / len(recent)
    if average >= EXCELLENT_MIN_AVERAGE:
        return FormLabel.EXCELLENT
    if average >= AVERAGE_MIN_AVERAGE:
        return FormLabel.AVERAGE
    return FormLabel.COLD


def leaderboard(
    stats: Mapping[str, PlayerStats],
    *,
    window: int = DEFAULT_FORM_WINDOW,
) -> list[LeaderboardRow]:
    """
    Order players by wins, then second places, then third places.

    Players equal on all three keep their aggregation order and share a
    position.
    """
    ordered = sorted(stats.values(), key=medal_key, reverse=True)
    positions = competition_positions(medal_key(s) for s in ordered)
    return [
        LeaderboardRow(position=position, stats=s, form=form_trend(s.history, window))
        for s, position in zip(ordered, positions, strict=True)
    ]
