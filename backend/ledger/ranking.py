"""
Standard competition ranking ("1224" ranking).

A player's rank is 1 plus the number of players with a strictly greater
score. Equal scores share a rank and the following rank is skipped, so
totals 50, 50, 30 rank as 1, 1, 3.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from shared.dal.models import Player


def competition_positions(values: Iterable[tuple[int, ...] | int]) -> list[int]:
    """
    Competition rank of every value, higher is better, in input order.

    Works on plain scores and on tuples compared lexicographically
    (e.g. medal counts).
    """
    items = list(values)
    ordered = sorted(items, reverse=True)
    first_index: dict[tuple[int, ...] | int, int] = {}
    for index, value in enumerate(ordered):
        # first position of a value in descending order == count of strictly greater values
        first_index.setdefault(value, index)
    return [first_index[value] + 1 for value in items]


def rank(scores: Mapping[str, int]) -> dict[str, int]:
    """Map each id to its competition rank. Empty input gives an empty mapping."""
    ids = list(scores)
    positions = competition_positions(scores[i] for i in ids)
    return dict(zip(ids, positions, strict=True))


def rank_players(players: Iterable[Player]) -> dict[str, int]:
    return rank({p.player_id: p.total_score for p in players})


def sort_by_rank(players: Sequence[Player]) -> list[tuple[Player, int]]:
    """Players paired with their rank, best first; ties keep seat order."""
    ranks = rank_players(players)
    ordered = sorted(players, key=lambda p: (ranks[p.player_id], p.position))
    return [(p, ranks[p.player_id]) for p in ordered]


def leaders(players: Sequence[Player]) -> list[Player]:
    """
    Players sharing the highest total.

    Empty while nobody has scored yet (every total is zero), so a fresh
    game has no leader.
    """
    if not any(p.total_score != 0 for p in players):
        return []
    top = max(p.total_score for p in players)
    return [p for p in players if p.total_score == top]
