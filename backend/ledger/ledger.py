"""
Score ledger computations.

Pure functions over score entries: input parsing, running totals,
reconciliation of cached totals and end-of-game penalty planning.
The entry list is always taken in insertion (chronological) order.
"""

from __future__ import annotations

import re
from itertools import accumulate
from typing import TYPE_CHECKING

import structlog

from ledger.exceptions import InvalidScoreError
from ledger.types import PenaltyPlan, Reconciliation

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from shared.dal.models import Player, ScoreEntry, TallyToken

logger = structlog.get_logger()

_POINTS_PATTERN = re.compile(r"^-?\d+$")

# the score keypad takes at most five digits and a sign
MAX_POINTS = 99_999


def validate_points(points: object) -> int:
    """Return points unchanged if it is a usable score delta, else raise InvalidScoreError."""
    # bool is an int subclass; True is not a score
    if isinstance(points, bool) or not isinstance(points, int):
        raise InvalidScoreError(f"points must be an integer, got {points!r}")
    if points == 0:
        raise InvalidScoreError("points must not be zero")
    if abs(points) > MAX_POINTS:
        raise InvalidScoreError(f"points must be between -{MAX_POINTS} and {MAX_POINTS}, got {points}")
    return points


def parse_points(raw: str | int) -> int:
    """
    Parse a point value typed on the score keypad.

    Accepts an int or a string of digits with an optional leading minus
    ("40", "-120"). Surrounding whitespace is ignored. Empty input, a lone
    "-", anything non-numeric, zero and values beyond MAX_POINTS are
    rejected.
    """
    if isinstance(raw, str):
        text = raw.strip()
        if not _POINTS_PATTERN.match(text):
            raise InvalidScoreError(f"invalid point value: {raw!r}")
        try:
            value = int(text)
        except ValueError as e:
            # digit strings past the interpreter's int conversion limit
            raise InvalidScoreError(f"invalid point value: {raw!r}") from e
        return validate_points(value)
    return validate_points(raw)


def running_totals(entries: Iterable[ScoreEntry]) -> list[int]:
    """Cumulative sum after each entry, oldest first."""
    return list(accumulate(entry.points for entry in entries))


def ledger_total(entries: Iterable[ScoreEntry]) -> int:
    return sum(entry.points for entry in entries)


def reconcile(player: Player, entries: Sequence[ScoreEntry]) -> Reconciliation:
    """
    Compare a player's cached total with the sum of its entries.

    The entry sum is authoritative. A mismatch is logged, never raised.
    """
    result = Reconciliation(
        player_id=player.player_id,
        cached_total=player.total_score,
        ledger_total=ledger_total(e for e in entries if e.player_id == player.player_id),
    )
    if not result.is_consistent:
        logger.warning(
            "cached total disagrees with ledger",
            player_id=player.player_id,
            cached_total=result.cached_total,
            ledger_total=result.ledger_total,
        )
    return result


def plan_penalties(
    players: Sequence[Player],
    tokens: Sequence[TallyToken],
    penalty_per_token: int,
) -> list[PenaltyPlan]:
    """
    Work out the end-of-game penalty for every player with unused tokens.

    One plan per player with at least one unused token, in player order.
    Players whose tokens are all used get nothing, which makes applying
    the plans a second time a no-op.
    """
    plans = []
    for player in players:
        unused = [t.token_id for t in tokens if t.player_id == player.player_id and not t.is_used]
        if not unused:
            continue
        plans.append(
            PenaltyPlan(
                player_id=player.player_id,
                points=len(unused) * penalty_per_token,
                token_ids=tuple(unused),
            ),
        )
    return plans


def score_progression(player_ids: Sequence[str], entries: Iterable[ScoreEntry]) -> dict[str, list[int]]:
    """
    Build per-player score series for a game chart.

    Every series starts at 0 and grows by one point per game entry; only
    the series of the player who scored changes value at that step, so all
    series stay the same length and line up on the same x axis.
    """
    current = dict.fromkeys(player_ids, 0)
    series: dict[str, list[int]] = {pid: [0] for pid in player_ids}
    for entry in entries:
        if entry.player_id in current:
            current[entry.player_id] += entry.points
        for pid in player_ids:
            series[pid].append(current[pid])
    return series
