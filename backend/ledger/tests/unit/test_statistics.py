"""Tests for cross-session aggregation and form classification."""

from datetime import UTC, datetime, timedelta

import pytest

from ledger.statistics import aggregate, form_trend, leaderboard, player_key
from ledger.types import AggregationKey, FinishedGame, FinishedGamePlayer, FormLabel, RankRecord

_BASE = datetime(2025, 3, 1, 19, 0, tzinfo=UTC)


def _game(day: int, **totals: int) -> FinishedGame:
    return FinishedGame(
        date=_BASE + timedelta(days=day),
        players=[FinishedGamePlayer(name=name, total_score=total) for name, total in totals.items()],
    )


def _history(*ranks: int) -> list[RankRecord]:
    """Rank records given newest first."""
    return [RankRecord(rank=r, date=_BASE - timedelta(days=i)) for i, r in enumerate(ranks)]


class TestAggregate:
    def test_empty_input(self):
        assert aggregate([]) == {}

    def test_counts_finishes_per_player(self):
        games = [
            _game(0, Ana=100, Bor=50, Cene=20, Dana=-10),
            _game(1, Ana=10, Bor=80, Cene=20, Dana=5),
        ]

        stats = aggregate(games)

        assert (stats["Ana"].wins, stats["Ana"].second, stats["Ana"].third) == (1, 0, 1)
        assert (stats["Bor"].wins, stats["Bor"].second) == (1, 1)
        assert stats["Cene"].second == 1
        assert stats["Cene"].third == 1
        assert stats["Dana"].other_finishes == 2
        assert all(s.total_games == 2 for s in stats.values())

    def test_ties_count_for_every_tied_player(self):
        stats = aggregate([_game(0, Ana=50, Bor=50, Cene=30)])

        assert stats["Ana"].wins == 1
        assert stats["Bor"].wins == 1
        assert stats["Cene"].wins == 0
        assert stats["Cene"].third == 1
        assert stats["Cene"].second == 0

    def test_every_finish_lands_in_one_bucket(self):
        games = [
            _game(0, A=10, B=10, C=10, D=5, E=0),
            _game(1, A=-5, C=40, E=40),
            _game(2, B=1, D=2),
        ]

        stats = aggregate(games).values()

        buckets = sum(s.wins + s.second + s.third + s.other_finishes for s in stats)
        assert buckets == sum(s.total_games for s in stats) == 10

    def test_history_newest_first_regardless_of_input_order(self):
        stats = aggregate([_game(0, Ana=10, Bor=0), _game(5, Ana=0, Bor=10), _game(2, Ana=10, Bor=0)])

        assert [r.rank for r in stats["Ana"].history] == [2, 1, 1]
        dates = [r.date for r in stats["Ana"].history]
        assert dates == sorted(dates, reverse=True)

    def test_profile_key_merges_renamed_player(self):
        games = [
            FinishedGame(date=_BASE, players=[FinishedGamePlayer(name="Ana", total_score=10, profile_id="x")]),
            FinishedGame(
                date=_BASE + timedelta(days=1),
                players=[FinishedGamePlayer(name="Ana K.", total_score=10, profile_id="x")],
            ),
        ]

        by_name = aggregate(games)
        by_profile = aggregate(games, key=AggregationKey.PROFILE)

        assert set(by_name) == {"Ana", "Ana K."}
        assert set(by_profile) == {"x"}
        assert by_profile["x"].total_games == 2
        assert by_profile["x"].name == "Ana K."

    def test_profile_key_falls_back_to_name(self):
        player = FinishedGamePlayer(name="Bor", total_score=0)

        assert player_key(player, AggregationKey.PROFILE) == "Bor"
        assert player_key(player.model_copy(update={"profile_id": "y"}), AggregationKey.NAME) == "Bor"


class TestFormTrend:
    def test_empty_history_has_no_data(self):
        assert form_trend([]) == FormLabel.NO_DATA

    def test_three_recent_wins_is_hot(self):
        assert form_trend(_history(1, 1, 1, 4, 5)) == FormLabel.HOT

    @pytest.mark.parametrize(
        ("ranks", "expected"),
        [
            ((1, 2, 4, 4, 4), FormLabel.AVERAGE),  # 15 / 5 = 3.0
            ((1, 2, 2, 4), FormLabel.EXCELLENT),  # 20 / 4 = 5.0
            ((2, 2, 3, 4, 4), FormLabel.AVERAGE),  # 12 / 5 = 2.4
            ((3, 4, 4, 4), FormLabel.COLD),  # 2 / 4 = 0.5
            ((4,), FormLabel.COLD),
            ((2,), FormLabel.EXCELLENT),
        ],
    )
    def test_average_thresholds(self, ranks, expected):
        assert form_trend(_history(*ranks)) == expected

    def test_boundaries_are_inclusive(self):
        # (5 + 2) / 2 = 3.5 exactly
        assert form_trend(_history(2, 3)) == FormLabel.EXCELLENT
        # (2 + 2 + 2 + 0) / 4 = 1.5 exactly
        assert form_trend(_history(3, 3, 3, 4)) == FormLabel.AVERAGE

    def test_only_window_counts(self):
        history = _history(4, 4, 4, 4, 4, 1, 1, 1)

        assert form_trend(history) == FormLabel.COLD
        assert form_trend(history, window=8) == FormLabel.HOT

    def test_unsorted_history_is_sorted_newest_first(self):
        history = list(reversed(_history(4, 4, 4, 4, 4, 1, 1, 1)))

        assert form_trend(history) == FormLabel.COLD

    def test_invalid_window(self):
        with pytest.raises(ValueError, match="must be positive"):
            form_trend(_history(1), window=0)


class TestLeaderboard:
    def test_ordered_by_medals_with_shared_positions(self):
        games = [
            _game(0, Ana=30, Bor=20, Cene=10),
            _game(1, Ana=30, Bor=20, Cene=10),
            _game(2, Bor=30, Ana=20, Cene=10),
            _game(3, Dana=30, Eva=20),
            _game(4, Eva=30, Dana=20),
        ]

        rows = leaderboard(aggregate(games))

        assert [(r.position, r.stats.name) for r in rows] == [
            (1, "Ana"),
            (2, "Bor"),
            (3, "Dana"),
            (3, "Eva"),
            (5, "Cene"),
        ]

    def test_form_attached_to_each_row(self):
        games = [_game(i, Ana=10, Bor=0) for i in range(3)]

        rows = {r.stats.name: r for r in leaderboard(aggregate(games))}

        assert rows["Ana"].form == FormLabel.HOT
        assert rows["Bor"].form == FormLabel.EXCELLENT

    def test_empty(self):
        assert leaderboard({}) == []
