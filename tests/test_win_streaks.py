"""Tests pour le module win_streaks.

Teste :
1. Série en cours (règle d'arrêt sur résultat nul)
2. Records de séries sur tout l'historique
3. Séries détaillées et résumé statistique
"""

from __future__ import annotations

from datetime import date

import pytest

from chipledger.analysis.win_streaks import (
    compute_best_streaks,
    compute_current_streak,
    compute_streak_summary,
    compute_streaks,
)
from chipledger.models import GameResult


def _history(profits_newest_first: list[float]) -> list[GameResult]:
    """Crée un historique du plus récent au plus ancien."""
    n = len(profits_newest_first)
    return [
        GameResult(
            session_id=f"s{n - i}",
            profit=p,
            session_date=date(2025, 1, 1),
            year=2025,
            month=0,
            half=1,
        )
        for i, p in enumerate(profits_newest_first)
    ]


class TestCurrentStreak:
    """Tests de compute_current_streak."""

    @pytest.mark.parametrize(
        ("profits", "expected"),
        [
            ([50, 30, 20, -10], 3),
            ([-5, -10, 40], -2),
            ([0, 50, 50], 0),
            ([50, 0, 50], 1),
            ([-20, 0, -20], -1),
            ([], 0),
            ([10, -10, 10, 10], 1),
        ],
    )
    def test_backward_scan(self, profits, expected):
        assert compute_current_streak(profits) == expected

    def test_matches_manual_scan(self):
        """Comparaison avec un parcours manuel sur plusieurs historiques."""
        samples = [[1, 2, 3], [-1, -2, 3], [4, 0, -1], [-3, 5], [7, 7, 7, 7, -1]]
        for profits in samples:
            sign = (profits[0] > 0) - (profits[0] < 0)
            n = 0
            for p in profits:
                if sign == 0 or (p > 0) - (p < 0) != sign:
                    break
                n += 1
            assert compute_current_streak(profits) == sign * n


class TestBestStreaks:
    """Tests de compute_best_streaks."""

    def test_longest_runs(self):
        assert compute_best_streaks([10, 20, -5, 30, 40, 50, -1, -2]) == (3, 2)

    def test_break_even_resets(self):
        assert compute_best_streaks([10, 0, 10, 10, 0, -5]) == (2, 1)

    def test_order_invariant(self):
        profits = [5, 5, -1, -1, -1, 3]
        assert compute_best_streaks(profits) == compute_best_streaks(list(reversed(profits)))

    def test_empty(self):
        assert compute_best_streaks([]) == (0, 0)


class TestStreakRecords:
    """Tests de compute_streaks et compute_streak_summary."""

    def test_chronological_records(self):
        # Chronologique : +1, +2, 0, -3, -4, -5, +6
        history = _history([6, -5, -4, -3, 0, 2, 1])
        records = compute_streaks(history)
        assert [(r.streak_type, r.length) for r in records] == [
            ("win", 2),
            ("loss", 3),
            ("win", 1),
        ]
        assert records[1].start_index == 3
        assert records[1].end_index == 5
        assert records[0].start_session_id == "s1"

    def test_break_even_only(self):
        assert compute_streaks(_history([0, 0])) == []

    def test_empty_history(self):
        assert compute_streaks([]) == []
        summary = compute_streak_summary([])
        assert summary.total_games == 0
        assert summary.current_streak_type == "none"

    def test_summary(self):
        history = _history([6, -5, -4, -3, 0, 2, 1])
        summary = compute_streak_summary(history)
        assert summary.current_streak == 1
        assert summary.current_streak_type == "win"
        assert summary.longest_win_streak == 2
        assert summary.longest_loss_streak == 3
        assert summary.avg_win_streak == 2.0
        assert summary.avg_loss_streak == 3.0
        assert summary.total_games == 7
