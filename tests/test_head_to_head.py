"""Tests pour le module head_to_head.

Teste :
1. Restriction aux soirées partagées
2. Duels directs, égalités et forme récente
3. Tranches de résultats et volatilité
4. Cas sans résultat (identifiant absent, aucune soirée partagée)
"""

from __future__ import annotations

import math
from datetime import date

import pytest

from chipledger.analysis.head_to_head import (
    classify_buckets,
    compute_head_to_head,
    compute_volatility,
)
from chipledger.data.domain.models import TimeWindow


class TestHeadToHead:
    """Tests de compute_head_to_head sur le registre de référence."""

    def test_shared_sessions_only(self, small_ledger):
        """Seules les soirées avec les deux joueurs sont comptées."""
        result = compute_head_to_head(small_ledger, "p3", "p1")
        assert result is not None
        assert result.shared_sessions == 3
        assert len(result.cumulative) == 3
        assert [p.session_id for p in result.cumulative] == ["g1", "g2", "g4"]
        # g5 (Chloé sans Alice) n'apparaît pas
        assert result.player1.total_profit == -120

    def test_side_statistics(self, small_ledger):
        result = compute_head_to_head(small_ledger, "p1", "p2")
        alice, bob = result.player1, result.player2
        assert alice.player_name == "Alice"
        assert alice.games_played == 4
        assert alice.total_profit == 160
        assert alice.avg_profit == 40
        assert (alice.wins, alice.losses) == (3, 1)
        assert alice.biggest_win == 100
        assert alice.biggest_loss == -20
        assert bob.total_profit == -40
        assert bob.win_percentage == 50

    def test_direct_battles(self, small_ledger):
        result = compute_head_to_head(small_ledger, "p1", "p2")
        assert result.player1.direct_wins == 3
        assert result.player2.direct_wins == 1
        assert result.ties == 0

    def test_cumulative_running_sums(self, small_ledger):
        result = compute_head_to_head(small_ledger, "p1", "p2")
        assert [p.player1_cumulative for p in result.cumulative] == [100, 150, 130, 160]
        assert [p.player2_cumulative for p in result.cumulative] == [-40, -10, 10, -40]
        assert [p.index for p in result.cumulative] == [1, 2, 3, 4]
        assert result.cumulative[0].session_date == date(2025, 1, 5)

    def test_recent_form(self, small_ledger):
        result = compute_head_to_head(small_ledger, "p1", "p2")
        assert [e.winner for e in result.recent_form] == [
            "player1",
            "player1",
            "player2",
            "player1",
        ]

    def test_recent_form_keeps_last_five(self, ledger_factory):
        sessions = [
            (f"g{i}", f"2025-01-{i:02d}", {"a": i, "b": -i}) for i in range(1, 8)
        ]
        ledger = ledger_factory([("a", "A"), ("b", "B")], sessions)
        result = compute_head_to_head(ledger, "a", "b")
        assert [e.session_id for e in result.recent_form] == ["g3", "g4", "g5", "g6", "g7"]

    def test_ties(self, ledger_factory):
        ledger = ledger_factory(
            [("a", "A"), ("b", "B"), ("c", "C")],
            [("g1", "2025-01-01", {"a": 20, "b": 20, "c": -40})],
        )
        result = compute_head_to_head(ledger, "a", "b")
        assert result.ties == 1
        assert result.recent_form[0].winner == "tie"

    def test_volatility(self, small_ledger):
        result = compute_head_to_head(small_ledger, "p1", "p2")
        assert result.player1.volatility == pytest.approx(math.sqrt(1850))

    def test_window(self, small_ledger):
        window = TimeWindow(start=date(2025, 2, 1), end=date(2025, 6, 30))
        result = compute_head_to_head(small_ledger, "p1", "p2", window=window)
        assert result.shared_sessions == 2
        assert result.player1.total_profit == 30

    @pytest.mark.parametrize(
        ("player1", "player2"),
        [(None, "p1"), ("p1", ""), ("p1", "p1"), ("p1", "unknown"), ("p1", "p4")],
    )
    def test_no_result(self, small_ledger, player1, player2):
        """Identifiant absent, identique, inconnu ou sans soirée partagée → None."""
        assert compute_head_to_head(small_ledger, player1, player2) is None


class TestBucketsAndVolatility:
    """Tests des tranches de résultats et de la volatilité."""

    def test_buckets_threshold(self):
        buckets = classify_buckets([200, 150, 1, 0, -1, -150, -151], 150)
        assert buckets.big_win == 1
        assert buckets.small_win == 2
        assert buckets.small_loss == 2
        assert buckets.big_loss == 1

    def test_custom_threshold(self, small_ledger):
        result = compute_head_to_head(small_ledger, "p1", "p2", big_result_threshold=40)
        assert result.player1.buckets.big_win == 2
        assert result.player2.buckets.big_loss == 1

    def test_volatility_edge_cases(self):
        assert compute_volatility([]) == 0
        assert compute_volatility([42]) == 0
        assert compute_volatility([10, -10]) == pytest.approx(10)
