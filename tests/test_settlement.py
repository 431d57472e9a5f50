"""Tests pour le module settlement (virements de fin de soirée)."""

from __future__ import annotations

import pytest

from chipledger.analysis.settlement import compute_settlement, settle_session
from chipledger.data.domain.models import Participation


def _parts(**profits: float) -> list[Participation]:
    return [Participation(session_id="g1", player_id=pid, profit=v) for pid, v in profits.items()]


def _as_tuples(transfers) -> list[tuple[str, str, float]]:
    return [(t.from_player_id, t.to_player_id, t.amount) for t in transfers]


class TestComputeSettlement:
    """Tests de compute_settlement."""

    def test_two_losers_one_winner(self):
        plan = compute_settlement(_parts(p1=100, p2=-40, p3=-60))
        assert _as_tuples(plan.transfers) == [("p2", "p1", 40), ("p3", "p1", 60)]
        assert plan.small_transfers == ()

    def test_exact_pairs_first(self):
        plan = compute_settlement(_parts(a=30, b=-20, c=20, d=-30))
        assert _as_tuples(plan.transfers) == [("b", "c", 20), ("d", "a", 30)]

    def test_one_loser_pays_everyone(self):
        plan = compute_settlement(_parts(a=50, b=50, c=-100))
        assert _as_tuples(plan.transfers) == [("c", "a", 50), ("c", "b", 50)]

    def test_small_transfers_reported_apart(self):
        plan = compute_settlement(_parts(p1=103, p2=-100, p3=-3), min_transfer=5)
        assert _as_tuples(plan.transfers) == [("p2", "p1", 100)]
        assert _as_tuples(plan.small_transfers) == [("p3", "p1", 3)]

    @pytest.mark.parametrize(
        "profits",
        [
            {"a": 120, "b": -35, "c": -45, "d": -40},
            {"a": 80, "b": 20, "c": -55, "d": -45},
            {"a": 10, "b": 10, "c": 10, "d": -30},
            {"a": 250, "b": -1, "c": -99, "d": -150},
        ],
    )
    def test_balances_are_settled(self, profits):
        """Chaque joueur reçoit ou paie exactement son résultat."""
        plan = compute_settlement(_parts(**profits))
        net = dict.fromkeys(profits, 0.0)
        for t in (*plan.transfers, *plan.small_transfers):
            net[t.from_player_id] -= t.amount
            net[t.to_player_id] += t.amount
        for pid, profit in profits.items():
            assert net[pid] == pytest.approx(profit)
        assert plan.total_transferred == pytest.approx(sum(v for v in profits.values() if v > 0))

    def test_zero_results_ignored(self):
        plan = compute_settlement(_parts(a=0, b=0))
        assert plan.transfers == ()
        assert plan.total_transferred == 0


class TestSettleSession:
    """Tests de settle_session sur le registre de référence."""

    def test_from_ledger(self, small_ledger):
        plan = settle_session(small_ledger, "g1")
        assert _as_tuples(plan.transfers) == [("p2", "p1", 40), ("p3", "p1", 60)]

    def test_unknown_session(self, small_ledger):
        assert settle_session(small_ledger, "nope").transfers == ()
