"""Tests pour le module forecast.

Teste :
1. Valeur de base (pondération semestre / vie)
2. Multiplicateurs de série
3. Planchers, recentrage et correction du résidu
4. Somme exactement nulle des pronostics arrondis
5. Bilan d'un pronostic face aux résultats réels
"""

from __future__ import annotations

import pytest

from chipledger.analysis.forecast import (
    apply_floor,
    compare_forecast,
    compute_base_suggestion,
    compute_forecast_suggestions,
    correct_residual,
    forecast_inputs_from_stats,
    rebalance_to_zero_sum,
    streak_multiplier,
)
from chipledger.analysis.stats import compute_all_player_stats
from chipledger.config import ForecastConfig
from chipledger.data.domain.models import Participation, QueryParams
from chipledger.models import ForecastInput, ForecastSuggestion


def _input(
    pid: str,
    *,
    games: int = 10,
    avg: float = 0.0,
    period_avg: float = 0.0,
    period_games: int = 0,
    streak: int = 0,
) -> ForecastInput:
    return ForecastInput(
        player_id=pid,
        player_name=pid.upper(),
        games_played=games,
        avg_profit=avg,
        period_avg=period_avg,
        period_games=period_games,
        current_streak=streak,
    )


class TestBaseSuggestion:
    """Tests de compute_base_suggestion."""

    def test_blend_with_enough_period_games(self):
        item = _input("a", avg=40, period_avg=60, period_games=3)
        assert compute_base_suggestion(item) == pytest.approx(54)

    def test_lifetime_only_below_min_period_games(self):
        assert compute_base_suggestion(_input("a", avg=-20, period_avg=100, period_games=1)) == -20

    def test_no_games(self):
        assert compute_base_suggestion(_input("a", games=0, avg=500)) == 0


class TestStreakMultiplier:
    """Tests de streak_multiplier."""

    @pytest.mark.parametrize(
        ("streak", "expected"),
        [(6, 1.5), (4, 1.5), (3, 1.35), (2, 1.2), (1, 1.0), (0, 1.0), (-1, 1.0), (-2, 0.8), (-3, 0.65), (-5, 0.5)],
    )
    def test_table(self, streak, expected):
        assert streak_multiplier(streak) == expected


class TestBalancing:
    """Tests des planchers et du recentrage."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(12, 30), (-5, -30), (0, 0), (45, 45), (-30, -30)],
    )
    def test_apply_floor(self, value, expected):
        assert apply_floor(value, 30) == expected

    def test_negative_floor_rejected(self):
        with pytest.raises(ValueError):
            apply_floor(10, -1)

    def test_rebalance_subtracts_mean(self):
        assert rebalance_to_zero_sum([40, -10, 15, -30, 5]) == [36, -14, 11, -34, 1]

    def test_rebalance_reapplies_floor(self):
        assert rebalance_to_zero_sum([40, -10, 15, -30, 5], floor=10) == [36, -14, 11, -34, 10]

    def test_rebalance_empty(self):
        assert rebalance_to_zero_sum([]) == []

    def test_correct_residual_on_smallest_magnitude(self):
        assert correct_residual([1, 5, -4, 0]) == [1, 5, -4, -2]

    def test_correct_residual_tie_goes_to_first(self):
        assert correct_residual([3, -3, 3]) == [0, -3, 3]

    def test_correct_residual_already_balanced(self):
        assert correct_residual([10, -10]) == [10, -10]


class TestForecastSuggestions:
    """Tests de compute_forecast_suggestions."""

    def test_reference_roster(self):
        roster = [
            _input("a", games=5, avg=40, period_avg=60, period_games=3),
            _input("b", games=4, avg=-20, period_games=0),
            _input("c", games=0),
        ]
        suggestions = compute_forecast_suggestions(roster)
        assert [s.expected_profit for s in suggestions] == [107, -78, -29]
        assert [s.player_id for s in suggestions] == ["a", "b", "c"]
        assert suggestions[0].base_value == pytest.approx(54)

    @pytest.mark.parametrize(
        "roster",
        [
            [_input("a", avg=13.3), _input("b", avg=-7.7), _input("c", avg=2.1)],
            [_input("a", avg=100, streak=5), _input("b", avg=100, streak=-5)],
            [_input("a", avg=0), _input("b", avg=0)],
            [_input(f"p{i}", avg=i * 7.3 - 20, streak=i - 3) for i in range(7)],
        ],
    )
    def test_sum_is_exactly_zero(self, roster):
        assert sum(s.expected_profit for s in compute_forecast_suggestions(roster)) == 0

    def test_single_player(self):
        (only,) = compute_forecast_suggestions([_input("a", avg=80)])
        assert only.expected_profit == 0

    def test_empty_roster(self):
        assert compute_forecast_suggestions([]) == []

    def test_custom_config(self):
        config = ForecastConfig(amplification=1.0, floor_before_balance=0, floor_after_balance=0)
        roster = [_input("a", avg=10), _input("b", avg=-10)]
        assert [s.expected_profit for s in compute_forecast_suggestions(roster, config=config)] == [10, -10]

    def test_inputs_from_stats_use_half_period(self, stats_factory):
        stats = [stats_factory("p1", "Alice", avg_profit=25, half_profit=90, half_games=3)]
        (item,) = forecast_inputs_from_stats(stats)
        assert item.period_avg == 30
        assert item.period_games == 3
        assert item.avg_profit == 25

    def test_newcomer_stays_in_roster(self, ledger_factory, reference_now):
        """Un joueur retenu sans aucune soirée reçoit un pronostic (base nulle)."""
        ledger = ledger_factory(
            [("a", "A"), ("b", "B"), ("new", "Nouveau")],
            [("g1", "2025-07-01", {"a": 100, "b": -100})],
        )
        params = QueryParams(player_ids=("a", "b", "new"), now=reference_now)
        stats = compute_all_player_stats(ledger, params, include_inactive=True)

        suggestions = compute_forecast_suggestions(forecast_inputs_from_stats(stats))
        by_id = {s.player_id: s.expected_profit for s in suggestions}
        assert by_id == {"a": 250, "new": 0, "b": -250}
        assert sum(by_id.values()) == 0


class TestCompareForecast:
    """Tests de compare_forecast."""

    def _suggestions(self, **values):
        return [
            ForecastSuggestion(player_id=pid, player_name=pid.upper(), expected_profit=v)
            for pid, v in values.items()
        ]

    def _results(self, **profits):
        return [Participation(session_id="g1", player_id=pid, profit=p) for pid, p in profits.items()]

    def test_accuracy_and_missing_players(self):
        comparison = compare_forecast(
            self._suggestions(a=50, b=-30, c=-20),
            self._results(a=40, b=-60, d=20),
        )
        assert [e.player_id for e in comparison.entries] == ["a", "b"]
        first, second = comparison.entries
        assert (first.gap, first.difference) == (10, -10)
        assert first.accuracy_percent == pytest.approx(98)
        assert second.accuracy_percent == pytest.approx(94)
        assert comparison.overall_accuracy == pytest.approx(96)
        assert comparison.missing_from_session == ("c",)
        assert comparison.missing_from_forecast == ("d",)
        assert comparison.has_comparison

    def test_accuracy_never_negative(self):
        (entry,) = compare_forecast(self._suggestions(a=300), self._results(a=-400)).entries
        assert entry.gap == 700
        assert entry.accuracy_percent == 0

    def test_custom_accuracy_step(self):
        config = ForecastConfig(accuracy_step=10.0)
        (entry,) = compare_forecast(
            self._suggestions(a=50), self._results(a=0), config=config
        ).entries
        assert entry.accuracy_percent == pytest.approx(95)

    def test_no_common_player(self):
        comparison = compare_forecast(self._suggestions(a=10, b=-10), self._results(c=5))
        assert not comparison.has_comparison
        assert comparison.overall_accuracy == 0
        assert comparison.missing_from_session == ("a", "b")
        assert comparison.missing_from_forecast == ("c",)

    def test_round_trip_with_session_results(self, small_ledger):
        """Pronostic exact sur une soirée du registre → précision parfaite."""
        results = small_ledger.participations_for("g1")
        suggestions = [
            ForecastSuggestion(
                player_id=p.player_id,
                player_name=small_ledger.player_name(p.player_id),
                expected_profit=int(p.profit),
            )
            for p in results
        ]
        comparison = compare_forecast(suggestions, results)
        assert comparison.overall_accuracy == pytest.approx(100)
        assert comparison.missing_from_session == ()
        assert comparison.missing_from_forecast == ()
