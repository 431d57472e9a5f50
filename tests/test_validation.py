"""Tests pour le module validation.

Teste :
1. Somme nulle des soirées (tolérance)
2. Références orphelines, doublons, dates illisibles, soirées vides
3. Cohérence des séries, profits et compteurs stockés
"""

from __future__ import annotations

import pytest

from chipledger.analysis.stats import compute_all_player_stats
from chipledger.analysis.validation import (
    COUNT_MISMATCH,
    DANGLING_PLAYER,
    DANGLING_SESSION,
    DUPLICATE_PARTICIPATION,
    EMPTY_SESSION,
    PROFIT_MISMATCH,
    SESSION_IMBALANCE,
    STREAK_MISMATCH,
    UNPARSABLE_DATE,
    check_stats_consistency,
    check_streak_consistency,
    validate_ledger,
)
from chipledger.data.domain.models import LedgerSnapshot, Participation, Session
from chipledger.models import GameResult


class TestValidateLedger:
    """Tests de validate_ledger."""

    def test_reference_ledger(self, small_ledger):
        """Le registre de référence est équilibré ; seule g5 a une date illisible."""
        report = validate_ledger(small_ledger)
        assert report.is_valid
        assert [i.session_id for i in report.warnings] == ["g5"]
        assert report.warnings[0].code == UNPARSABLE_DATE
        assert report.sessions_checked == 5

    def test_imbalance(self, ledger_factory):
        ledger = ledger_factory(
            [("a", "A"), ("b", "B"), ("c", "C")],
            [("g1", "2025-01-01", {"a": 100, "b": -40, "c": -50})],
        )
        report = validate_ledger(ledger)
        assert not report.is_valid
        (issue,) = report.by_code(SESSION_IMBALANCE)
        assert issue.amount == pytest.approx(10)
        assert issue.session_id == "g1"

    def test_tolerance(self, ledger_factory):
        ledger = ledger_factory(
            [("a", "A"), ("b", "B")],
            [("g1", "2025-01-01", {"a": 100.5, "b": -100})],
        )
        assert validate_ledger(ledger).is_valid
        assert not validate_ledger(ledger, tolerance=0.1).is_valid

    def test_negative_tolerance_rejected(self, small_ledger):
        with pytest.raises(ValueError):
            validate_ledger(small_ledger, tolerance=-1)

    def test_scheduled_sessions_not_balanced(self, ledger_factory):
        ledger = ledger_factory(
            [("a", "A")],
            [("g1", "2025-01-01", {"a": 50}, "scheduled")],
        )
        assert validate_ledger(ledger).by_code(SESSION_IMBALANCE) == []

    def test_dangling_references(self, small_ledger):
        ledger = LedgerSnapshot(
            players=small_ledger.players,
            sessions=small_ledger.sessions,
            participations=(
                *small_ledger.participations,
                Participation(session_id="ghost", player_id="p1", profit=0),
                Participation(session_id="g6", player_id="stranger", profit=0),
            ),
        )
        report = validate_ledger(ledger)
        assert [i.session_id for i in report.by_code(DANGLING_SESSION)] == ["ghost"]
        assert [i.player_id for i in report.by_code(DANGLING_PLAYER)] == ["stranger"]
        assert report.is_valid

    def test_duplicate_participation(self, ledger_factory):
        base = ledger_factory([("a", "A"), ("b", "B")], [("g1", "2025-01-01", {"a": 10, "b": -10})])
        ledger = LedgerSnapshot(
            players=base.players,
            sessions=base.sessions,
            participations=(*base.participations, base.participations[0]),
        )
        report = validate_ledger(ledger)
        (issue,) = report.by_code(DUPLICATE_PARTICIPATION)
        assert (issue.session_id, issue.player_id) == ("g1", "a")
        assert issue.severity == "error"

    def test_empty_completed_session(self, ledger_factory):
        ledger = ledger_factory([("a", "A")], [])
        ledger = LedgerSnapshot(
            players=ledger.players,
            sessions=(Session(id="g1", date="2025-01-01"),),
        )
        (issue,) = validate_ledger(ledger).by_code(EMPTY_SESSION)
        assert issue.severity == "warning"


class TestStreakConsistency:
    """Tests de check_streak_consistency."""

    def _history(self, *profits):
        return tuple(
            GameResult(session_id=f"s{i}", profit=p, session_date=None, year=2025, month=0, half=1)
            for i, p in enumerate(profits)
        )

    def test_consistent(self, stats_factory):
        stats = [stats_factory("p1", current_streak=2, history=self._history(10, 5, -3))]
        assert check_streak_consistency(stats) == []

    def test_mismatch(self, stats_factory):
        stats = [stats_factory("p1", "Alice", current_streak=3, history=self._history(10, -5))]
        (issue,) = check_streak_consistency(stats)
        assert issue.code == STREAK_MISMATCH
        assert issue.player_id == "p1"
        assert "Alice" in issue.message

    def test_computed_stats_are_consistent(self, small_ledger):
        assert check_streak_consistency(compute_all_player_stats(small_ledger)) == []


class TestStatsConsistency:
    """Tests de check_stats_consistency."""

    def _history(self, *profits):
        return tuple(
            GameResult(session_id=f"s{i}", profit=p, session_date=None, year=2025, month=0, half=1)
            for i, p in enumerate(profits)
        )

    def _stats(self, stats_factory, **overrides):
        fields = dict(
            games_played=3,
            total_profit=45,
            win_count=2,
            loss_count=1,
            current_streak=2,
            history=self._history(40, 20, -15),
        )
        fields.update(overrides)
        return stats_factory("p1", "Alice", **fields)

    def test_consistent(self, stats_factory):
        assert check_stats_consistency([self._stats(stats_factory)]) == []

    def test_profit_mismatch(self, stats_factory):
        (issue,) = check_stats_consistency([self._stats(stats_factory, total_profit=60)])
        assert issue.code == PROFIT_MISMATCH
        assert issue.amount == pytest.approx(15)
        assert "Alice" in issue.message

    def test_rounding_within_tolerance(self, stats_factory):
        assert check_stats_consistency([self._stats(stats_factory, total_profit=45.8)]) == []

    def test_win_count_mismatch(self, stats_factory):
        (issue,) = check_stats_consistency([self._stats(stats_factory, win_count=3)])
        assert issue.code == COUNT_MISMATCH
        assert issue.player_id == "p1"

    def test_partial_history_skips_profit_check(self, stats_factory):
        """Historique incomplet : compteurs signalés, total non vérifiable."""
        stats = self._stats(stats_factory, games_played=5, total_profit=500)
        assert [i.code for i in check_stats_consistency([stats])] == [COUNT_MISMATCH]

    def test_includes_streak_check(self, stats_factory):
        stats = self._stats(stats_factory, current_streak=-1)
        assert [i.code for i in check_stats_consistency([stats])] == [STREAK_MISMATCH]

    def test_computed_stats_are_consistent(self, small_ledger):
        assert check_stats_consistency(compute_all_player_stats(small_ledger)) == []
