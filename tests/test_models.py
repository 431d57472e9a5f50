"""Tests pour les modèles de données."""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from chipledger.data.domain.models import (
    LedgerSnapshot,
    Participation,
    Player,
    PlayerCategory,
    QueryParams,
    Session,
    SessionStatus,
    TimeWindow,
)
from chipledger.models import PeriodRef, PlayerStats, Settlement, SettlementPlan, StreakSummary


class TestPlayer:
    """Tests pour la classe Player."""

    def test_id_and_name_normalized(self):
        player = Player(id=42, name="  Alice  ")
        assert player.id == "42"
        assert player.name == "Alice"
        assert player.category == PlayerCategory.PERMANENT

    def test_unknown_category_becomes_guest(self):
        assert Player(id="p1", name="A", category="VIP").category == PlayerCategory.GUEST

    def test_frozen(self):
        player = Player(id="p1", name="A")
        with pytest.raises(ValidationError):
            player.name = "B"

    def test_missing_id(self):
        with pytest.raises(ValidationError):
            Player(id=None, name="A")


class TestSession:
    """Tests pour Session et Participation."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("completed", SessionStatus.COMPLETED),
            ("LIVE", SessionStatus.SCHEDULED),
            ("chip_entry", SessionStatus.SCHEDULED),
            ("canceled", SessionStatus.CANCELLED),
            (None, SessionStatus.COMPLETED),
        ],
    )
    def test_status_parsing(self, raw, expected):
        assert Session(id="g1", date="2025-01-01", status=raw).status == expected

    def test_only_completed_counts(self):
        assert Session(id="g1", date="x").is_completed
        assert not Session(id="g1", date="x", status="scheduled").is_completed

    def test_raw_date_kept(self):
        assert Session(id="g1", date=" 05/01/2025 ").date == "05/01/2025"
        assert Session(id="g1", date=None).date == ""
        assert Session(id="g1", date=date(2025, 1, 5)).date == date(2025, 1, 5)

    def test_participation_profit(self):
        assert Participation(session_id="g1", player_id="p1", profit="-35.5").profit == -35.5
        assert Participation(session_id="g1", player_id="p1", profit=None).profit == 0


class TestLedgerSnapshot:
    """Tests pour LedgerSnapshot."""

    def test_indexes(self, small_ledger):
        assert small_ledger.player_by_id["p3"].name == "Chloé"
        assert small_ledger.session_by_id["g6"].status == SessionStatus.SCHEDULED
        assert len(small_ledger.completed_sessions()) == 5
        assert len(small_ledger.participations_for("g1")) == 3

    def test_player_name_fallback(self, small_ledger):
        assert small_ledger.player_name("ghost") == "Inconnu"

    def test_player_ids_by_category(self):
        ledger = LedgerSnapshot(
            players=(
                Player(id="a", name="A"),
                Player(id="b", name="B", category="guest"),
            )
        )
        assert ledger.player_ids() == ["a", "b"]
        assert ledger.player_ids(PlayerCategory.GUEST) == ["b"]


class TestQueryParams:
    """Tests pour TimeWindow et QueryParams."""

    def test_window_bounds(self):
        window = TimeWindow(start=date(2025, 1, 1), end=date(2025, 6, 30))
        assert window.contains(date(2025, 6, 30))
        assert not window.contains(date(2025, 7, 1))
        assert TimeWindow().is_unbounded

    def test_window_inverted(self):
        with pytest.raises(ValidationError):
            TimeWindow(start=date(2025, 2, 1), end=date(2025, 1, 1))

    def test_period_date_resolution(self):
        params = QueryParams(now=datetime(2025, 7, 20, 12, 0))
        assert params.resolved_period_date() == date(2025, 7, 20)
        params = QueryParams(now=datetime(2025, 7, 20), period_date=date(2024, 12, 1))
        assert params.resolved_period_date() == date(2024, 12, 1)

    def test_cache_key_ignores_player_order(self):
        now = datetime(2025, 7, 20)
        first = QueryParams(player_ids=("b", "a"), now=now)
        second = QueryParams(player_ids=("a", "b"), now=now)
        assert first.cache_key() == second.cache_key()


class TestDerivedModels:
    """Tests des dataclasses dérivées."""

    def test_period_from_date(self):
        assert PeriodRef.from_date(date(2025, 7, 1)) == PeriodRef(2025, 6, 2)
        assert PeriodRef.from_date(date(2025, 6, 30)).half == 1

    def test_period_averages(self):
        stats = PlayerStats(
            player_id="p1", player_name="A", year_profit=90, year_games=3, half_games=0
        )
        assert stats.year_avg == 30
        assert stats.half_avg == 0

    def test_streak_type(self):
        summary = StreakSummary(-2, 3, 4, 2.0, 3.0, 10)
        assert summary.current_streak_type == "loss"

    def test_settlement_plan_total(self):
        plan = SettlementPlan(
            transfers=(Settlement("b", "a", 40.0),),
            small_transfers=(Settlement("c", "a", 3.0),),
        )
        assert plan.total_transferred == 43
