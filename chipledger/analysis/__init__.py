"""Module d'analyse du registre."""

from chipledger.analysis.cumulative import compute_cumulative_series, compute_leaderboard_race
from chipledger.analysis.dates import (
    SENTINEL_DATE,
    DateBucket,
    bucket_in_period,
    classify_date,
    parse_session_date,
    period_of,
)
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
from chipledger.analysis.head_to_head import compute_head_to_head, find_shared_sessions
from chipledger.analysis.milestones import generate_milestones, select_milestones
from chipledger.analysis.settlement import compute_settlement, settle_session
from chipledger.analysis.stats import (
    build_history_frame,
    build_session_timeline,
    compute_all_player_stats,
    compute_period_table,
    compute_player_stats,
    player_history,
    summarize_periods_polars,
)
from chipledger.analysis.validation import (
    check_stats_consistency,
    check_streak_consistency,
    validate_ledger,
)
from chipledger.analysis.win_streaks import (
    compute_best_streaks,
    compute_current_streak,
    compute_streak_summary,
    compute_streaks,
)

__all__ = [
    # dates
    "SENTINEL_DATE",
    "DateBucket",
    "bucket_in_period",
    "classify_date",
    "parse_session_date",
    "period_of",
    # stats
    "build_history_frame",
    "build_session_timeline",
    "compute_all_player_stats",
    "compute_period_table",
    "compute_player_stats",
    "player_history",
    "summarize_periods_polars",
    # streaks
    "compute_best_streaks",
    "compute_current_streak",
    "compute_streak_summary",
    "compute_streaks",
    # head-to-head / séries
    "compute_head_to_head",
    "find_shared_sessions",
    "compute_cumulative_series",
    "compute_leaderboard_race",
    # faits marquants
    "generate_milestones",
    "select_milestones",
    # pronostics
    "apply_floor",
    "compare_forecast",
    "compute_base_suggestion",
    "compute_forecast_suggestions",
    "correct_residual",
    "forecast_inputs_from_stats",
    "rebalance_to_zero_sum",
    "streak_multiplier",
    # règlement / validation
    "compute_settlement",
    "settle_session",
    "check_stats_consistency",
    "check_streak_consistency",
    "validate_ledger",
]
