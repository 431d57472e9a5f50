"""Module d'analyse des séries de victoires/défaites avec Polars.

Une victoire est un résultat strictement positif, une défaite un résultat
strictement négatif. Un résultat nul (break-even) interrompt toute série
et n'en démarre aucune.
"""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl

from chipledger.models import GameResult, StreakRecord, StreakSummary

# =============================================================================
# Série en cours et records
# =============================================================================


def compute_current_streak(profits_newest_first: Sequence[float]) -> int:
    """Calcule la série en cours à partir de la soirée la plus récente.

    Args:
        profits_newest_first: Résultats triés du plus récent au plus ancien.

    Returns:
        +N pour N victoires consécutives, -N pour N défaites, 0 si la
        dernière soirée est nulle ou s'il n'y a aucune soirée.

    Example:
        >>> compute_current_streak([50, 30, 20, -10])
        3
    """
    streak = 0
    for profit in profits_newest_first:
        if profit > 0:
            if streak < 0:
                break
            streak += 1
        elif profit < 0:
            if streak > 0:
                break
            streak -= 1
        else:
            break
    return streak


def compute_best_streaks(profits: Sequence[float]) -> tuple[int, int]:
    """Plus longues séries de victoires et de défaites sur tout l'historique.

    Le résultat ne dépend pas du sens de parcours.

    Returns:
        Tuple (plus longue série de victoires, plus longue série de défaites).
    """
    best_win = best_loss = 0
    run = 0
    for profit in profits:
        if profit > 0:
            run = run + 1 if run > 0 else 1
            best_win = max(best_win, run)
        elif profit < 0:
            run = run - 1 if run < 0 else -1
            best_loss = max(best_loss, -run)
        else:
            run = 0
    return best_win, best_loss


# =============================================================================
# Fonctions Polars - Séries détaillées
# =============================================================================


def _history_frame(history: Sequence[GameResult]) -> pl.DataFrame:
    """Historique chronologique (plus ancien d'abord) avec le signe du résultat."""
    chronological = list(reversed(history))
    return pl.DataFrame(
        {
            "session_id": [g.session_id for g in chronological],
            "profit": [float(g.profit) for g in chronological],
        },
        schema={"session_id": pl.Utf8, "profit": pl.Float64},
    ).with_columns(
        pl.col("profit").sign().cast(pl.Int8).alias("_sign"),
    )


def compute_streaks(history: Sequence[GameResult]) -> list[StreakRecord]:
    """Calcule toutes les séries de victoires et défaites consécutives.

    Args:
        history: Historique du joueur, du plus récent au plus ancien.

    Returns:
        Liste de StreakRecord triée chronologiquement. Les index sont
        chronologiques (0 = soirée la plus ancienne).
    """
    if not history:
        return []

    df = _history_frame(history).with_row_index("_idx")

    # Détecter les changements de signe (début de nouvelle série)
    df = df.with_columns(
        (pl.col("_sign") != pl.col("_sign").shift(1)).fill_null(True).alias("_new_streak")
    )
    df = df.with_columns(pl.col("_new_streak").cum_sum().alias("_streak_group"))

    streaks_agg = (
        df.group_by("_streak_group")
        .agg(
            pl.col("_sign").first().alias("sign"),
            pl.col("_idx").count().alias("length"),
            pl.col("_idx").min().alias("start_index"),
            pl.col("_idx").max().alias("end_index"),
            pl.col("session_id").first().alias("first_session"),
            pl.col("session_id").last().alias("last_session"),
        )
        .filter(pl.col("sign") != 0)
        .sort("_streak_group")
    )

    records: list[StreakRecord] = []
    for row in streaks_agg.iter_rows(named=True):
        records.append(
            StreakRecord(
                streak_type="win" if row["sign"] > 0 else "loss",
                length=int(row["length"]),
                start_index=int(row["start_index"]),
                end_index=int(row["end_index"]),
                start_session_id=row["first_session"],
                end_session_id=row["last_session"],
            )
        )
    return records


def compute_streak_summary(history: Sequence[GameResult]) -> StreakSummary:
    """Calcule un résumé statistique des séries.

    Les moyennes ne portent que sur les séries d'au moins 2 soirées.

    Args:
        history: Historique du joueur, du plus récent au plus ancien.

    Returns:
        StreakSummary avec statistiques agrégées.
    """
    profits = [g.profit for g in history]
    streaks = compute_streaks(history)

    win_lengths = [s.length for s in streaks if s.streak_type == "win" and s.length >= 2]
    loss_lengths = [s.length for s in streaks if s.streak_type == "loss" and s.length >= 2]
    longest_win, longest_loss = compute_best_streaks(profits)

    return StreakSummary(
        current_streak=compute_current_streak(profits),
        longest_win_streak=longest_win,
        longest_loss_streak=longest_loss,
        avg_win_streak=round(sum(win_lengths) / len(win_lengths), 1) if win_lengths else 0.0,
        avg_loss_streak=round(sum(loss_lengths) / len(loss_lengths), 1) if loss_lengths else 0.0,
        total_games=len(profits),
    )
