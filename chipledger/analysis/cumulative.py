"""Module des séries cumulées de groupe avec Polars.

Séries pour les graphiques d'évolution : profit cumulé de chaque joueur
sélectionné après chaque soirée, et course au classement (rang après
chaque soirée). Les colonnes sont indexées par identifiant de joueur ;
le nom d'affichage est résolu au moment du rendu.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import polars as pl

from chipledger.analysis.stats import build_history_frame, build_session_timeline
from chipledger.data.domain.models import LedgerSnapshot, TimeWindow

logger = logging.getLogger(__name__)


def _selected_ids(ledger: LedgerSnapshot, player_ids: Sequence[str]) -> list[str]:
    """Identifiants connus, sans doublon, dans l'ordre de sélection."""
    selected: list[str] = []
    for pid in player_ids:
        if pid not in ledger.player_by_id:
            logger.debug("Joueur inconnu ignoré dans la série cumulée : %s", pid)
            continue
        if pid not in selected:
            selected.append(pid)
    return selected


def compute_cumulative_series(
    ledger: LedgerSnapshot,
    player_ids: Sequence[str],
    *,
    window: TimeWindow | None = None,
) -> pl.DataFrame:
    """Calcule le profit cumulé par joueur après chaque soirée.

    Un joueur absent d'une soirée conserve son total précédent.

    Args:
        ledger: Instantané du registre.
        player_ids: Joueurs sélectionnés.
        window: Fenêtre temporelle optionnelle.

    Returns:
        DataFrame avec colonnes game_index (1..N), session_id, session_date
        et une colonne par identifiant de joueur.
    """
    selected = _selected_ids(ledger, player_ids)
    timeline = build_session_timeline(ledger, window=window)
    timeline = timeline.with_columns((pl.col("session_rank") + 1).alias("game_index"))

    if not selected:
        return timeline.select("game_index", "session_id", "session_date")

    history = build_history_frame(ledger, window=window).filter(
        pl.col("player_id").is_in(selected)
    )
    per_session = history.group_by("session_rank").agg(
        [pl.col("profit").filter(pl.col("player_id") == pid).sum().alias(pid) for pid in selected]
    )

    return (
        timeline.join(per_session, on="session_rank", how="left")
        .with_columns([pl.col(pid).fill_null(0.0) for pid in selected])
        .sort("session_rank")
        .with_columns([pl.col(pid).cum_sum() for pid in selected])
        .select("game_index", "session_id", "session_date", *selected)
    )


def compute_leaderboard_race(
    ledger: LedgerSnapshot,
    player_ids: Sequence[str],
    *,
    window: TimeWindow | None = None,
) -> pl.DataFrame:
    """Calcule le rang de chaque joueur après chaque soirée.

    Le rang 1 correspond au meilleur cumul ; à cumul égal, l'ordre de
    sélection départage.

    Args:
        ledger: Instantané du registre.
        player_ids: Joueurs sélectionnés.
        window: Fenêtre temporelle optionnelle.

    Returns:
        DataFrame avec colonnes game_index, session_id, session_date et une
        colonne de rang par identifiant de joueur.
    """
    cumulative = compute_cumulative_series(ledger, player_ids, window=window)
    selected = _selected_ids(ledger, player_ids)
    if not selected or cumulative.is_empty():
        return cumulative.with_columns([pl.col(pid).cast(pl.Int64) for pid in selected])

    rank_rows: list[dict[str, int]] = []
    for row in cumulative.iter_rows(named=True):
        ordered = sorted(selected, key=lambda pid: -row[pid])
        rank_rows.append({pid: ordered.index(pid) + 1 for pid in selected})

    ranks = pl.DataFrame(rank_rows, schema={pid: pl.Int64 for pid in selected})
    return pl.concat(
        [cumulative.select("game_index", "session_id", "session_date"), ranks],
        how="horizontal",
    )
