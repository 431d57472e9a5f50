"""Module de comparaison directe entre deux joueurs.

Toutes les statistiques sont restreintes aux soirées partagées, c'est-à-dire
aux soirées terminées où les deux joueurs ont un résultat :

- Totaux, moyennes, victoires/défaites de chaque joueur
- Duels directs (meilleur résultat de la soirée entre les deux)
- Répartition des résultats en 4 tranches autour d'un seuil
- Volatilité (écart-type de population)
- Forme récente et courbe cumulée pour les graphiques
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import polars as pl

from chipledger.analysis.stats import build_history_frame
from chipledger.config import HEAD_TO_HEAD_CONFIG, HeadToHeadConfig
from chipledger.data.domain.models import LedgerSnapshot, TimeWindow
from chipledger.models import (
    ComparisonPoint,
    DistributionBuckets,
    HeadToHeadResult,
    HeadToHeadSide,
    RecentFormEntry,
)

logger = logging.getLogger(__name__)

WINNER_PLAYER1 = "player1"
WINNER_PLAYER2 = "player2"
WINNER_TIE = "tie"


def find_shared_sessions(frame: pl.DataFrame, player1_id: str, player2_id: str) -> pl.DataFrame:
    """Soirées où les deux joueurs ont participé.

    Args:
        frame: DataFrame d'historique (voir ``build_history_frame``).
        player1_id: Premier joueur.
        player2_id: Second joueur.

    Returns:
        DataFrame (session_id, session_date, session_rank, profit_1, profit_2)
        trié chronologiquement.
    """
    left = frame.filter(pl.col("player_id") == player1_id).select(
        "session_id",
        "session_date",
        "session_rank",
        pl.col("profit").alias("profit_1"),
    )
    right = frame.filter(pl.col("player_id") == player2_id).select(
        "session_id",
        pl.col("profit").alias("profit_2"),
    )
    return left.join(right, on="session_id", how="inner").sort("session_rank")


def classify_buckets(profits: Sequence[float], threshold: float) -> DistributionBuckets:
    """Répartit des résultats en grosses/petites victoires et défaites.

    Un résultat nul n'appartient à aucune tranche.
    """
    big_win = sum(1 for p in profits if p > threshold)
    small_win = sum(1 for p in profits if 0 < p <= threshold)
    small_loss = sum(1 for p in profits if -threshold <= p < 0)
    big_loss = sum(1 for p in profits if p < -threshold)
    return DistributionBuckets(
        big_win=big_win,
        small_win=small_win,
        small_loss=small_loss,
        big_loss=big_loss,
    )


def compute_volatility(profits: Sequence[float]) -> float:
    """Écart-type de population (0 si aucune soirée)."""
    if not profits:
        return 0.0
    std = pl.Series("profit", list(profits), dtype=pl.Float64).std(ddof=0)
    return float(std) if std is not None else 0.0


def _build_side(
    player_id: str,
    player_name: str,
    profits: list[float],
    direct_wins: int,
    threshold: float,
) -> HeadToHeadSide:
    games = len(profits)
    total = sum(profits)
    wins = sum(1 for p in profits if p > 0)
    return HeadToHeadSide(
        player_id=player_id,
        player_name=player_name,
        games_played=games,
        total_profit=total,
        avg_profit=total / games if games else 0.0,
        wins=wins,
        losses=sum(1 for p in profits if p < 0),
        win_percentage=wins / games * 100 if games else 0.0,
        biggest_win=max([0.0, *profits]),
        biggest_loss=min([0.0, *profits]),
        direct_wins=direct_wins,
        buckets=classify_buckets(profits, threshold),
        volatility=compute_volatility(profits),
    )


def _winner(profit_1: float, profit_2: float) -> str:
    if profit_1 > profit_2:
        return WINNER_PLAYER1
    if profit_2 > profit_1:
        return WINNER_PLAYER2
    return WINNER_TIE


def compute_head_to_head(
    ledger: LedgerSnapshot,
    player1_id: str | None,
    player2_id: str | None,
    *,
    window: TimeWindow | None = None,
    big_result_threshold: float | None = None,
    config: HeadToHeadConfig = HEAD_TO_HEAD_CONFIG,
) -> HeadToHeadResult | None:
    """Compare deux joueurs sur leurs soirées partagées.

    Args:
        ledger: Instantané du registre.
        player1_id: Premier joueur (peut être vide).
        player2_id: Second joueur (peut être vide).
        window: Fenêtre temporelle optionnelle.
        big_result_threshold: Seuil des grosses victoires/défaites
            (défaut : ``config.big_result_threshold``).
        config: Paramètres de la comparaison.

    Returns:
        HeadToHeadResult, ou None si un identifiant est absent ou inconnu,
        si les deux identifiants sont identiques ou s'il n'y a aucune soirée
        partagée.
    """
    if not player1_id or not player2_id or player1_id == player2_id:
        return None
    if player1_id not in ledger.player_by_id or player2_id not in ledger.player_by_id:
        logger.debug("Face-à-face ignoré : joueur inconnu (%s, %s)", player1_id, player2_id)
        return None

    threshold = (
        config.big_result_threshold if big_result_threshold is None else big_result_threshold
    )
    shared = find_shared_sessions(build_history_frame(ledger, window=window), player1_id, player2_id)
    if shared.is_empty():
        return None

    rows = list(shared.iter_rows(named=True))
    profits_1 = [float(r["profit_1"]) for r in rows]
    profits_2 = [float(r["profit_2"]) for r in rows]
    winners = [_winner(p1, p2) for p1, p2 in zip(profits_1, profits_2)]

    recent_form = tuple(
        RecentFormEntry(
            session_id=r["session_id"],
            session_date=r["session_date"],
            player1_profit=float(r["profit_1"]),
            player2_profit=float(r["profit_2"]),
            winner=w,
        )
        for r, w in list(zip(rows, winners))[-config.recent_form_size :]
    )

    cumulative: list[ComparisonPoint] = []
    running_1 = running_2 = 0.0
    for index, row in enumerate(rows, start=1):
        running_1 += float(row["profit_1"])
        running_2 += float(row["profit_2"])
        cumulative.append(
            ComparisonPoint(
                index=index,
                session_id=row["session_id"],
                session_date=row["session_date"],
                player1_cumulative=running_1,
                player2_cumulative=running_2,
            )
        )

    return HeadToHeadResult(
        player1=_build_side(
            player1_id,
            ledger.player_name(player1_id),
            profits_1,
            winners.count(WINNER_PLAYER1),
            threshold,
        ),
        player2=_build_side(
            player2_id,
            ledger.player_name(player2_id),
            profits_2,
            winners.count(WINNER_PLAYER2),
            threshold,
        ),
        shared_sessions=len(rows),
        ties=winners.count(WINNER_TIE),
        recent_form=recent_form,
        cumulative=tuple(cumulative),
    )
