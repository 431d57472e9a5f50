"""Calcul des statistiques agrégées par joueur.

Le registre est d'abord aplati en un DataFrame Polars d'historique (une
ligne par participation à une soirée terminée), puis chaque joueur reçoit
ses statistiques à vie et ses statistiques par période (année, semestre,
mois) par rapport à une période de référence.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime

import pandas as pd
import polars as pl

from chipledger.analysis.dates import DateBucket, bucket_in_period, classify_date
from chipledger.analysis.win_streaks import compute_best_streaks, compute_current_streak
from chipledger.config import STATS_CONFIG, StatsConfig
from chipledger.data.domain.models import LedgerSnapshot, Player, QueryParams, Session, TimeWindow
from chipledger.models import GameResult, PeriodRef, PlayerStats

logger = logging.getLogger(__name__)

# Type alias pour compatibilité DataFrame
DataFrameType = pd.DataFrame | pl.DataFrame


HISTORY_SCHEMA: dict[str, pl.DataType] = {
    "session_id": pl.Utf8,
    "player_id": pl.Utf8,
    "profit": pl.Float64,
    "session_date": pl.Date,
    "year": pl.Int32,
    "month": pl.Int32,
    "half": pl.Int32,
    "date_valid": pl.Boolean,
    "session_rank": pl.Int64,
}


def _to_polars(df: DataFrameType) -> pl.DataFrame:
    """Convertit un DataFrame Pandas en Polars si nécessaire."""
    if isinstance(df, pl.DataFrame):
        return df
    # Pandas DataFrame
    return pl.from_pandas(df)


def empty_history_frame() -> pl.DataFrame:
    """DataFrame d'historique vide avec le bon schéma."""
    return pl.DataFrame(schema=HISTORY_SCHEMA)


def order_sessions(sessions: Iterable[Session]) -> list[tuple[Session, DateBucket]]:
    """Trie des soirées chronologiquement.

    L'ordre est : date classée, puis ``created_at``, puis ordre d'origine.
    Les dates illisibles (sentinelle) passent donc en premier.

    Returns:
        Liste de couples (soirée, date classée), de la plus ancienne à la plus récente.
    """
    classified = [(s, classify_date(s.date)) for s in sessions]
    indexed = list(enumerate(classified))
    indexed.sort(key=lambda item: (item[1][1].day, _created_key(item[1][0]), item[0]))
    return [pair for _, pair in indexed]


def _created_key(session: Session) -> float:
    if session.created_at is None:
        return float("-inf")
    return session.created_at.timestamp()


def completed_sessions_in_window(
    ledger: LedgerSnapshot,
    window: TimeWindow | None = None,
) -> list[tuple[Session, DateBucket]]:
    """Soirées terminées triées chronologiquement, filtrées par fenêtre.

    Avec une fenêtre bornée, les soirées à date illisible sont exclues.
    """
    ordered = order_sessions(ledger.completed_sessions())
    if window is not None and not window.is_unbounded:
        ordered = [(s, b) for s, b in ordered if b.valid and window.contains(b.day)]
    return ordered


def build_session_timeline(
    ledger: LedgerSnapshot,
    *,
    window: TimeWindow | None = None,
) -> pl.DataFrame:
    """Chronologie des soirées terminées (session_id, session_date, session_rank)."""
    ordered = completed_sessions_in_window(ledger, window)
    return pl.DataFrame(
        {
            "session_id": [s.id for s, _ in ordered],
            "session_date": [b.day for _, b in ordered],
            "session_rank": list(range(len(ordered))),
        },
        schema={"session_id": pl.Utf8, "session_date": pl.Date, "session_rank": pl.Int64},
    )


def build_history_frame(
    ledger: LedgerSnapshot,
    *,
    window: TimeWindow | None = None,
) -> pl.DataFrame:
    """Aplatit le registre en historique de participations.

    Seules les soirées terminées sont retenues. Une participation pointant
    vers une soirée ou un joueur inexistant est ignorée (anomalie remontée
    par ``chipledger.analysis.validation``), tout comme un doublon
    (soirée, joueur). Avec une fenêtre temporelle, les soirées à date
    illisible sont exclues.

    Args:
        ledger: Instantané du registre.
        window: Fenêtre temporelle optionnelle.

    Returns:
        DataFrame Polars trié chronologiquement (colonne ``session_rank``).
    """
    ordered = completed_sessions_in_window(ledger, window)

    ranks = {s.id: rank for rank, (s, _) in enumerate(ordered)}
    buckets = {s.id: b for s, b in ordered}

    rows: list[dict] = []
    seen: set[tuple[str, str]] = set()
    for part in ledger.participations:
        if part.session_id not in ledger.session_by_id:
            logger.debug("Participation ignorée : soirée inconnue %s", part.session_id)
            continue
        if part.player_id not in ledger.player_by_id:
            logger.debug("Participation ignorée : joueur inconnu %s", part.player_id)
            continue
        rank = ranks.get(part.session_id)
        if rank is None:
            continue
        key = (part.session_id, part.player_id)
        if key in seen:
            logger.debug("Participation en double ignorée : %s / %s", *key)
            continue
        seen.add(key)
        bucket = buckets[part.session_id]
        rows.append(
            {
                "session_id": part.session_id,
                "player_id": part.player_id,
                "profit": float(part.profit),
                "session_date": bucket.day,
                "year": bucket.year,
                "month": bucket.month,
                "half": bucket.half,
                "date_valid": bucket.valid,
                "session_rank": rank,
            }
        )

    if not rows:
        return empty_history_frame()
    return pl.DataFrame(rows, schema=HISTORY_SCHEMA).sort(["session_rank", "player_id"])


def player_history(frame: DataFrameType, player_id: str) -> list[GameResult]:
    """Historique d'un joueur, de la soirée la plus récente à la plus ancienne.

    Args:
        frame: DataFrame d'historique (Polars ou Pandas).
        player_id: Identifiant du joueur.

    Returns:
        Liste de GameResult.
    """
    df = _to_polars(frame)
    if df.is_empty():
        return []
    rows = (
        df.filter(pl.col("player_id") == player_id)
        .sort("session_rank", descending=True)
        .iter_rows(named=True)
    )
    return [
        GameResult(
            session_id=str(row["session_id"]),
            profit=float(row["profit"]),
            session_date=row["session_date"],
            year=int(row["year"]),
            month=int(row["month"]),
            half=int(row["half"]),
            date_valid=bool(row["date_valid"]),
        )
        for row in rows
    ]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _bucket_of(game: GameResult) -> DateBucket:
    return DateBucket(
        year=game.year,
        month=game.month,
        half=game.half,
        day=game.session_date,
        valid=game.date_valid,
    )


def compute_period_totals(
    history: Sequence[GameResult],
    period: PeriodRef,
    scope: str,
) -> tuple[float, int]:
    """Somme et nombre de soirées d'un historique sur une période.

    Args:
        history: Historique du joueur.
        period: Période de référence.
        scope: ``"year"``, ``"half"`` ou ``"month"``.

    Returns:
        Tuple (profit, nombre de soirées).
    """
    games = [g for g in history if bucket_in_period(_bucket_of(g), period, scope)]
    return sum(g.profit for g in games), len(games)


def compute_days_since(history: Sequence[GameResult], now: datetime | date, sentinel: int) -> int:
    """Nombre de jours entre la dernière soirée datée et ``now``."""
    today = now.date() if isinstance(now, datetime) else now
    for game in history:
        if game.date_valid:
            return max(0, (today - game.session_date).days)
    return sentinel


def compute_player_stats(
    player: Player,
    history: Sequence[GameResult],
    *,
    now: datetime | date,
    period: PeriodRef | None = None,
    config: StatsConfig = STATS_CONFIG,
) -> PlayerStats:
    """Calcule les statistiques d'un joueur à partir de son historique.

    Args:
        player: Joueur.
        history: Historique trié de la soirée la plus récente à la plus ancienne.
        now: Instant de référence (jours depuis la dernière soirée).
        period: Période de référence des champs ``year_*``/``half_*``/``month_*``
            (défaut : période contenant ``now``).
        config: Paramètres d'agrégation.

    Returns:
        PlayerStats ; un historique vide donne des statistiques nulles.
    """
    if period is None:
        period = PeriodRef.from_date(now.date() if isinstance(now, datetime) else now)

    profits = [g.profit for g in history]
    games_played = len(profits)
    total_profit = sum(profits)
    wins = [p for p in profits if p > 0]
    losses = [p for p in profits if p < 0]
    total_gains = sum(wins)
    total_losses = abs(sum(losses))

    longest_win, longest_loss = compute_best_streaks(profits)
    year_profit, year_games = compute_period_totals(history, period, "year")
    half_profit, half_games = compute_period_totals(history, period, "half")
    month_profit, month_games = compute_period_totals(history, period, "month")

    return PlayerStats(
        player_id=player.id,
        player_name=player.name,
        games_played=games_played,
        total_profit=total_profit,
        avg_profit=total_profit / games_played if games_played else 0.0,
        win_count=len(wins),
        loss_count=len(losses),
        win_percentage=len(wins) / games_played * 100 if games_played else 0.0,
        best_win=max([0.0, *profits]),
        worst_loss=min([0.0, *profits]),
        total_gains=total_gains,
        total_losses=total_losses,
        avg_win=total_gains / len(wins) if wins else 0.0,
        avg_loss=total_losses / len(losses) if losses else 0.0,
        last3_avg=_mean(profits[: config.recent_short_window]),
        last5_avg=_mean(profits[: config.recent_long_window]),
        last_game_profit=profits[0] if profits else 0.0,
        days_since_last_game=compute_days_since(history, now, config.no_game_days_sentinel),
        current_streak=compute_current_streak(profits),
        longest_win_streak=longest_win,
        longest_loss_streak=longest_loss,
        year_profit=year_profit,
        year_games=year_games,
        half_profit=half_profit,
        half_games=half_games,
        month_profit=month_profit,
        month_games=month_games,
        period=period,
        history=tuple(history),
    )


def compute_all_player_stats(
    ledger: LedgerSnapshot,
    params: QueryParams | None = None,
    *,
    include_inactive: bool = False,
    config: StatsConfig = STATS_CONFIG,
) -> list[PlayerStats]:
    """Calcule les statistiques de tous les joueurs ayant joué.

    Args:
        ledger: Instantané du registre.
        params: Joueurs sélectionnés, fenêtre temporelle et date de référence.
        include_inactive: Garde aussi les joueurs sans aucune soirée (statistiques
            nulles), par exemple pour le roster d'un pronostic.
        config: Paramètres d'agrégation.

    Returns:
        Liste de PlayerStats (joueurs avec au moins une soirée, sauf
        ``include_inactive``), triée par profit total décroissant puis par nom
        et identifiant.
    """
    params = params or QueryParams()
    frame = build_history_frame(ledger, window=params.window)
    now = params.resolved_now()
    period = PeriodRef.from_date(params.resolved_period_date())

    selected = set(params.player_ids) if params.player_ids is not None else None
    results: list[PlayerStats] = []
    for player in ledger.players:
        if selected is not None and player.id not in selected:
            continue
        history = player_history(frame, player.id)
        if not history and not include_inactive:
            continue
        results.append(
            compute_player_stats(player, history, now=now, period=period, config=config)
        )

    results.sort(key=lambda s: (-s.total_profit, s.player_name, s.player_id))
    return results


def summarize_periods_polars(frame: DataFrameType, period: PeriodRef) -> pl.DataFrame:
    """Agrège les profits par joueur et par période avec Polars.

    Args:
        frame: DataFrame d'historique.
        period: Période de référence.

    Returns:
        DataFrame avec colonnes player_id, total_profit, games,
        year_profit, year_games, half_profit, half_games, month_profit, month_games.
    """
    df = _to_polars(frame)
    in_year = pl.col("date_valid") & (pl.col("year") == period.year)
    in_half = in_year & (pl.col("half") == period.half)
    in_month = in_year & (pl.col("month") == period.month)

    if df.is_empty():
        return pl.DataFrame(
            schema={
                "player_id": pl.Utf8,
                "total_profit": pl.Float64,
                "games": pl.UInt32,
                "year_profit": pl.Float64,
                "year_games": pl.UInt32,
                "half_profit": pl.Float64,
                "half_games": pl.UInt32,
                "month_profit": pl.Float64,
                "month_games": pl.UInt32,
            }
        )

    return (
        df.group_by("player_id")
        .agg(
            pl.col("profit").sum().alias("total_profit"),
            pl.len().alias("games"),
            pl.col("profit").filter(in_year).sum().alias("year_profit"),
            in_year.sum().alias("year_games"),
            pl.col("profit").filter(in_half).sum().alias("half_profit"),
            in_half.sum().alias("half_games"),
            pl.col("profit").filter(in_month).sum().alias("month_profit"),
            in_month.sum().alias("month_games"),
        )
        .sort("player_id")
    )


def compute_period_table(stats: Sequence[PlayerStats], scope: str) -> list[PlayerStats]:
    """Classement d'une période (joueurs ayant joué sur la période).

    Args:
        stats: Statistiques annotées avec la période de référence.
        scope: ``"year"``, ``"half"`` ou ``"month"``.

    Returns:
        Joueurs triés par profit décroissant sur la période.

    Raises:
        ValueError: Si ``scope`` est inconnu.
    """
    fields = {
        "year": ("year_profit", "year_games"),
        "half": ("half_profit", "half_games"),
        "month": ("month_profit", "month_games"),
    }
    if scope not in fields:
        raise ValueError(f"Période inconnue : {scope!r}")
    profit_field, games_field = fields[scope]
    ranked = [s for s in stats if getattr(s, games_field) > 0]
    ranked.sort(key=lambda s: (-getattr(s, profit_field), s.player_name, s.player_id))
    return ranked
