"""Pronostics à somme nulle pour une soirée à venir.

Pour chaque joueur retenu, une valeur de base (moyenne du semestre et
moyenne à vie) est ajustée selon la série en cours, amplifiée, puis
l'ensemble est recentré pour que la somme des pronostics arrondis soit
exactement nulle. Après la soirée, le pronostic peut être confronté aux
résultats réels.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from chipledger.config import FORECAST_CONFIG, ForecastConfig
from chipledger.data.domain.models import Participation
from chipledger.models import (
    ForecastComparison,
    ForecastComparisonEntry,
    ForecastInput,
    ForecastSuggestion,
    PlayerStats,
)

logger = logging.getLogger(__name__)


def forecast_inputs_from_stats(stats: Sequence[PlayerStats]) -> list[ForecastInput]:
    """Construit les entrées du pronostic (période = semestre de référence)."""
    return [
        ForecastInput(
            player_id=s.player_id,
            player_name=s.player_name,
            games_played=s.games_played,
            avg_profit=s.avg_profit,
            period_avg=s.half_avg,
            period_games=s.half_games,
            current_streak=s.current_streak,
        )
        for s in stats
    ]


def compute_base_suggestion(item: ForecastInput, config: ForecastConfig = FORECAST_CONFIG) -> float:
    """Valeur de base : 70% semestre + 30% vie si assez de parties sur la période."""
    if item.games_played <= 0:
        return 0.0
    if item.period_games >= config.min_period_games:
        return config.period_weight * item.period_avg + config.lifetime_weight * item.avg_profit
    return item.avg_profit


def streak_multiplier(streak: int, config: ForecastConfig = FORECAST_CONFIG) -> float:
    """Multiplicateur lié à la série en cours (1.0 hors série)."""
    for threshold, factor in config.hot_multipliers:
        if streak >= threshold:
            return factor
    for threshold, factor in config.cold_multipliers:
        if streak <= threshold:
            return factor
    return 1.0


def apply_floor(value: float, floor: float) -> float:
    """Relève une valeur non nulle à ``±floor`` si son amplitude est inférieure."""
    if floor < 0:
        raise ValueError(f"floor doit être positif ou nul : {floor}")
    if 0 < value < floor:
        return floor
    if -floor < value < 0:
        return -floor
    return value


def rebalance_to_zero_sum(values: Sequence[float], floor: float = 0.0) -> list[float]:
    """Soustrait la moyenne à chaque valeur puis réapplique le plancher.

    Example:
        >>> rebalance_to_zero_sum([40, -10, 15, -30, 5])
        [36.0, -14.0, 11.0, -34.0, 1.0]
    """
    if not values:
        return []
    mean = sum(values) / len(values)
    return [apply_floor(float(v) - mean, floor) for v in values]


def correct_residual(values: Sequence[int]) -> list[int]:
    """Reporte le résidu de la somme sur la valeur de plus petite amplitude.

    À amplitude égale, le premier joueur dans l'ordre reçoit la correction.
    """
    result = list(values)
    residual = sum(result)
    if residual == 0 or not result:
        return result
    target = min(range(len(result)), key=lambda i: abs(result[i]))
    result[target] -= residual
    return result


def compute_forecast_suggestions(
    roster: Sequence[ForecastInput],
    *,
    config: ForecastConfig = FORECAST_CONFIG,
) -> list[ForecastSuggestion]:
    """Calcule les pronostics d'une soirée, de somme exactement nulle.

    Args:
        roster: Joueurs retenus pour la soirée.
        config: Paramètres de l'équilibrage.

    Returns:
        Un pronostic par joueur, dans l'ordre du roster ; liste vide si le
        roster est vide.
    """
    if not roster:
        return []

    bases = [compute_base_suggestion(item, config) for item in roster]
    shaped = [
        apply_floor(
            base * streak_multiplier(item.current_streak, config) * config.amplification,
            config.floor_before_balance,
        )
        for base, item in zip(bases, roster)
    ]
    balanced = rebalance_to_zero_sum(shaped, config.floor_after_balance)
    rounded = correct_residual([int(round(v)) for v in balanced])

    logger.debug("Pronostics : bases=%s, arrondis=%s", bases, rounded)
    return [
        ForecastSuggestion(
            player_id=item.player_id,
            player_name=item.player_name,
            expected_profit=value,
            base_value=base,
        )
        for item, value, base in zip(roster, rounded, bases)
    ]


def compare_forecast(
    suggestions: Sequence[ForecastSuggestion],
    participations: Sequence[Participation],
    *,
    config: ForecastConfig = FORECAST_CONFIG,
) -> ForecastComparison:
    """Confronte un pronostic aux résultats réels d'une soirée.

    La précision d'un joueur vaut ``max(0, 100 - écart / accuracy_step)`` ;
    la précision globale est la moyenne sur les joueurs pronostiqués ayant
    joué. Les joueurs sont rapprochés par identifiant.

    Args:
        suggestions: Pronostic enregistré avant la soirée.
        participations: Résultats de la soirée (la première participation
            d'un joueur fait foi).
        config: Paramètres du pronostic.

    Returns:
        ForecastComparison ; sans joueur commun, ``entries`` est vide et la
        précision globale vaut 0.
    """
    actual: dict[str, float] = {}
    for part in participations:
        actual.setdefault(part.player_id, part.profit)

    forecast_ids = {s.player_id for s in suggestions}
    entries = []
    for s in suggestions:
        if s.player_id not in actual:
            continue
        gap = abs(s.expected_profit - actual[s.player_id])
        entries.append(
            ForecastComparisonEntry(
                player_id=s.player_id,
                player_name=s.player_name,
                forecast=s.expected_profit,
                actual=actual[s.player_id],
                accuracy_percent=max(0.0, 100.0 - gap / config.accuracy_step),
            )
        )

    overall = sum(e.accuracy_percent for e in entries) / len(entries) if entries else 0.0
    comparison = ForecastComparison(
        entries=tuple(entries),
        overall_accuracy=overall,
        missing_from_session=tuple(s.player_id for s in suggestions if s.player_id not in actual),
        missing_from_forecast=tuple(pid for pid in actual if pid not in forecast_ids),
    )
    logger.debug(
        "Bilan du pronostic : %d joueur(s), précision %.1f%%", len(entries), overall
    )
    return comparison
