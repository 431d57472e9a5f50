"""Configuration centralisée des seuils d'analyse.

Ce module regroupe toutes les constantes utilisées par les calculs
(statistiques, face-à-face, faits marquants, pronostics, validation) pour
assurer la cohérence dans toute l'application. Chaque fonction publique
accepte une instance alternative pour les tests ou les requêtes ponctuelles.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

# =============================================================================
# Affichage
# =============================================================================

CURRENCY_SYMBOL: str = os.environ.get("CHIPLEDGER_CURRENCY") or "₪"


# =============================================================================
# Statistiques joueur
# =============================================================================


@dataclass(frozen=True)
class StatsConfig:
    """Paramètres de l'agrégation des statistiques joueur."""

    recent_short_window: int = 3
    recent_long_window: int = 5
    # Valeur retournée par days_since_last_game quand aucune partie n'existe
    no_game_days_sentinel: int = 9999


# =============================================================================
# Face-à-face
# =============================================================================


@dataclass(frozen=True)
class HeadToHeadConfig:
    """Paramètres de la comparaison entre deux joueurs."""

    big_result_threshold: float = 150.0
    recent_form_size: int = 5


# =============================================================================
# Faits marquants
# =============================================================================


@dataclass(frozen=True)
class MilestoneConfig:
    """Seuils des règles de faits marquants et de la sélection finale."""

    # Sélection
    max_selected: int = 8
    min_selected: int = 5
    max_mentions_per_player: int = 2
    category_caps: dict[str, int] = field(default_factory=lambda: {"battle": 2, "drama": 2})
    default_category_cap: int = 1

    # Séries
    streak_threshold: int = 3

    # Classement général
    chase_max_gap: float = 200.0
    chase_max_rank: int = 5
    tight_battle_max_gap: float = 30.0

    # Objectifs ronds
    round_targets: tuple[int, ...] = (500, 1000, 1500, 2000, 2500, 3000, 4000, 5000)
    round_target_max_distance: float = 200.0

    # Nombre de parties
    session_count_targets: tuple[int, ...] = (10, 25, 50, 75, 100, 150, 200, 250, 300)

    # Course au classement annuel
    year_battle_min_games: int = 3
    year_battle_max_gap: float = 120.0

    # Retour au positif sur l'année
    recovery_min_profit: float = -120.0
    recovery_min_year_games: int = 2

    # Semestre / année / mois
    half_leader_min_games: int = 3
    half_race_max_gap: float = 100.0
    month_leader_min_games: int = 2
    month_race_max_gap: float = 100.0
    year_end_min_games: int = 5

    # Forme
    form_delta: float = 40.0
    form_min_games: int = 5
    form_min_history: int = 3

    # Drame
    swing_window: int = 4
    swing_min: float = 200.0
    underdog_min_last: float = 50.0
    upset_min_games: int = 5
    upset_min_last: float = 30.0
    leader_pressure_max_last: float = -30.0
    revenge_min_games: int = 5
    revenge_min_abs_last: float = 50.0

    # Records
    record_chase_max_gap: float = 100.0
    record_chase_min_streak: int = 2

    # Nouvelle année : nombre total de parties de l'année au plus
    new_year_max_games: int = 1

    def cap_for(self, category: str) -> int:
        """Nombre maximal de faits retenus pour une catégorie."""
        return self.category_caps.get(category, self.default_category_cap)


# =============================================================================
# Pronostics
# =============================================================================


@dataclass(frozen=True)
class ForecastConfig:
    """Paramètres de l'équilibrage des pronostics à somme nulle."""

    period_weight: float = 0.7
    lifetime_weight: float = 0.3
    min_period_games: int = 2
    amplification: float = 2.5
    floor_before_balance: float = 30.0
    floor_after_balance: float = 10.0
    # (seuil, multiplicateur) évalués dans l'ordre ; seuil positif = série de victoires
    hot_multipliers: tuple[tuple[int, float], ...] = ((4, 1.5), (3, 1.35), (2, 1.2))
    cold_multipliers: tuple[tuple[int, float], ...] = ((-4, 0.5), (-3, 0.65), (-2, 0.8))
    # Précision d'un pronostic : -1 % par tranche de `accuracy_step` d'écart
    accuracy_step: float = 5.0


# =============================================================================
# Validation
# =============================================================================


@dataclass(frozen=True)
class ValidationConfig:
    """Tolérances de la validation du registre."""

    zero_sum_tolerance: float = 1.0
    # Écart toléré entre profit stocké et somme de l'historique
    profit_tolerance: float = 1.0
    settlement_min_transfer: float = 5.0


STATS_CONFIG = StatsConfig()
HEAD_TO_HEAD_CONFIG = HeadToHeadConfig()
MILESTONE_CONFIG = MilestoneConfig()
FORECAST_CONFIG = ForecastConfig()
VALIDATION_CONFIG = ValidationConfig()
