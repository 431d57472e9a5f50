"""Modèles de données dérivés (dataclasses) du projet.

Ces structures sont recalculées à chaque requête : elles n'ont pas de cycle
de vie propre et ne doivent jamais servir de vérité de référence après une
modification du registre.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class GameResult:
    """Résultat d'un joueur pour une soirée terminée.

    Attributes:
        session_id: Identifiant de la soirée.
        profit: Gain ou perte.
        session_date: Date classée de la soirée (date sentinelle si illisible).
        year: Année de la soirée.
        month: Mois (0-11).
        half: Semestre (1 ou 2).
        date_valid: False si la date brute n'a pas pu être lue.
    """

    session_id: str
    profit: float
    session_date: date
    year: int
    month: int
    half: int
    date_valid: bool = True


@dataclass(frozen=True)
class PeriodRef:
    """Période de référence (année, mois 0-11, semestre 1-2)."""

    year: int
    month: int
    half: int

    @classmethod
    def from_date(cls, day: date) -> PeriodRef:
        """Construit la période contenant une date."""
        month = day.month - 1
        return cls(year=day.year, month=month, half=1 if month < 6 else 2)


@dataclass(frozen=True)
class PlayerStats:
    """Statistiques d'un joueur sur l'historique filtré.

    Les champs ``year_*``, ``half_*`` et ``month_*`` sont calculés par rapport
    à ``period`` (période courante par défaut).
    """

    player_id: str
    player_name: str
    games_played: int = 0
    total_profit: float = 0.0
    avg_profit: float = 0.0
    win_count: int = 0
    loss_count: int = 0
    win_percentage: float = 0.0
    best_win: float = 0.0
    worst_loss: float = 0.0
    total_gains: float = 0.0
    total_losses: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    last3_avg: float = 0.0
    last5_avg: float = 0.0
    last_game_profit: float = 0.0
    days_since_last_game: int = 9999
    current_streak: int = 0
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    year_profit: float = 0.0
    year_games: int = 0
    half_profit: float = 0.0
    half_games: int = 0
    month_profit: float = 0.0
    month_games: int = 0
    period: PeriodRef | None = None
    history: tuple[GameResult, ...] = ()

    @property
    def half_avg(self) -> float:
        """Moyenne par partie sur le semestre de référence."""
        if self.half_games <= 0:
            return 0.0
        return self.half_profit / self.half_games

    @property
    def year_avg(self) -> float:
        """Moyenne par partie sur l'année de référence."""
        if self.year_games <= 0:
            return 0.0
        return self.year_profit / self.year_games


@dataclass(frozen=True)
class StreakRecord:
    """Série de résultats consécutifs de même signe.

    Attributes:
        streak_type: ``"win"`` ou ``"loss"``.
        length: Nombre de soirées consécutives.
        start_index: Index chronologique de la première soirée.
        end_index: Index chronologique de la dernière soirée.
        start_session_id: Première soirée de la série.
        end_session_id: Dernière soirée de la série.
    """

    streak_type: str
    length: int
    start_index: int
    end_index: int
    start_session_id: str | None = None
    end_session_id: str | None = None


@dataclass(frozen=True)
class StreakSummary:
    """Résumé des séries d'un joueur.

    Attributes:
        current_streak: Série en cours signée (+N victoires, -N défaites).
        longest_win_streak: Plus longue série de victoires.
        longest_loss_streak: Plus longue série de défaites.
        avg_win_streak: Longueur moyenne des séries de victoires (>= 2).
        avg_loss_streak: Longueur moyenne des séries de défaites (>= 2).
        total_games: Nombre de soirées analysées.
    """

    current_streak: int
    longest_win_streak: int
    longest_loss_streak: int
    avg_win_streak: float
    avg_loss_streak: float
    total_games: int

    @property
    def current_streak_type(self) -> str:
        """Type de la série en cours (``"win"``, ``"loss"`` ou ``"none"``)."""
        if self.current_streak > 0:
            return "win"
        if self.current_streak < 0:
            return "loss"
        return "none"


@dataclass(frozen=True)
class DistributionBuckets:
    """Répartition des résultats en 4 tranches autour d'un seuil."""

    big_win: int = 0
    small_win: int = 0
    small_loss: int = 0
    big_loss: int = 0


@dataclass(frozen=True)
class HeadToHeadSide:
    """Statistiques d'un joueur restreintes aux soirées partagées."""

    player_id: str
    player_name: str
    games_played: int
    total_profit: float
    avg_profit: float
    wins: int
    losses: int
    win_percentage: float
    biggest_win: float
    biggest_loss: float
    direct_wins: int
    buckets: DistributionBuckets
    volatility: float


@dataclass(frozen=True)
class RecentFormEntry:
    """Soirée partagée récente avec le vainqueur du duel."""

    session_id: str
    session_date: date
    player1_profit: float
    player2_profit: float
    winner: str  # "player1", "player2" ou "tie"


@dataclass(frozen=True)
class ComparisonPoint:
    """Point de la courbe cumulée des soirées partagées."""

    index: int
    session_id: str
    session_date: date
    player1_cumulative: float
    player2_cumulative: float


@dataclass(frozen=True)
class HeadToHeadResult:
    """Résultat complet d'un face-à-face."""

    player1: HeadToHeadSide
    player2: HeadToHeadSide
    shared_sessions: int
    ties: int
    recent_form: tuple[RecentFormEntry, ...]
    cumulative: tuple[ComparisonPoint, ...]


@dataclass(frozen=True)
class Milestone:
    """Fait marquant candidat ou retenu.

    Attributes:
        emoji: Icône.
        category: Catégorie (battle, streak, milestone, form, drama, record, season, recap).
        title: Titre court.
        description: Description citant les chiffres déclencheurs.
        priority: Priorité (plus haut = plus important).
        player_ids: Joueurs concernés (informationnel).
        rule: Nom de la règle émettrice.
    """

    emoji: str
    category: str
    title: str
    description: str
    priority: float
    player_ids: tuple[str, ...] = ()
    rule: str = ""


@dataclass(frozen=True)
class ForecastInput:
    """Données d'un joueur pour le pronostic d'une soirée à venir."""

    player_id: str
    player_name: str
    games_played: int
    avg_profit: float
    period_avg: float
    period_games: int
    current_streak: int


@dataclass(frozen=True)
class ForecastSuggestion:
    """Résultat attendu suggéré pour un joueur."""

    player_id: str
    player_name: str
    expected_profit: int
    base_value: float = 0.0


@dataclass(frozen=True)
class ForecastComparisonEntry:
    """Pronostic d'un joueur confronté à son résultat réel.

    Attributes:
        forecast: Résultat pronostiqué.
        actual: Résultat réel de la soirée.
        accuracy_percent: Précision entre 0 et 100.
    """

    player_id: str
    player_name: str
    forecast: int
    actual: float
    accuracy_percent: float

    @property
    def difference(self) -> float:
        """Écart signé (réel - pronostic)."""
        return self.actual - self.forecast

    @property
    def gap(self) -> float:
        """Écart absolu entre pronostic et résultat."""
        return abs(self.difference)


@dataclass(frozen=True)
class ForecastComparison:
    """Bilan d'un pronostic après la soirée.

    Attributes:
        entries: Joueurs pronostiqués ayant joué, dans l'ordre du pronostic.
        overall_accuracy: Moyenne des précisions (0 sans joueur commun).
        missing_from_session: Joueurs pronostiqués absents de la soirée.
        missing_from_forecast: Joueurs présents mais non pronostiqués.
    """

    entries: tuple[ForecastComparisonEntry, ...] = ()
    overall_accuracy: float = 0.0
    missing_from_session: tuple[str, ...] = ()
    missing_from_forecast: tuple[str, ...] = ()

    @property
    def has_comparison(self) -> bool:
        return bool(self.entries)


@dataclass(frozen=True)
class Settlement:
    """Virement de règlement entre deux joueurs."""

    from_player_id: str
    to_player_id: str
    amount: float


@dataclass(frozen=True)
class ValidationIssue:
    """Anomalie de qualité des données.

    Attributes:
        code: Code stable de l'anomalie.
        severity: ``"error"`` ou ``"warning"``.
        message: Description lisible.
        session_id: Soirée concernée.
        player_id: Joueur concerné.
        amount: Montant associé (ex: déséquilibre).
    """

    code: str
    severity: str
    message: str
    session_id: str | None = None
    player_id: str | None = None
    amount: float | None = None


@dataclass
class ValidationReport:
    """Rapport de validation du registre."""

    issues: list[ValidationIssue] = field(default_factory=list)
    sessions_checked: int = 0
    participations_checked: int = 0

    @property
    def errors(self) -> list[ValidationIssue]:
        """Anomalies bloquantes."""
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        """Anomalies non bloquantes."""
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def is_valid(self) -> bool:
        """Retourne True si aucune erreur n'a été détectée."""
        return not self.errors

    def by_code(self, code: str) -> list[ValidationIssue]:
        """Anomalies d'un code donné."""
        return [i for i in self.issues if i.code == code]


@dataclass(frozen=True)
class SettlementPlan:
    """Plan de règlement d'une soirée.

    Attributes:
        transfers: Virements d'au moins le montant minimal.
        small_transfers: Virements inférieurs au montant minimal.
    """

    transfers: tuple[Settlement, ...] = ()
    small_transfers: tuple[Settlement, ...] = ()

    @property
    def total_transferred(self) -> float:
        """Somme de tous les virements."""
        return sum(t.amount for t in (*self.transfers, *self.small_transfers))
