"""
Instantané du registre et paramètres de requête.
(Ledger snapshot and query parameters)

HOW IT WORKS:
- LedgerSnapshot : Collections en mémoire fournies par le stockage
- TimeWindow : Fenêtre de dates inclusive appliquée aux soirées
- QueryParams : État de l'appelant (joueurs sélectionnés, fenêtre, "maintenant")
  passé explicitement à chaque requête, jamais stocké globalement.
"""

from __future__ import annotations

import datetime as dt
from functools import cached_property

from pydantic import BaseModel, ConfigDict, Field, model_validator

from chipledger.data.domain.models.player import Player, PlayerCategory
from chipledger.data.domain.models.session import Participation, Session


class LedgerSnapshot(BaseModel):
    """
    Instantané immuable du registre.
    (Immutable ledger snapshot)

    Aucune écriture n'est faite par le cœur d'analyse : toute modification
    du registre impose de reconstruire un instantané (et d'invalider les
    caches de l'appelant).
    """

    model_config = ConfigDict(frozen=True)

    players: tuple[Player, ...] = Field(default_factory=tuple)
    sessions: tuple[Session, ...] = Field(default_factory=tuple)
    participations: tuple[Participation, ...] = Field(default_factory=tuple)

    @cached_property
    def player_by_id(self) -> dict[str, Player]:
        """Index des joueurs par identifiant."""
        return {p.id: p for p in self.players}

    @cached_property
    def session_by_id(self) -> dict[str, Session]:
        """Index des soirées par identifiant."""
        return {s.id: s for s in self.sessions}

    def completed_sessions(self) -> list[Session]:
        """Soirées terminées, dans l'ordre d'origine."""
        return [s for s in self.sessions if s.is_completed]

    def participations_for(self, session_id: str) -> list[Participation]:
        """Participations d'une soirée donnée."""
        return [p for p in self.participations if p.session_id == session_id]

    def player_ids(self, category: PlayerCategory | None = None) -> list[str]:
        """Identifiants des joueurs, éventuellement filtrés par catégorie."""
        return [p.id for p in self.players if category is None or p.category == category]

    def player_name(self, player_id: str) -> str:
        """Nom d'affichage d'un joueur (``"Inconnu"`` si absent)."""
        player = self.player_by_id.get(player_id)
        return player.name if player is not None else "Inconnu"


class TimeWindow(BaseModel):
    """
    Fenêtre temporelle inclusive.
    (Inclusive time window)
    """

    model_config = ConfigDict(frozen=True)

    start: dt.date | None = None
    end: dt.date | None = None

    @model_validator(mode="after")
    def check_bounds(self) -> TimeWindow:
        """Vérifie que ``start <= end``."""
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError("TimeWindow start must be before end")
        return self

    def contains(self, day: dt.date) -> bool:
        """Indique si une date appartient à la fenêtre."""
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True

    @property
    def is_unbounded(self) -> bool:
        """Retourne True si aucune borne n'est définie."""
        return self.start is None and self.end is None


class QueryParams(BaseModel):
    """
    Paramètres explicites d'une requête d'analyse.
    (Explicit analytics query parameters)

    Attributes:
        player_ids: Joueurs sélectionnés (None = tous).
        window: Fenêtre temporelle appliquée aux soirées (None = tout l'historique).
        now: Instant de référence (None = maintenant).
        period_date: Date de référence des périodes année/semestre/mois
            (None = ``now``), pour les requêtes historiques.
    """

    model_config = ConfigDict(frozen=True)

    player_ids: tuple[str, ...] | None = None
    window: TimeWindow | None = None
    now: dt.datetime | None = None
    period_date: dt.date | None = None

    def resolved_now(self) -> dt.datetime:
        """Instant de référence effectif."""
        return self.now if self.now is not None else dt.datetime.now()

    def resolved_period_date(self) -> dt.date:
        """Date de référence effective des périodes."""
        if self.period_date is not None:
            return self.period_date
        return self.resolved_now().date()

    def cache_key(self) -> tuple:
        """Clé de mémoïsation (joueurs, fenêtre, date de référence)."""
        window = self.window or TimeWindow()
        players = tuple(sorted(self.player_ids)) if self.player_ids is not None else None
        return (players, window.start, window.end, self.resolved_period_date())
