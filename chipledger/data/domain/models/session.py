"""
Modèles de données pour les soirées et les participations.
(Data models for sessions and participations)

HOW IT WORKS:
- SessionStatus : Enum des états possibles d'une soirée
- Session : Soirée datée ; seules les soirées ``completed`` comptent
- Participation : Résultat signé d'un joueur pour une soirée

La date est conservée telle quelle (texte, date ou datetime) : sa
classification est faite par ``chipledger.analysis.dates``.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Anciens états de l'application d'origine, assimilés à "scheduled"
_LEGACY_OPEN_STATUSES = {"live", "chip_entry", "pending", "open"}


class SessionStatus(str, Enum):
    """
    États possibles d'une soirée.
    (Possible session states)
    """

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Session(BaseModel):
    """
    Soirée de jeu.
    (Game session)
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Identifiant unique de la soirée")
    date: str | dt.datetime | dt.date = Field(..., description="Date brute de la soirée")
    status: SessionStatus = Field(default=SessionStatus.COMPLETED)
    created_at: dt.datetime | None = Field(default=None)

    @field_validator("id", mode="before")
    @classmethod
    def parse_id(cls, v: Any) -> str:
        """Normalise l'identifiant en chaîne."""
        if v is None:
            raise ValueError("Session id cannot be None")
        return str(v).strip()

    @field_validator("date", mode="before")
    @classmethod
    def keep_raw_date(cls, v: Any) -> str | dt.datetime | dt.date:
        """Conserve la date brute ; ``None`` devient une chaîne vide."""
        if v is None:
            return ""
        if isinstance(v, (dt.datetime, dt.date)):
            return v
        return str(v).strip()

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v: Any) -> SessionStatus:
        """Parse l'état ; les états en cours hérités deviennent ``scheduled``."""
        if isinstance(v, SessionStatus):
            return v
        if v is None:
            return SessionStatus.COMPLETED
        v_str = str(v).strip().lower()
        if v_str in _LEGACY_OPEN_STATUSES:
            return SessionStatus.SCHEDULED
        if v_str == "canceled":
            return SessionStatus.CANCELLED
        return SessionStatus(v_str)

    @property
    def is_completed(self) -> bool:
        """Retourne True si la soirée participe aux analyses."""
        return self.status == SessionStatus.COMPLETED


class Participation(BaseModel):
    """
    Résultat d'un joueur pour une soirée.
    (One player's result within one session)
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    session_id: str = Field(..., min_length=1)
    player_id: str = Field(..., min_length=1)
    profit: float = Field(default=0.0, description="Gain (positif) ou perte (négatif)")

    @field_validator("session_id", "player_id", mode="before")
    @classmethod
    def parse_ids(cls, v: Any) -> str:
        """Normalise les identifiants en chaîne."""
        if v is None:
            raise ValueError("Identifier cannot be None")
        return str(v).strip()

    @field_validator("profit", mode="before")
    @classmethod
    def parse_profit(cls, v: Any) -> float:
        """Convertit le résultat en float (``None`` = 0)."""
        if v is None or v == "":
            return 0.0
        return float(v)
