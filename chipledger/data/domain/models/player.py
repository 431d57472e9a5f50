"""
Modèles de données pour les joueurs.
(Data models for players)

HOW IT WORKS:
- PlayerCategory : Catégorie du joueur (permanent, invité permanent, invité)
- Player : Joueur du groupe, immuable une fois créé
- La catégorie sert aux filtres de l'appelant (ex: "joueurs permanents"),
  jamais aux calculs eux-mêmes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PlayerCategory(str, Enum):
    """
    Catégories de joueurs.
    (Player categories)
    """

    PERMANENT = "permanent"
    PERMANENT_GUEST = "permanent_guest"
    GUEST = "guest"


class Player(BaseModel):
    """
    Joueur du registre.
    (Ledger player)

    L'identifiant est stable : toutes les structures dérivées sont indexées
    par ``id``, le nom n'est résolu qu'à l'affichage.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Identifiant unique et stable")
    name: str = Field(..., description="Nom d'affichage")
    category: PlayerCategory = Field(default=PlayerCategory.PERMANENT)

    @field_validator("id", mode="before")
    @classmethod
    def parse_id(cls, v: Any) -> str:
        """Normalise l'identifiant en chaîne."""
        if v is None:
            raise ValueError("Player id cannot be None")
        return str(v).strip()

    @field_validator("name", mode="before")
    @classmethod
    def sanitize_name(cls, v: Any) -> str:
        """Nettoie le nom."""
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("category", mode="before")
    @classmethod
    def parse_category(cls, v: Any) -> PlayerCategory:
        """Parse la catégorie ; les valeurs inconnues deviennent ``guest``."""
        if isinstance(v, PlayerCategory):
            return v
        if v is None:
            return PlayerCategory.PERMANENT
        try:
            return PlayerCategory(str(v).strip().lower())
        except ValueError:
            return PlayerCategory.GUEST
