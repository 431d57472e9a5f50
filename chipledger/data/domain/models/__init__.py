"""
Modèles de domaine avec validation Pydantic v2.
(Domain models with Pydantic v2 validation)
"""

from chipledger.data.domain.models.ledger import LedgerSnapshot, QueryParams, TimeWindow
from chipledger.data.domain.models.player import Player, PlayerCategory
from chipledger.data.domain.models.session import Participation, Session, SessionStatus

__all__ = [
    "Player",
    "PlayerCategory",
    "Session",
    "SessionStatus",
    "Participation",
    "LedgerSnapshot",
    "TimeWindow",
    "QueryParams",
]
