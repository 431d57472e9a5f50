"""Fixtures communes pour les tests.

Ce fichier contient les fixtures partagées : un petit registre de soirées
aux résultats connus et des constructeurs de registres et de statistiques.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest

from chipledger.data.domain.models import LedgerSnapshot, Participation, Player, Session
from chipledger.models import PeriodRef, PlayerStats

# =============================================================================
# Constructeurs
# =============================================================================


def make_ledger(
    players: list[tuple[str, str]],
    sessions: list[tuple[str, Any, dict[str, float]] | tuple[str, Any, dict[str, float], str]],
) -> LedgerSnapshot:
    """Construit un registre à partir de tuples simples.

    Args:
        players: Liste de (id, nom).
        sessions: Liste de (id, date, {player_id: profit}[, status]).
    """
    session_models = []
    participations = []
    for entry in sessions:
        sid, raw_date, results = entry[0], entry[1], entry[2]
        status = entry[3] if len(entry) > 3 else "completed"
        session_models.append(Session(id=sid, date=raw_date, status=status))
        for pid, profit in results.items():
            participations.append(Participation(session_id=sid, player_id=pid, profit=profit))
    return LedgerSnapshot(
        players=tuple(Player(id=pid, name=name) for pid, name in players),
        sessions=tuple(session_models),
        participations=tuple(participations),
    )


def make_stats(player_id: str, name: str | None = None, **kwargs: Any) -> PlayerStats:
    """Construit un PlayerStats minimal (games_played = 1 par défaut)."""
    kwargs.setdefault("games_played", 1)
    kwargs.setdefault("period", PeriodRef(year=2025, month=6, half=2))
    return PlayerStats(player_id=player_id, player_name=name or player_id.capitalize(), **kwargs)


# =============================================================================
# Fixtures registre
# =============================================================================

PLAYERS = [("p1", "Alice"), ("p2", "Bob"), ("p3", "Chloé"), ("p4", "David")]


@pytest.fixture
def reference_now() -> datetime:
    """Instant de référence des tests (juillet 2025, semestre 2)."""
    return datetime(2025, 7, 20, 12, 0, 0)


@pytest.fixture
def small_ledger() -> LedgerSnapshot:
    """Registre de 6 soirées dans des formats de date variés.

    Ordre chronologique : g5 (date illisible), g1, g2, g3, g4.
    g6 est planifiée et n'entre dans aucun calcul.
    """
    return make_ledger(
        PLAYERS,
        [
            ("g1", "05/01/2025", {"p1": 100, "p2": -40, "p3": -60}),
            ("g2", "2025-02-10T20:00:00.000Z", {"p1": 50, "p2": 30, "p3": -80}),
            ("g3", "15.03.25", {"p1": -20, "p2": 20}),
            ("g4", "2025-07-04", {"p1": 30, "p2": -50, "p3": 20}),
            ("g5", "pas une date", {"p4": 10, "p3": -10}),
            ("g6", "2025-08-01", {"p1": 500, "p2": -500}, "scheduled"),
        ],
    )


@pytest.fixture
def empty_ledger() -> LedgerSnapshot:
    """Registre sans aucune soirée."""
    return make_ledger(PLAYERS, [])


@pytest.fixture
def ledger_factory():
    """Constructeur de registres (voir ``make_ledger``)."""
    return make_ledger


@pytest.fixture
def stats_factory():
    """Constructeur de PlayerStats (voir ``make_stats``)."""
    return make_stats
