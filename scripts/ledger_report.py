#!/usr/bin/env python3
"""Script de rapport d'avant-soirée.

Ce script :
1. Charge le registre depuis la base DuckDB
2. Affiche le classement général et celui du semestre
3. Affiche les faits marquants retenus
4. Optionnellement : pronostics à somme nulle, face-à-face, règlement

Usage:
    # Rapport complet sur la base par défaut
    python scripts/ledger_report.py

    # Rapport à une date donnée, pronostics pour trois joueurs
    python scripts/ledger_report.py --now 2025-12-20 --forecast --players p1 p2 p3

    # Face-à-face entre deux joueurs
    python scripts/ledger_report.py --head-to-head p1 p2

    # Virements de règlement d'une soirée
    python scripts/ledger_report.py --settle g42
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

# Ajouter le répertoire parent au path pour les imports
REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT))

import polars as pl

from chipledger.analysis.forecast import compute_forecast_suggestions, forecast_inputs_from_stats
from chipledger.analysis.head_to_head import compute_head_to_head
from chipledger.analysis.milestones import generate_milestones
from chipledger.analysis.settlement import settle_session
from chipledger.analysis.stats import compute_all_player_stats, compute_period_table
from chipledger.data.domain.models import LedgerSnapshot, QueryParams
from chipledger.data.repositories import DuckDBLedgerRepository
from chipledger.models import PlayerStats
from chipledger.utils.formatting import format_amount, format_profit
from chipledger.utils.paths import get_ledger_db_path

# Configuration du logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def stats_table(stats: list[PlayerStats]) -> pl.DataFrame:
    """Tableau Polars du classement."""
    return pl.DataFrame(
        {
            "joueur": [s.player_name for s in stats],
            "soirées": [s.games_played for s in stats],
            "total": [round(s.total_profit) for s in stats],
            "moyenne": [round(s.avg_profit, 1) for s in stats],
            "% victoires": [round(s.win_percentage) for s in stats],
            "série": [s.current_streak for s in stats],
            "semestre": [round(s.half_profit) for s in stats],
        }
    )


def print_head_to_head(ledger: LedgerSnapshot, player1: str, player2: str, params: QueryParams) -> None:
    result = compute_head_to_head(ledger, player1, player2, window=params.window)
    if result is None:
        logger.warning(f"Aucune soirée partagée entre {player1} et {player2}")
        return
    print(f"\n=== FACE-À-FACE ({result.shared_sessions} soirées partagées) ===")
    for side in (result.player1, result.player2):
        print(
            f"{side.player_name}: {format_profit(side.total_profit)} "
            f"({side.direct_wins} duels gagnés, volatilité {side.volatility:.1f})"
        )
    print(f"Égalités : {result.ties}")


def print_settlement(ledger: LedgerSnapshot, session_id: str) -> None:
    plan = settle_session(ledger, session_id)
    print(f"\n=== RÈGLEMENT {session_id} ===")
    for t in plan.transfers:
        print(
            f"{ledger.player_name(t.from_player_id)} → {ledger.player_name(t.to_player_id)} : "
            f"{format_amount(t.amount)}"
        )
    for t in plan.small_transfers:
        print(
            f"(petit) {ledger.player_name(t.from_player_id)} → "
            f"{ledger.player_name(t.to_player_id)} : {format_amount(t.amount)}"
        )


def main() -> int:
    """Point d'entrée principal."""
    parser = argparse.ArgumentParser(
        description="Affiche le rapport d'avant-soirée du registre",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help=f"Base DuckDB du registre (défaut: {get_ledger_db_path()})",
    )
    parser.add_argument("--players", nargs="+", default=None, help="Joueurs sélectionnés (ids)")
    parser.add_argument(
        "--now",
        type=lambda v: datetime.strptime(v, "%Y-%m-%d"),
        default=None,
        help="Date de référence AAAA-MM-JJ (défaut: maintenant)",
    )
    parser.add_argument("--forecast", action="store_true", help="Affiche les pronostics")
    parser.add_argument(
        "--head-to-head",
        nargs=2,
        metavar=("PLAYER1", "PLAYER2"),
        default=None,
        help="Compare deux joueurs",
    )
    parser.add_argument("--settle", metavar="SESSION_ID", default=None, help="Règlement d'une soirée")
    args = parser.parse_args()

    try:
        with DuckDBLedgerRepository(args.db) as repo:
            ledger = repo.load_snapshot()
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    params = QueryParams(
        player_ids=tuple(args.players) if args.players else None,
        now=args.now,
    )
    stats = compute_all_player_stats(ledger, params)
    logger.info(f"{len(stats)} joueurs actifs")

    print("\n=== CLASSEMENT GÉNÉRAL ===")
    print(stats_table(stats))
    print("\n=== CLASSEMENT DU SEMESTRE ===")
    print(stats_table(compute_period_table(stats, "half")))

    print("\n=== FAITS MARQUANTS ===")
    for m in generate_milestones(stats, ledger, params=params):
        print(f"{m.emoji} [{m.category}] {m.title}")
        print(f"   {m.description}")

    if args.forecast:
        print("\n=== PRONOSTICS ===")
        # Les joueurs retenus sans soirée restent dans le roster
        roster = compute_all_player_stats(
            ledger, params, include_inactive=params.player_ids is not None
        )
        for s in compute_forecast_suggestions(forecast_inputs_from_stats(roster)):
            print(f"{s.player_name}: {format_profit(s.expected_profit)}")

    if args.head_to_head:
        print_head_to_head(ledger, args.head_to_head[0], args.head_to_head[1], params)

    if args.settle:
        print_settlement(ledger, args.settle)

    return 0


if __name__ == "__main__":
    sys.exit(main())
