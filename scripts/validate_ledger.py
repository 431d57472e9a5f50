#!/usr/bin/env python3
"""Script de validation de la qualité des données du registre.

Ce script :
1. Charge le registre depuis la base DuckDB
2. Vérifie la somme nulle de chaque soirée terminée
3. Signale les participations orphelines, doublons, dates illisibles
4. Vérifie la cohérence des séries, profits et compteurs des joueurs

Usage:
    # Valider la base par défaut (data/ledger.duckdb ou $CHIPLEDGER_DB)
    python scripts/validate_ledger.py

    # Valider une autre base avec une tolérance de 0.5
    python scripts/validate_ledger.py --db backup.duckdb --tolerance 0.5

Code de sortie : 1 si au moins une erreur est détectée, 0 sinon.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ajouter le répertoire parent au path pour les imports
REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT))

from chipledger.analysis.stats import compute_all_player_stats
from chipledger.analysis.validation import check_stats_consistency, validate_ledger
from chipledger.config import VALIDATION_CONFIG
from chipledger.data.repositories import DuckDBLedgerRepository
from chipledger.utils.paths import get_ledger_db_path

# Configuration du logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Point d'entrée principal."""
    parser = argparse.ArgumentParser(
        description="Valide la qualité des données du registre",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help=f"Base DuckDB du registre (défaut: {get_ledger_db_path()})",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=VALIDATION_CONFIG.zero_sum_tolerance,
        help=f"Écart toléré sur la somme d'une soirée (défaut: {VALIDATION_CONFIG.zero_sum_tolerance})",
    )
    args = parser.parse_args()

    try:
        with DuckDBLedgerRepository(args.db) as repo:
            ledger = repo.load_snapshot()
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    report = validate_ledger(ledger, tolerance=args.tolerance)
    stats_issues = check_stats_consistency(compute_all_player_stats(ledger))
    issues = [*report.issues, *stats_issues]

    logger.info(
        f"{report.sessions_checked} soirées et {report.participations_checked} participations vérifiées"
    )
    for issue in issues:
        log = logger.error if issue.severity == "error" else logger.warning
        log(f"[{issue.code}] {issue.message}")

    errors = [i for i in issues if i.severity == "error"]
    if errors:
        logger.error(f"{len(errors)} erreur(s) détectée(s)")
        return 1

    logger.info("Registre valide")
    return 0


if __name__ == "__main__":
    sys.exit(main())
