"""Gestion centralisée des chemins pour le projet chipledger.

Ce module définit les chemins utilisés par les scripts :
- data/ledger.duckdb : base DuckDB du registre des soirées
"""

from __future__ import annotations

import os
from pathlib import Path

# =============================================================================
# Chemins racine
# =============================================================================


def _find_repo_root() -> Path:
    """Trouve la racine du projet (contient pyproject.toml ou .git)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent

    # Fallback : variable d'environnement ou CWD
    if env_root := os.environ.get("CHIPLEDGER_ROOT"):
        return Path(env_root)

    return Path.cwd()


# Racine du projet
REPO_ROOT: Path = _find_repo_root()

# Dossier des données
DATA_DIR: Path = REPO_ROOT / "data"


# =============================================================================
# Constantes de noms de fichiers
# =============================================================================

LEDGER_DB_FILENAME = "ledger.duckdb"


def get_ledger_db_path() -> Path:
    """Retourne le chemin de la base du registre.

    La variable d'environnement ``CHIPLEDGER_DB`` a priorité sur le
    chemin par défaut ``data/ledger.duckdb``.

    Returns:
        Chemin vers le fichier DuckDB.
    """
    if env_db := os.environ.get("CHIPLEDGER_DB"):
        return Path(env_db)
    return DATA_DIR / LEDGER_DB_FILENAME
