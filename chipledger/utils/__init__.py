"""Utilitaires partagés pour le projet chipledger."""

from chipledger.utils.formatting import format_amount, format_profit, month_name
from chipledger.utils.paths import (
    DATA_DIR,
    LEDGER_DB_FILENAME,
    REPO_ROOT,
    get_ledger_db_path,
)

__all__ = [
    # paths
    "REPO_ROOT",
    "DATA_DIR",
    "LEDGER_DB_FILENAME",
    "get_ledger_db_path",
    # formatting
    "format_amount",
    "format_profit",
    "month_name",
]
