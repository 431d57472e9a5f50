"""
Repositories : Accès au registre stocké.
(Repositories: access to the stored ledger)
"""

from chipledger.data.repositories.duckdb_ledger import (
    LEDGER_TABLES,
    DuckDBLedgerRepository,
    create_schema,
    insert_snapshot,
)

__all__ = [
    "LEDGER_TABLES",
    "DuckDBLedgerRepository",
    "create_schema",
    "insert_snapshot",
]
