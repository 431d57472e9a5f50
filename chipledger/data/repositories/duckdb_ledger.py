"""
Repository DuckDB du registre.
(DuckDB ledger repository)

HOW IT WORKS:
Le registre est stocké dans un fichier DuckDB unique avec trois tables :
1. players : id, name, category
2. sessions : id, date (texte brut), status, created_at
3. participations : session_id, player_id, profit

``load_snapshot()`` lit les trois tables et construit un ``LedgerSnapshot``
validé par Pydantic. Une table absente est journalisée et traitée comme
vide ; un fichier absent lève ``FileNotFoundError``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import duckdb

from chipledger.data.domain.models import LedgerSnapshot, Participation, Player, Session
from chipledger.utils.paths import get_ledger_db_path

logger = logging.getLogger(__name__)

LEDGER_TABLES = ("players", "sessions", "participations")

_SCHEMA_DDL = (
    """
    CREATE TABLE IF NOT EXISTS players (
        id VARCHAR PRIMARY KEY,
        name VARCHAR NOT NULL,
        category VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sessions (
        id VARCHAR PRIMARY KEY,
        date VARCHAR,
        status VARCHAR,
        created_at TIMESTAMP
    )
    """,
    # Pas de clé primaire : les doublons sont signalés par la validation
    """
    CREATE TABLE IF NOT EXISTS participations (
        session_id VARCHAR NOT NULL,
        player_id VARCHAR NOT NULL,
        profit DOUBLE
    )
    """,
)


def create_schema(conn: duckdb.DuckDBPyConnection) -> None:
    """Crée les tables du registre si elles n'existent pas."""
    for ddl in _SCHEMA_DDL:
        conn.execute(ddl)


def insert_snapshot(conn: duckdb.DuckDBPyConnection, snapshot: LedgerSnapshot) -> None:
    """Insère le contenu d'un instantané (tables créées si nécessaire).

    Args:
        conn: Connexion DuckDB en écriture.
        snapshot: Instantané à insérer.
    """
    create_schema(conn)
    if snapshot.players:
        conn.executemany(
            "INSERT INTO players (id, name, category) VALUES (?, ?, ?)",
            [(p.id, p.name, p.category.value) for p in snapshot.players],
        )
    if snapshot.sessions:
        conn.executemany(
            "INSERT INTO sessions (id, date, status, created_at) VALUES (?, ?, ?, ?)",
            [(s.id, str(s.date), s.status.value, s.created_at) for s in snapshot.sessions],
        )
    if snapshot.participations:
        conn.executemany(
            "INSERT INTO participations (session_id, player_id, profit) VALUES (?, ?, ?)",
            [(p.session_id, p.player_id, p.profit) for p in snapshot.participations],
        )
    logger.info(
        "Registre inséré : %d joueurs, %d soirées, %d participations",
        len(snapshot.players),
        len(snapshot.sessions),
        len(snapshot.participations),
    )


class DuckDBLedgerRepository:
    """
    Lecture du registre depuis DuckDB.
    (Ledger reader backed by DuckDB)

    Args:
        db_path: Chemin vers le fichier DuckDB (défaut : ``get_ledger_db_path()``).
        conn: Connexion existante (réutilisée si fournie, ex: ``:memory:`` en test).
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        conn: duckdb.DuckDBPyConnection | None = None,
    ) -> None:
        self._db_path = Path(db_path) if db_path is not None else get_ledger_db_path()
        self._connection = conn
        self._owns_connection = conn is None

    @property
    def db_path(self) -> str:
        """Chemin vers la base de données."""
        return str(self._db_path)

    def _get_connection(self) -> duckdb.DuckDBPyConnection:
        if self._connection is None:
            if not self._db_path.exists():
                raise FileNotFoundError(f"Base de données du registre non trouvée: {self._db_path}")
            self._connection = duckdb.connect(str(self._db_path), read_only=True)
        return self._connection

    def close(self) -> None:
        """Ferme la connexion si elle a été ouverte par le repository."""
        if self._connection is not None and self._owns_connection:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> DuckDBLedgerRepository:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _has_table(self, table_name: str) -> bool:
        conn = self._get_connection()
        count = conn.execute(
            "SELECT COUNT(*) FROM information_schema.tables WHERE table_name = ?",
            [table_name],
        ).fetchone()[0]
        return count > 0

    def _fetch_rows(self, table_name: str, columns: tuple[str, ...]) -> list[dict[str, Any]]:
        """Lit une table du registre ; table absente = liste vide."""
        if not self._has_table(table_name):
            logger.warning("Table %s absente dans %s", table_name, self._db_path)
            return []
        conn = self._get_connection()
        rows = conn.execute(f"SELECT {', '.join(columns)} FROM {table_name}").fetchall()
        return [dict(zip(columns, row)) for row in rows]

    def load_players(self) -> list[Player]:
        """Charge les joueurs."""
        return [Player(**row) for row in self._fetch_rows("players", ("id", "name", "category"))]

    def load_sessions(self) -> list[Session]:
        """Charge les soirées (ordre de création)."""
        rows = self._fetch_rows("sessions", ("id", "date", "status", "created_at"))
        return [Session(**row) for row in rows]

    def load_participations(self) -> list[Participation]:
        """Charge les participations."""
        rows = self._fetch_rows("participations", ("session_id", "player_id", "profit"))
        return [Participation(**row) for row in rows]

    def load_snapshot(self) -> LedgerSnapshot:
        """Construit un instantané complet du registre.

        Returns:
            LedgerSnapshot.

        Raises:
            FileNotFoundError: Si le fichier DuckDB n'existe pas.
            pydantic.ValidationError: Si une ligne est invalide.
        """
        snapshot = LedgerSnapshot(
            players=tuple(self.load_players()),
            sessions=tuple(self.load_sessions()),
            participations=tuple(self.load_participations()),
        )
        logger.debug(
            "Registre chargé depuis %s : %d joueurs, %d soirées, %d participations",
            self._db_path,
            len(snapshot.players),
            len(snapshot.sessions),
            len(snapshot.participations),
        )
        return snapshot
