# sqlModels/db.py
from __future__ import annotations

import sqlite3
from contextlib import contextmanager

from .migrations import MIGRATIONS, table_columns
from .schema import META_DDL, SCHEMA_VERSION

MEMORY = ":memory:"


def connect(db_path: str) -> sqlite3.Connection:
    """Filas accesibles por nombre; WAL solo tiene sentido con archivo."""
    con = sqlite3.connect(db_path)
    con.row_factory = sqlite3.Row

    pragmas = ["synchronous = NORMAL", "busy_timeout = 5000"]
    if db_path != MEMORY:
        pragmas.insert(0, "journal_mode = WAL")
    for pragma in pragmas:
        con.execute(f"PRAGMA {pragma}")
    return con


@contextmanager
def tx(con: sqlite3.Connection):
    con.execute("BEGIN")
    try:
        yield con
    except Exception:
        con.rollback()
        raise
    con.commit()


def schema_version(con: sqlite3.Connection) -> int:
    """meta.schema_version; 0 si no hay meta o el valor no es entero."""
    try:
        row = con.execute("SELECT value FROM meta WHERE key = 'schema_version'").fetchone()
    except sqlite3.OperationalError:
        return 0
    try:
        return int(row[0]) if row else 0
    except (TypeError, ValueError):
        return 0


def _detect_version(con: sqlite3.Connection) -> int:
    # bases anteriores a meta.schema_version: se deduce por columnas
    cols = table_columns(con, "storage")
    if "updated_at" in cols:
        return 2
    return 1 if cols else 0


def ensure_schema(con: sqlite3.Connection) -> int:
    """
    Lleva la base a SCHEMA_VERSION corriendo solo las migraciones que
    faltan, todo en una transacción. Devuelve la versión de partida.
    """
    with tx(con):
        con.execute(META_DDL)
        start = schema_version(con) or _detect_version(con)
        for target in range(start + 1, SCHEMA_VERSION + 1):
            MIGRATIONS[target](con)
        con.execute(
            """
            INSERT INTO meta(key, value) VALUES('schema_version', ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (str(SCHEMA_VERSION),),
        )
    return start
