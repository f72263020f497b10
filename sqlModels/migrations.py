# sqlModels/migrations.py
"""
Migraciones incrementales. MIGRATIONS[n] lleva la base de la versión n-1 a
la n; cada una tiene que poder correr de nuevo sobre una base ya migrada.
"""
from __future__ import annotations

import sqlite3
from typing import Callable

from .schema import STORAGE_DDL, STORAGE_UPDATED_INDEX


def table_columns(con: sqlite3.Connection, table: str) -> set[str]:
    """Columnas (en minúsculas); vacío si la tabla no existe."""
    return {str(r[1]).lower() for r in con.execute(f"PRAGMA table_info({table})")}


def mig_1(con: sqlite3.Connection) -> None:
    con.execute(STORAGE_DDL)


def mig_2(con: sqlite3.Connection) -> None:
    """storage.updated_at: fecha de la última escritura de cada clave."""
    if "updated_at" not in table_columns(con, "storage"):
        con.execute("ALTER TABLE storage ADD COLUMN updated_at TEXT NOT NULL DEFAULT ''")
    # filas de una v1: no se sabe cuándo se escribieron, se toma la fecha de migración
    con.execute("UPDATE storage SET updated_at = datetime('now') WHERE updated_at = ''")
    con.execute(STORAGE_UPDATED_INDEX)


MIGRATIONS: dict[int, Callable[[sqlite3.Connection], None]] = {
    1: mig_1,
    2: mig_2,
}
