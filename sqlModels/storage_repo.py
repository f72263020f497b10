# sqlModels/storage_repo.py
from __future__ import annotations

import datetime
import sqlite3


def _stamp() -> str:
    return datetime.datetime.now().isoformat(timespec="seconds")


def get_value(con: sqlite3.Connection, key: str) -> str | None:
    k = str(key or "").strip()
    if not k:
        return None
    r = con.execute("SELECT value FROM storage WHERE key = ?", (k,)).fetchone()
    return str(r["value"]) if r and r["value"] is not None else None


def set_value(con: sqlite3.Connection, key: str, value: str) -> None:
    k = str(key or "").strip()
    if not k:
        return
    v = "" if value is None else str(value)
    con.execute(
        """
        INSERT INTO storage(key, value, updated_at) VALUES(?,?,?)
        ON CONFLICT(key) DO UPDATE SET
            value=excluded.value,
            updated_at=excluded.updated_at
        """,
        (k, v, _stamp()),
    )


def delete_value(con: sqlite3.Connection, key: str) -> None:
    con.execute("DELETE FROM storage WHERE key = ?", (str(key or "").strip(),))


def list_keys(con: sqlite3.Connection) -> list[str]:
    rows = con.execute("SELECT key FROM storage ORDER BY key").fetchall()
    return [str(r["key"]) for r in rows]


def last_write(con: sqlite3.Connection, key: str) -> str | None:
    """Fecha ISO de la última escritura de la clave (None si no existe)."""
    r = con.execute(
        "SELECT updated_at FROM storage WHERE key = ?",
        (str(key or "").strip(),),
    ).fetchone()
    return str(r["updated_at"]) if r and r["updated_at"] else None
