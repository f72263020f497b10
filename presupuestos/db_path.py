from __future__ import annotations

import os
import sqlite3

from .config import DB_PATH_CONFIG
from .paths import data_dir
from .logging_setup import get_logger

log = get_logger(__name__)

MEMORY_DB = ":memory:"

_CACHED_DB_PATH: str | None = None
_CACHED_KIND: str | None = None  # "configured" | "default" | "memory"


def _can_write_sqlite(db_path: str) -> bool:
    try:
        parent = os.path.dirname(db_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        con = sqlite3.connect(db_path)
        try:
            con.execute("CREATE TABLE IF NOT EXISTS __write_test(x INTEGER)")
            con.execute("DROP TABLE __write_test")
            con.commit()
        finally:
            con.close()
        return True
    except (OSError, sqlite3.Error) as e:
        log.warning("No se puede escribir DB en %s (%s)", db_path, e)
        return False


def resolve_db_path(*, force_refresh: bool = False) -> str:
    """
    1) db_path de config.json (si está definido)
    2) DATA_DIR/app.sqlite3
    3) ":memory:" (sin persistencia; se avisa en el log)

    Cachea el resultado para evitar pruebas de escritura repetidas.
    """
    global _CACHED_DB_PATH, _CACHED_KIND

    if _CACHED_DB_PATH and not force_refresh:
        return _CACHED_DB_PATH

    if DB_PATH_CONFIG:
        configured = os.path.abspath(os.path.expanduser(DB_PATH_CONFIG))
        if _can_write_sqlite(configured):
            _CACHED_DB_PATH, _CACHED_KIND = configured, "configured"
            log.info("DB path (config): %s", configured)
            return configured

    try:
        default = os.path.join(data_dir(), "app.sqlite3")
    except OSError as e:
        log.warning("No se pudo crear la carpeta de datos (%s)", e)
        default = ""

    if default and _can_write_sqlite(default):
        _CACHED_DB_PATH, _CACHED_KIND = default, "default"
        log.info("DB path: %s", default)
        return default

    _CACHED_DB_PATH, _CACHED_KIND = MEMORY_DB, "memory"
    log.error("No hay ubicación escribible para la DB; se trabaja en memoria (sin persistencia)")
    return MEMORY_DB


def db_path_debug_info() -> str:
    return f"{_CACHED_DB_PATH or ''} ({_CACHED_KIND or 'not_resolved'})"
