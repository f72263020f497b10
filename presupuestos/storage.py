"""
Almacenamiento clave -> texto JSON.

Cada colección (catálogo, ventas, reparaciones, cada borrador) vive bajo su
propia clave y se reescribe completa en cada operación (último en escribir
gana). Los repositorios reciben el store por parámetro: en producción un
``SqliteStore``; en tests un ``MemoryStore``.
"""
from __future__ import annotations

import json
import sqlite3
from typing import Any, Optional, Protocol

from sqlModels.db import connect, ensure_schema, tx
from sqlModels import storage_repo

from .errors import ParseError, StorageUnavailable
from .logging_setup import get_logger

log = get_logger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...
    def keys(self) -> list[str]: ...


class MemoryStore:
    """Backend en memoria (tests / modo degradado)."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class SqliteStore:
    """
    Store persistente sobre la tabla ``storage`` (ver sqlModels).

    Si la base no se puede abrir o escribir, registra el error y sigue
    funcionando en memoria (``degraded``): las operaciones del usuario no se
    cortan, pero lo escrito desde ese momento no sobrevive al proceso.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._con: sqlite3.Connection | None = None
        self._fallback: MemoryStore | None = None

    # ---------- ciclo de vida ----------
    def open(self) -> "SqliteStore":
        if self._con is not None or self._fallback is not None:
            return self
        try:
            con = connect(self.db_path)
            ensure_schema(con)
            self._con = con
            log.debug("Storage abierto: %s", self.db_path)
        except sqlite3.Error as e:
            self._degrade(StorageUnavailable(f"No se pudo abrir {self.db_path}: {e}"))
        return self

    def close(self) -> None:
        if self._con is not None:
            try:
                self._con.close()
            finally:
                self._con = None

    def __enter__(self) -> "SqliteStore":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def degraded(self) -> bool:
        return self._fallback is not None

    def _degrade(self, err: StorageUnavailable) -> MemoryStore:
        if self._fallback is None:
            log.error("%s. Se continúa en memoria (sin persistencia).", err)
            self._fallback = MemoryStore()
            self.close()
        return self._fallback

    def _connection(self) -> sqlite3.Connection | None:
        if self._con is None and self._fallback is None:
            self.open()
        return self._con

    # ---------- API ----------
    def get(self, key: str) -> Optional[str]:
        con = self._connection()
        if con is None:
            return self._fallback.get(key)
        try:
            return storage_repo.get_value(con, key)
        except sqlite3.Error as e:
            return self._degrade(StorageUnavailable(str(e))).get(key)

    def set(self, key: str, value: str) -> None:
        con = self._connection()
        if con is None:
            self._fallback.set(key, value)
            return
        try:
            with tx(con):
                storage_repo.set_value(con, key, value)
        except sqlite3.Error as e:
            self._degrade(StorageUnavailable(str(e))).set(key, value)

    def delete(self, key: str) -> None:
        con = self._connection()
        if con is None:
            self._fallback.delete(key)
            return
        try:
            with tx(con):
                storage_repo.delete_value(con, key)
        except sqlite3.Error as e:
            self._degrade(StorageUnavailable(str(e))).delete(key)

    def keys(self) -> list[str]:
        con = self._connection()
        if con is None:
            return self._fallback.keys()
        try:
            return storage_repo.list_keys(con)
        except sqlite3.Error as e:
            return self._degrade(StorageUnavailable(str(e))).keys()

    def last_write(self, key: str) -> Optional[str]:
        con = self._connection()
        if con is None:
            return None
        try:
            return storage_repo.last_write(con, key)
        except sqlite3.Error:
            return None


# =========================
# Helpers JSON
# =========================
def read_json(store: KeyValueStore, key: str) -> Any:
    """
    None si la clave no existe. ParseError si el contenido no es JSON.
    Ojo: una clave con "null" también devuelve None.
    """
    raw = store.get(key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Contenido inválido en '{key}': {e}") from e


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value, ensure_ascii=False))


def read_json_list(store: KeyValueStore, key: str) -> list:
    """Lectura total: lista vacía si falta, está corrupta o no es un arreglo."""
    try:
        data = read_json(store, key)
    except ParseError as e:
        log.warning("%s; se usa lista vacía", e)
        return []
    return data if isinstance(data, list) else []


def dumps_snapshot(value: Any) -> bytes:
    """Serialización para exportar (JSON indentado, UTF-8)."""
    return json.dumps(value, ensure_ascii=False, indent=2).encode("utf-8")


def open_default_store() -> SqliteStore:
    from .db_path import db_path_debug_info, resolve_db_path

    store = SqliteStore(resolve_db_path()).open()
    log.debug("Storage por defecto: %s", db_path_debug_info())
    return store
