# presupuestos/repository.py
"""
Colecciones persistidas de presupuestos (una clave por tipo).

``save`` es un upsert por id: sin id se genera uno nuevo; con un id ya
guardado se reemplaza el registro en su misma posición. Las lecturas nunca
fallan: colección faltante o corrupta => lista vacía.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Generic, Mapping, TypeVar

from .config import KEY_REPAIR_QUOTES, KEY_SALE_QUOTES
from .errors import FormatError
from .logging_setup import get_logger
from .quotes import TYPE_SALE, RepairQuote, SaleQuote
from .storage import KeyValueStore, dumps_snapshot, read_json_list, write_json
from .utils import new_id, now_iso

log = get_logger(__name__)

Q = TypeVar("Q", SaleQuote, RepairQuote)

SEARCH_FIELDS = ("quoteNumber", "clientName", "type", "clientContact", "clientEmail", "clientCuit")


class QuoteRepository(Generic[Q]):
    model: type

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        id_factory: Callable[[], str] = new_id,
    ):
        self.store = store
        self.key = key
        self.id_factory = id_factory

    # ---------- lectura ----------
    def _accepts(self, rec: Mapping[str, Any]) -> bool:
        return True

    def list_raw(self) -> list[dict]:
        return [r for r in read_json_list(self.store, self.key) if isinstance(r, dict) and self._accepts(r)]

    def list(self) -> list[Q]:
        return [self.model.from_dict(r) for r in self.list_raw()]

    def get(self, quote_id: str) -> Q | None:
        for r in self.list_raw():
            if r.get("id") == quote_id:
                return self.model.from_dict(r)
        return None

    def search(self, text: str) -> list[Q]:
        """Filtro del listado: N°, cliente, tipo, contacto, email o CUIT."""
        s = str(text or "").strip().lower()
        rows = self.list_raw()
        if s:
            rows = [
                r for r in rows
                if s in " ".join(str(r.get(f) or "") for f in SEARCH_FIELDS).lower()
            ]
        return [self.model.from_dict(r) for r in rows]

    # ---------- escritura ----------
    def _record(self, quote: Q | Mapping[str, Any]) -> dict:
        if isinstance(quote, (SaleQuote, RepairQuote)):
            quote.refresh_totals()
            if not quote.created_at:
                quote.created_at = now_iso()
            return quote.to_dict()
        if isinstance(quote, Mapping):
            # dict crudo: se guarda tal cual (totales ya calculados por quien llama)
            return dict(quote)
        raise TypeError(f"No se puede guardar un {type(quote).__name__} como presupuesto")

    def save(self, quote: Q | Mapping[str, Any]) -> str:
        rec = self._record(quote)
        if not rec.get("id"):
            rec = {**rec, "id": self.id_factory()}
            if isinstance(quote, (SaleQuote, RepairQuote)):
                quote.id = rec["id"]

        rows = read_json_list(self.store, self.key)
        for idx, r in enumerate(rows):
            if isinstance(r, dict) and r.get("id") == rec["id"]:
                rows[idx] = rec
                log.info("Presupuesto actualizado: %s (%s)", rec["id"], rec.get("quoteNumber", ""))
                break
        else:
            rows.append(rec)
            log.info("Presupuesto guardado: %s (%s)", rec["id"], rec.get("quoteNumber", ""))

        write_json(self.store, self.key, rows)
        return rec["id"]

    def remove(self, quote_id: str) -> bool:
        rows = read_json_list(self.store, self.key)
        kept = [r for r in rows if not (isinstance(r, dict) and r.get("id") == quote_id)]
        if len(kept) == len(rows):
            return False
        write_json(self.store, self.key, kept)
        log.info("Presupuesto eliminado: %s", quote_id)
        return True

    def clear(self) -> None:
        self.store.delete(self.key)
        log.info("Colección '%s' vaciada", self.key)


class SaleQuoteRepository(QuoteRepository[SaleQuote]):
    model = SaleQuote

    def __init__(self, store: KeyValueStore, key: str = KEY_SALE_QUOTES, id_factory: Callable[[], str] = new_id):
        super().__init__(store, key, id_factory)

    def _accepts(self, rec: Mapping[str, Any]) -> bool:
        # registros viejos sin type cuentan como venta
        return (rec.get("type") or TYPE_SALE) == TYPE_SALE


class RepairQuoteRepository(QuoteRepository[RepairQuote]):
    """Reparaciones: además permite exportar/importar la colección completa."""
    model = RepairQuote

    def __init__(self, store: KeyValueStore, key: str = KEY_REPAIR_QUOTES, id_factory: Callable[[], str] = new_id):
        super().__init__(store, key, id_factory)

    def export_snapshot(self) -> bytes:
        return dumps_snapshot(read_json_list(self.store, self.key))

    def import_snapshot(self, data: bytes | str) -> dict:
        """Reemplaza la colección por completo (sin normalizar registro por registro)."""
        try:
            parsed = json.loads(data)
        except (TypeError, ValueError) as e:
            raise FormatError(f"Formato inválido: {e}") from e
        if not isinstance(parsed, list):
            raise FormatError("Formato inválido, se esperaba un arreglo.")
        write_json(self.store, self.key, parsed)
        log.info("Reparaciones importadas: %d", len(parsed))
        return {"count": len(parsed)}
