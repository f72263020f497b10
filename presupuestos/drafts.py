# presupuestos/drafts.py
"""
Borradores del formulario en curso (uno de venta y uno de reparación).

Se sobrescriben en cada cambio y no forman parte del historial de
presupuestos: no tienen id. Guardar ``None`` deja un ``null`` explícito en
lugar de borrar la clave; al leer, ambos casos devuelven None.
"""
from __future__ import annotations

from typing import Any, Callable

from .config import KEY_DRAFT_REPAIR, KEY_DRAFT_SALE
from .errors import ParseError
from .logging_setup import get_logger
from .quotes import RepairQuote, SaleQuote
from .storage import KeyValueStore, read_json, write_json
from .utils import new_id, now_ms

log = get_logger(__name__)

SLOT_SALE = "sale"
SLOT_REPAIR = "repair"

DRAFT_KEYS = {
    SLOT_SALE: KEY_DRAFT_SALE,
    SLOT_REPAIR: KEY_DRAFT_REPAIR,
}


class DraftCache:
    def __init__(self, store: KeyValueStore, keys: dict[str, str] | None = None):
        self.store = store
        self.keys = dict(DRAFT_KEYS if keys is None else keys)

    def _key(self, slot: str) -> str:
        try:
            return self.keys[slot]
        except KeyError:
            raise KeyError(f"Borrador desconocido: {slot!r}") from None

    def save(self, slot: str, value: Any) -> None:
        key = self._key(slot)
        if isinstance(value, (SaleQuote, RepairQuote)):
            value = draft_payload(value)
        if isinstance(value, dict):
            value = {**value, "_ts": now_ms()}
        write_json(self.store, key, value)

    def load(self, slot: str) -> Any:
        key = self._key(slot)
        try:
            return read_json(self.store, key)
        except ParseError as e:
            log.warning("%s; se ignora el borrador", e)
            return None

    def clear(self, slot: str) -> None:
        self.store.delete(self._key(slot))


def draft_payload(quote: SaleQuote | RepairQuote) -> dict:
    """Estado del formulario a guardar como borrador (sin id ni createdAt)."""
    d = quote.to_dict()
    d.pop("id", None)
    d.pop("createdAt", None)
    if isinstance(quote, RepairQuote):
        d["equipos"] = d.pop("equipments")
        d.pop("items", None)
    return d


def restore_sale(draft: Any) -> SaleQuote | None:
    if not isinstance(draft, dict):
        return None
    q = SaleQuote.from_dict(draft)
    q.id = ""
    return q.refresh_totals()


def restore_repair(draft: Any, id_factory: Callable[[], str] = new_id) -> RepairQuote | None:
    """Rearma el formulario; los equipos sin id reciben uno nuevo."""
    if not isinstance(draft, dict):
        return None
    q = RepairQuote.from_dict(draft, id_factory)
    q.id = ""
    return q.refresh_totals()
