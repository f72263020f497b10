# presupuestos/quotes.py
"""
Registros de presupuesto (venta y reparación) tal como se guardan.

Claves JSON en camelCase (``quoteNumber``, ``clientName``, ``finalTotal``...)
para seguir leyendo colecciones ya persistidas. ``from_dict`` es tolerante:
campos faltantes toman default y los números se coercionan.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from .config import FISCAL_OPTIONS, MAX_DATE_DAYS, NOTES_DEFAULT, REPAIR_PREFIX, SALE_PREFIX
from .models import Equipment, LineItem, as_number
from .pricing import SaleTotals, compute_totals
from .repairs import blank_equipment, compute_repair_totals, flatten
from .utils import clean_str, new_id, nz, to_float

TYPE_SALE = "venta"
TYPE_REPAIR = "reparacion"


def _client_from_dict(d: Mapping[str, Any]) -> dict:
    return {
        "client_name": clean_str(d.get("clientName")),
        "client_contact": clean_str(d.get("clientContact")),
        "client_email": clean_str(d.get("clientEmail")),
        "client_cuit": clean_str(d.get("clientCuit")),
        "client_fiscal": clean_str(d.get("clientFiscal")),
    }


@dataclass
class SaleQuote:
    id: str = ""
    quote_number: str = ""
    date: str = ""
    client_name: str = ""
    client_contact: str = ""
    client_email: str = ""
    client_cuit: str = ""
    client_fiscal: str = ""
    items: list[LineItem] = field(default_factory=list)
    subtotal: float = 0.0
    apply_discount: bool = False
    discount: float = 0.0
    has_shipping: bool = False
    shipping: float = 0.0
    final_total: float = 0.0
    notes: str = ""
    created_at: str = ""
    # registro viejo guardado sin "items": se respeta su total
    totals_only: bool = field(default=False, repr=False, compare=False)

    type = TYPE_SALE

    def totals(self) -> SaleTotals:
        return compute_totals(
            self.items,
            apply_discount=self.apply_discount,
            discount=self.discount,
            has_shipping=self.has_shipping,
            shipping=self.shipping,
        )

    @property
    def discount_amount(self) -> float:
        return self.totals().discount_amount

    @property
    def keeps_stored_totals(self) -> bool:
        return self.totals_only and not self.items

    def refresh_totals(self) -> "SaleQuote":
        if not self.keeps_stored_totals:
            t = self.totals()
            self.subtotal = t.subtotal
            self.final_total = t.final_total
        return self

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "SaleQuote":
        d = d if isinstance(d, Mapping) else {}
        items = d.get("items")
        return cls(
            id=clean_str(d.get("id")),
            quote_number=clean_str(d.get("quoteNumber")),
            date=clean_str(d.get("date")),
            items=[LineItem.from_dict(x) for x in items] if isinstance(items, list) else [],
            subtotal=to_float(d.get("subtotal"), 0.0),
            apply_discount=bool(d.get("applyDiscount")),
            discount=to_float(d.get("discount"), 0.0),
            has_shipping=bool(d.get("hasShipping")),
            shipping=to_float(d.get("shipping"), 0.0),
            final_total=to_float(d.get("finalTotal"), 0.0),
            notes=str(d.get("notes") or ""),
            created_at=clean_str(d.get("createdAt")),
            totals_only="items" not in d,
            **_client_from_dict(d),
        )

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"id": self.id} if self.id else {}
        out.update({
            "type": self.type,
            "quoteNumber": self.quote_number,
            "date": self.date,
            "clientName": self.client_name,
            "clientContact": self.client_contact,
            "clientEmail": self.client_email,
            "clientCuit": self.client_cuit,
            "clientFiscal": self.client_fiscal,
            "items": [it.to_dict() for it in self.items],
            "subtotal": as_number(nz(self.subtotal)),
            "applyDiscount": bool(self.apply_discount),
            "discount": as_number(nz(self.discount)),
            "hasShipping": bool(self.has_shipping),
            "shipping": as_number(nz(self.shipping)),
            "finalTotal": as_number(nz(self.final_total)),
            "notes": self.notes,
        })
        if self.created_at:
            out["createdAt"] = self.created_at
        return out


@dataclass
class RepairQuote:
    id: str = ""
    quote_number: str = ""
    date: str = ""
    client_name: str = ""
    client_contact: str = ""
    client_email: str = ""
    client_cuit: str = ""
    client_fiscal: str = ""
    equipments: list[Equipment] = field(default_factory=list)
    items: list[LineItem] = field(default_factory=list)   # derivado (flatten)
    subtotal: float = 0.0
    final_total: float = 0.0
    notes: str = ""
    created_at: str = ""
    totals_only: bool = field(default=False, repr=False, compare=False)

    type = TYPE_REPAIR

    @property
    def keeps_stored_totals(self) -> bool:
        return self.totals_only and not self.equipments

    def refresh_totals(self) -> "RepairQuote":
        if not self.keeps_stored_totals:
            t = compute_repair_totals(self.equipments)
            self.subtotal = t.subtotal
            self.final_total = t.final_total
            self.items = flatten(self.equipments)
        return self

    @classmethod
    def from_dict(cls, d: Mapping[str, Any], id_factory: Callable[[], str] = new_id) -> "RepairQuote":
        d = d if isinstance(d, Mapping) else {}
        # los borradores guardan "equipos"; los presupuestos, "equipments"
        eqs = d.get("equipments")
        if not isinstance(eqs, list):
            eqs = d.get("equipos")
        items = d.get("items")
        return cls(
            id=clean_str(d.get("id")),
            quote_number=clean_str(d.get("quoteNumber")),
            date=clean_str(d.get("date")),
            equipments=[Equipment.from_dict(e, id_factory) for e in eqs] if isinstance(eqs, list) else [],
            items=[LineItem.from_dict(x) for x in items] if isinstance(items, list) else [],
            subtotal=to_float(d.get("subtotal"), 0.0),
            final_total=to_float(d.get("finalTotal"), 0.0),
            notes=str(d.get("notes") or ""),
            created_at=clean_str(d.get("createdAt")),
            totals_only="equipments" not in d and "equipos" not in d,
            **_client_from_dict(d),
        )

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"id": self.id} if self.id else {}
        out.update({
            "type": self.type,
            "quoteNumber": self.quote_number,
            "date": self.date,
            "clientName": self.client_name,
            "clientContact": self.client_contact,
            "clientEmail": self.client_email,
            "clientCuit": self.client_cuit,
            "clientFiscal": self.client_fiscal,
            "equipments": [e.to_dict() for e in self.equipments],
            "items": [it.to_dict() for it in self.items],
            "subtotal": as_number(nz(self.subtotal)),
            "finalTotal": as_number(nz(self.final_total)),
            "notes": self.notes,
        })
        if self.created_at:
            out["createdAt"] = self.created_at
        return out


# =========================
# Numeración / fechas
# =========================
def default_quote_number(kind: str, today: datetime.date | None = None) -> str:
    """
    Venta:      VEN-DDMM-A
    Reparación: REP-MMDD-A
    """
    d = today or datetime.date.today()
    if kind == TYPE_REPAIR:
        return f"{REPAIR_PREFIX}-{d.month:02d}{d.day:02d}-A"
    return f"{SALE_PREFIX}-{d.day:02d}{d.month:02d}-A"


def date_bounds(today: datetime.date | None = None, days: int = MAX_DATE_DAYS) -> tuple[str, str]:
    d = today or datetime.date.today()
    return d.isoformat(), (d + datetime.timedelta(days=days)).isoformat()


def _date_ok(value: str, today: datetime.date | None, days: int) -> bool:
    try:
        parsed = datetime.date.fromisoformat(str(value or ""))
    except ValueError:
        return False
    lo, hi = date_bounds(today, days)
    return lo <= parsed.isoformat() <= hi


def _common_errors(q: SaleQuote | RepairQuote, today: datetime.date | None, days: int) -> list[str]:
    errors: list[str] = []
    if not q.client_name.strip():
        errors.append("Ingresá el nombre del cliente")
    if not _date_ok(q.date, today, days):
        errors.append(f"La fecha debe estar entre hoy y {days} días hacia adelante.")
    return errors


def validate_sale(q: SaleQuote, today: datetime.date | None = None, days: int = MAX_DATE_DAYS) -> list[str]:
    """Lista de mensajes; vacía => se puede guardar, exportar y compartir."""
    errors = _common_errors(q, today, days)
    if not q.items:
        errors.append("Agregá al menos un producto")
    return errors


def validate_repair(q: RepairQuote, today: datetime.date | None = None, days: int = MAX_DATE_DAYS) -> list[str]:
    errors = _common_errors(q, today, days)
    if not q.equipments:
        errors.append("Agregá al menos un equipo")
    for idx, eq in enumerate(q.equipments, start=1):
        if not (eq.marca or eq.modelo or eq.serie or eq.descripcion):
            errors.append(f"Equipo #{idx}: completá marca, modelo, serie o descripción")
        if not eq.repuestos and nz(eq.mano_obra) <= 0:
            errors.append(f"Equipo #{idx}: agregá repuestos o mano de obra")
    if compute_repair_totals(q.equipments).subtotal <= 0:
        errors.append("El total debe ser mayor a cero")
    return errors


# =========================
# Formularios nuevos
# =========================
def new_sale_quote(today: datetime.date | None = None) -> SaleQuote:
    d = today or datetime.date.today()
    return SaleQuote(
        quote_number=default_quote_number(TYPE_SALE, d),
        date=d.isoformat(),
        client_fiscal=FISCAL_OPTIONS[0],
    )


def new_repair_quote(
    today: datetime.date | None = None,
    id_factory: Callable[[], str] = new_id,
) -> RepairQuote:
    d = today or datetime.date.today()
    return RepairQuote(
        quote_number=default_quote_number(TYPE_REPAIR, d),
        date=d.isoformat(),
        client_fiscal=FISCAL_OPTIONS[0],
        equipments=[blank_equipment(id_factory)],
        notes=NOTES_DEFAULT,
    )


def quote_from_dict(d: Mapping[str, Any]) -> SaleQuote | RepairQuote:
    """Despacha por ``type`` (sin type => venta)."""
    if isinstance(d, Mapping) and d.get("type") == TYPE_REPAIR:
        return RepairQuote.from_dict(d)
    return SaleQuote.from_dict(d)
