# presupuestos/repairs.py
"""
Totales y operaciones de reparación.

Cada equipo suma sus repuestos más su mano de obra; el presupuesto suma
todos los equipos. A diferencia de ventas no hay descuento ni envío:
el total final es igual al subtotal.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from .config import LABOR_SKU
from .models import Equipment, LineItem, Product, as_number
from .pricing import add_or_increment, items_subtotal, remove_item, set_quantity
from .utils import new_id, nz


@dataclass(frozen=True)
class RepairTotals:
    subtotal: float
    final_total: float


def repuestos_subtotal(eq: Equipment) -> float:
    return items_subtotal(eq.repuestos)


def equipment_total(eq: Equipment) -> float:
    return repuestos_subtotal(eq) + max(0.0, nz(eq.mano_obra))


def compute_repair_totals(equipments: Iterable[Equipment]) -> RepairTotals:
    subtotal = sum(equipment_total(eq) for eq in equipments)
    return RepairTotals(subtotal=subtotal, final_total=subtotal)


def _join(*parts: str) -> str:
    return " ".join(p for p in parts if p)


def equipment_label(eq: Equipment) -> str:
    """Marca, modelo y serie separados por espacio, sin huecos."""
    return _join(eq.marca, eq.modelo, eq.serie)


def flatten(equipments: Iterable[Equipment]) -> list[LineItem]:
    """
    Vista aplanada para exportar/compartir (no es la fuente de los totales).

    Por equipo, en orden: la línea de mano de obra (si manoObra > 0) y luego
    sus repuestos, con el nombre anotado con marca/modelo del equipo.
    """
    out: list[LineItem] = []
    for eq in equipments:
        if nz(eq.mano_obra) > 0:
            serie = f"({eq.serie})" if eq.serie else ""
            out.append(LineItem(
                sku=LABOR_SKU,
                name=f"Mano de obra — {_join(eq.marca, eq.modelo, serie)}".strip(),
                price=as_number(nz(eq.mano_obra)),
                qty=1,
            ))
        for r in eq.repuestos:
            out.append(LineItem(
                sku=r.sku,
                name=f"{r.name} — {_join(eq.marca, eq.modelo)}".strip(),
                price=as_number(nz(r.price)),
                qty=as_number(nz(r.qty) or 1),
            ))
    return out


# =========================
# Edición de equipos
# =========================
def blank_equipment(id_factory: Callable[[], str] = new_id) -> Equipment:
    return Equipment(id=id_factory())


def add_equipment(equipments: list[Equipment], id_factory: Callable[[], str] = new_id) -> Equipment:
    eq = blank_equipment(id_factory)
    equipments.append(eq)
    return eq


def remove_equipment(equipments: list[Equipment], equipment_id: str) -> bool:
    before = len(equipments)
    equipments[:] = [e for e in equipments if e.id != equipment_id]
    return len(equipments) != before


def find_equipment(equipments: Iterable[Equipment], equipment_id: str) -> Equipment | None:
    for e in equipments:
        if e.id == equipment_id:
            return e
    return None


def add_repuesto(eq: Equipment, product: Product | Mapping[str, Any]) -> LineItem:
    return add_or_increment(eq.repuestos, product)


def set_repuesto_qty(eq: Equipment, sku: str, value: Any) -> LineItem | None:
    return set_quantity(eq.repuestos, sku, value)


def remove_repuesto(eq: Equipment, sku: str) -> bool:
    return remove_item(eq.repuestos, sku)
