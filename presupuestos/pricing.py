# presupuestos/pricing.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .models import LineItem, Product, as_number, normalize_qty
from .utils import nz


@dataclass(frozen=True)
class SaleTotals:
    subtotal: float
    discount_amount: float
    final_total: float


def line_total(it: LineItem) -> float:
    return nz(it.price) * nz(it.qty)


def items_subtotal(items: Iterable[LineItem]) -> float:
    return sum(line_total(it) for it in items)


def _find(items: list[LineItem], sku: str) -> int:
    for i, it in enumerate(items):
        if it.sku == sku:
            return i
    return -1


def add_or_increment(items: list[LineItem], product: Product | Mapping[str, Any]) -> LineItem:
    """
    Agrega el producto a la lista (in place).

    Si ya hay una línea con el mismo SKU suma 1 a la cantidad y refresca
    nombre y precio desde el producto: el precio del catálogo siempre gana
    sobre el que quedó guardado en la línea.
    """
    prod = product if isinstance(product, Product) else Product.from_dict(product)
    idx = _find(items, prod.sku)
    if idx >= 0:
        it = items[idx]
        it.qty = as_number(nz(it.qty) + 1)
        it.price = nz(prod.price)
        it.name = prod.name
        return it

    it = LineItem.from_product(prod, qty=1)
    items.append(it)
    return it


def set_quantity(items: list[LineItem], sku: str, value: Any) -> LineItem | None:
    """Fija la cantidad de la línea; mínimo 1 (no numérico o < 1 => 1)."""
    idx = _find(items, sku)
    if idx < 0:
        return None
    items[idx].qty = normalize_qty(value)
    return items[idx]


def remove_item(items: list[LineItem], sku: str) -> bool:
    before = len(items)
    items[:] = [it for it in items if it.sku != sku]
    return len(items) != before


def compute_totals(
    items: Iterable[LineItem],
    *,
    apply_discount: bool = False,
    discount: Any = 0,
    has_shipping: bool = False,
    shipping: Any = 0,
) -> SaleTotals:
    """
    subtotal  = Σ precio * cantidad
    descuento = subtotal * discount / 100   (solo si apply_discount)
    total     = max(0, subtotal - descuento + envío)   (envío solo si has_shipping)

    Con el flag apagado el valor guardado de descuento/envío no influye.
    """
    subtotal = items_subtotal(items)

    pct = min(100.0, max(0.0, nz(discount))) if apply_discount else 0.0
    discount_amount = subtotal * pct / 100.0

    ship = max(0.0, nz(shipping)) if has_shipping else 0.0

    final_total = max(0.0, subtotal - discount_amount + ship)
    return SaleTotals(subtotal=subtotal, discount_amount=discount_amount, final_total=final_total)
