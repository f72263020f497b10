"""
Tipos de línea compartidos por ventas y reparaciones.

Los nombres de campo persistidos (``to_dict``) son los del JSON guardado
(``manoObra``, ``repuestos``...), así se pueden leer datos existentes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from .utils import clean_str, new_id, nz, to_float


def as_number(v: float) -> float | int:
    """2.0 -> 2 (para que el JSON quede como lo escribiría un humano)."""
    f = float(v)
    return int(f) if f.is_integer() else f


def normalize_qty(value: Any) -> float | int:
    """Cantidad mínima 1: no numérico o < 1 => 1."""
    q = to_float(value, 1.0)
    if q < 1:
        q = 1.0
    return as_number(q)


@dataclass
class Product:
    sku: str
    name: str
    price: float = 0.0

    @property
    def key(self) -> str:
        return self.sku.lower()

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Product":
        """Normaliza sin validar (ver catalog.is_valid)."""
        d = d if isinstance(d, Mapping) else {}
        return cls(
            sku=clean_str(d.get("sku")),
            name=clean_str(d.get("name")),
            price=to_float(d.get("price"), float("nan")),
        )

    def to_dict(self) -> dict:
        return {"sku": self.sku, "name": self.name, "price": as_number(self.price)}


@dataclass
class LineItem:
    sku: str
    name: str
    price: float = 0.0
    qty: float = 1

    @property
    def total(self) -> float:
        return nz(self.price) * nz(self.qty)

    @classmethod
    def from_product(cls, product: Product | Mapping[str, Any], qty: float = 1) -> "LineItem":
        p = product if isinstance(product, Product) else Product.from_dict(product)
        return cls(sku=p.sku, name=p.name, price=nz(p.price), qty=qty)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "LineItem":
        d = d if isinstance(d, Mapping) else {}
        return cls(
            sku=clean_str(d.get("sku")),
            name=clean_str(d.get("name")),
            price=to_float(d.get("price"), 0.0),
            qty=normalize_qty(d.get("qty")),
        )

    def to_dict(self) -> dict:
        return {
            "sku": self.sku,
            "name": self.name,
            "price": as_number(nz(self.price)),
            "qty": as_number(nz(self.qty, 1.0)),
        }


@dataclass
class Equipment:
    """Un equipo a reparar: datos, mano de obra y repuestos propios."""
    id: str = field(default_factory=new_id)
    marca: str = ""
    modelo: str = ""
    serie: str = ""
    descripcion: str = ""
    mano_obra: float = 0.0
    repuestos: list[LineItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any], id_factory: Callable[[], str] = new_id) -> "Equipment":
        d = d if isinstance(d, Mapping) else {}
        reps = d.get("repuestos")
        return cls(
            # el id es local al presupuesto: si falta se genera otro
            id=clean_str(d.get("id")) or id_factory(),
            marca=clean_str(d.get("marca")),
            modelo=clean_str(d.get("modelo")),
            serie=clean_str(d.get("serie")),
            descripcion=clean_str(d.get("descripcion")),
            mano_obra=max(0.0, to_float(d.get("manoObra"), 0.0)),
            repuestos=[LineItem.from_dict(r) for r in reps] if isinstance(reps, list) else [],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "marca": self.marca,
            "modelo": self.modelo,
            "serie": self.serie,
            "descripcion": self.descripcion,
            "manoObra": as_number(nz(self.mano_obra)),
            "repuestos": [r.to_dict() for r in self.repuestos],
        }
