# presupuestos/catalog.py
from __future__ import annotations

import json
import math
import os
from typing import Any, Iterable, Mapping

from .config import KEY_CATALOG
from .dataio import SPREADSHEET_EXTS, escribir_productos_planilla, leer_productos_planilla
from .errors import FormatError, ParseError, ValidationError
from .logging_setup import get_logger
from .models import Product
from .storage import KeyValueStore, dumps_snapshot, read_json, write_json

log = get_logger(__name__)

# Catálogo inicial (se siembra si no hay catálogo o el guardado es inválido)
DEFAULT_PRODUCTS: list[dict] = [
    {"sku": "TC80", "name": "Termostato TC80", "price": 18500},
    {"sku": "TC90", "name": "Termostato TC90 digital", "price": 24900},
    {"sku": "RL-10", "name": "Relé de arranque 1/10 HP", "price": 6200},
    {"sku": "CAP-35", "name": "Capacitor de marcha 35 uF", "price": 7400},
    {"sku": "FZ-01", "name": "Forzador 10 W con paleta", "price": 15800},
    {"sku": "RES-D", "name": "Resistencia de descongelamiento", "price": 21300},
    {"sku": "BUL-26", "name": "Bulbo sensor 2,6 m", "price": 4900},
    {"sku": "GAS-134", "name": "Carga de gas R134a", "price": 32000},
]


def normalize_product(p: Product | Mapping[str, Any]) -> Product:
    """Trim de strings y precio a float (NaN si no es numérico)."""
    if isinstance(p, Product):
        p = p.to_dict()
    return Product.from_dict(p)


def validate_product(p: Product) -> Product:
    if not p.sku:
        raise ValidationError("Producto sin SKU")
    if not p.name:
        raise ValidationError(f"Producto {p.sku} sin nombre")
    if not (isinstance(p.price, float) and math.isfinite(p.price)) or p.price < 0:
        raise ValidationError(f"Producto {p.sku}: precio inválido")
    return p


def is_valid(p: Product) -> bool:
    try:
        validate_product(p)
    except ValidationError:
        return False
    return True


def clean_products(items: Iterable[Any]) -> list[Product]:
    """Normaliza y descarta silenciosamente las entradas inválidas."""
    out: list[Product] = []
    for raw in items:
        if not isinstance(raw, (Product, Mapping)):
            continue
        try:
            out.append(validate_product(normalize_product(raw)))
        except ValidationError as e:
            log.debug("Se descarta: %s", e)
    return out


class CatalogStore:
    """
    Catálogo de productos (SKU, nombre, precio) persistido bajo una clave.

    La identidad de un producto es su SKU en minúsculas. Toda operación lee
    la lista completa, la modifica y la vuelve a escribir entera.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = KEY_CATALOG,
        defaults: Iterable[Mapping[str, Any]] | None = None,
    ):
        self.store = store
        self.key = key
        self.defaults = list(DEFAULT_PRODUCTS if defaults is None else defaults)

    # ---------- persistencia ----------
    def _save(self, products: list[Product]) -> None:
        write_json(self.store, self.key, [p.to_dict() for p in products])

    def _seed(self) -> list[Product]:
        seeded = clean_products(self.defaults)
        self._save(seeded)
        return seeded

    def load_or_seed(self) -> tuple[list[Product], bool]:
        """
        (productos, sembrado). Si lo guardado falta, está corrupto, vacío o
        sin ninguna entrada válida, siembra los defaults y los persiste.
        """
        try:
            data = read_json(self.store, self.key)
        except ParseError as e:
            log.warning("%s; se restaura el catálogo por defecto", e)
            data = None

        if isinstance(data, list) and data:
            clean = clean_products(data)
            if clean:
                return clean, False

        log.info("Catálogo vacío o inválido: se siembran %d productos por defecto", len(self.defaults))
        return self._seed(), True

    # ---------- API ----------
    def list(self) -> list[Product]:
        return self.load_or_seed()[0]

    def find(self, sku: str) -> Product | None:
        target = str(sku or "").strip().lower()
        for p in self.list():
            if p.key == target:
                return p
        return None

    def search(self, query: str, limit: int = 30) -> list[Product]:
        """Sugerencias: SKU o nombre que contengan el texto (sin distinguir mayúsculas)."""
        q = str(query or "").strip().lower()
        if not q:
            return []
        hits = [p for p in self.list() if q in p.sku.lower() or q in p.name.lower()]
        return hits[: max(0, int(limit))]

    def replace_all(self, products: Iterable[Any]) -> int:
        """Reemplaza el catálogo completo. Devuelve cuántos productos válidos quedaron."""
        if isinstance(products, (str, bytes, Mapping)) or not isinstance(products, Iterable):
            raise FormatError("Se esperaba una lista de productos.")
        clean = clean_products(products)
        self._save(clean)
        return len(clean)

    def upsert(self, product: Product | Mapping[str, Any]) -> Product | None:
        """
        Inserta o actualiza por SKU (sin distinguir mayúsculas).
        Producto inválido => no hace nada y devuelve None.
        """
        norm = normalize_product(product)
        if not is_valid(norm):
            return None

        products = self.list()
        for idx, p in enumerate(products):
            if p.key == norm.key:
                merged = Product.from_dict({**p.to_dict(), **norm.to_dict()})
                products[idx] = merged
                self._save(products)
                return merged

        products.append(norm)
        self._save(products)
        return norm

    def remove(self, sku: str) -> bool:
        target = str(sku or "").strip().lower()
        products = self.list()
        kept = [p for p in products if p.key != target]
        if len(kept) == len(products):
            return False
        self._save(kept)
        return True

    def reset_to_defaults(self) -> list[Product]:
        log.info("Catálogo restablecido a valores por defecto")
        return self._seed()

    def clear(self) -> None:
        """Vacía el catálogo (la próxima lectura vuelve a sembrar)."""
        self.store.delete(self.key)

    # ---------- importar / exportar ----------
    def export_snapshot(self) -> bytes:
        return dumps_snapshot([p.to_dict() for p in self.list()])

    def import_snapshot(self, data: bytes | str) -> dict:
        """
        Reemplaza el catálogo con el arreglo JSON recibido.
        FormatError si no es JSON o no es un arreglo; las entradas inválidas
        se descartan sin contarse.
        """
        try:
            parsed = json.loads(data)
        except (TypeError, ValueError) as e:
            raise FormatError(f"El archivo no es JSON válido: {e}") from e
        if not isinstance(parsed, list):
            raise FormatError("El JSON debe ser un array de productos.")
        count = self.replace_all(parsed)
        log.info("Catálogo importado: %d productos válidos de %d", count, len(parsed))
        return {"count": count}

    def import_file(self, path: str, *, merge: bool = False) -> dict:
        """
        Importa desde .json (arreglo) o desde una planilla xlsx/csv.
        merge=True hace upsert de cada fila en lugar de reemplazar.
        """
        ext = os.path.splitext(path)[1].lower()
        if ext in SPREADSHEET_EXTS:
            rows = leer_productos_planilla(path).to_dict("records")
        else:
            with open(path, "rb") as fh:
                raw = fh.read()
            if not merge:
                return self.import_snapshot(raw)
            try:
                rows = json.loads(raw)
            except ValueError as e:
                raise FormatError(f"El archivo no es JSON válido: {e}") from e
            if not isinstance(rows, list):
                raise FormatError("El JSON debe ser un array de productos.")

        if not merge:
            count = self.replace_all(rows)
            log.info("Catálogo importado desde %s: %d productos", path, count)
            return {"count": count}

        count = sum(1 for r in rows if isinstance(r, Mapping) and self.upsert(r) is not None)
        log.info("Catálogo combinado desde %s: %d productos", path, count)
        return {"count": count}

    def export_file(self, path: str) -> str:
        ext = os.path.splitext(path)[1].lower()
        if ext in SPREADSHEET_EXTS:
            return escribir_productos_planilla(path, [p.to_dict() for p in self.list()])
        with open(path, "wb") as fh:
            fh.write(self.export_snapshot())
        return path
