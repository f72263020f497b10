import os
import pandas as pd

from .errors import FormatError
from .utils import to_float

SPREADSHEET_EXTS = (".xlsx", ".xlsm", ".xls", ".csv")


def _cell_str(v) -> str:
    """Celda -> texto: NaN => "", 1001.0 => "1001"."""
    if v is None:
        return ""
    try:
        if pd.isna(v):
            return ""
    except (TypeError, ValueError):
        pass
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v).strip()


def _read_frame(path: str) -> pd.DataFrame:
    ext = os.path.splitext(path)[1].lower()
    if ext == ".csv":
        # sep=None => pandas detecta "," o ";"
        return pd.read_csv(path, sep=None, engine="python", dtype=object)
    return pd.read_excel(path, sheet_name=0, header=0, engine="openpyxl")


def leer_productos_planilla(path: str) -> pd.DataFrame:
    """
    Lee una planilla (xlsx/csv) de productos y devuelve un DataFrame con
    columnas sku, name, price. Las filas sin código ni nombre se descartan;
    la validación final (precio numérico, etc.) la hace el catálogo.
    """
    df = _read_frame(path)
    df = df.dropna(how="all")
    cols_lower = {str(c).strip().lower(): c for c in df.columns}

    def col(*cands):
        # Busca coincidencia exacta (normalizada a lower), luego por "contiene"
        for cnd in cands:
            cnd_l = cnd.lower()
            if cnd_l in cols_lower:
                return cols_lower[cnd_l]
        for key, orig in cols_lower.items():
            for cnd in cands:
                if cnd.lower() in key:
                    return orig
        return None

    col_sku    = col("sku", "codigo", "código", "cod.", "referencia")
    col_nombre = col("name", "nombre", "descripcion", "descripción", "producto")
    col_precio = col("price", "precio", "precio venta", "p. venta", "precio unitario")

    if not col_sku or not col_nombre or not col_precio:
        raise FormatError(
            "La planilla debe tener columnas de código (SKU), nombre y precio."
        )

    records = []
    for _, row in df.iterrows():
        sku = _cell_str(row.get(col_sku))
        nombre = _cell_str(row.get(col_nombre))
        if not sku and not nombre:
            continue
        records.append({
            "sku": sku,
            "name": nombre,
            "price": to_float(row.get(col_precio), float("nan")),
        })

    return pd.DataFrame(records, columns=["sku", "name", "price"])


def escribir_productos_planilla(path: str, products: list[dict]) -> str:
    """Exporta el catálogo a xlsx/csv (columnas sku, name, price)."""
    df = pd.DataFrame(products, columns=["sku", "name", "price"])
    ext = os.path.splitext(path)[1].lower()
    if ext == ".csv":
        df.to_csv(path, index=False, encoding="utf-8")
    else:
        df.to_excel(path, index=False, engine="openpyxl")
    return path
