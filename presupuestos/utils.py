import datetime
import math
import time
import uuid


def to_float(val, default=0.0) -> float:
    """
    Convierte a float de forma segura:
    - None / "" / NaN / inf / basura => default
    - acepta strings con espacios o separador de miles ","
    """
    try:
        if val is None or isinstance(val, bool):
            return default
        if isinstance(val, str):
            txt = val.strip().replace(",", "").replace(" ", "")
            if not txt:
                return default
            f = float(txt)
        else:
            f = float(val)
        if math.isnan(f) or math.isinf(f):
            return default
        return f
    except (TypeError, ValueError):
        return default


def nz(x, default=0.0):
    try:
        f = float(x)
        if math.isnan(f) or math.isinf(f):
            return default
        return f
    except (TypeError, ValueError):
        return default


def clean_str(v) -> str:
    return "" if v is None else str(v).strip()


def now_iso() -> str:
    """Timestamp ISO-8601 en UTC con milisegundos (createdAt)."""
    return datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    """Token único para presupuestos y equipos."""
    return str(uuid.uuid4())


def fmt_money(n: float, symbol: str = "$") -> str:
    """
    Formato es-AR: separador de miles "." y decimales ",".
    Ej: 1234.5 -> "$ 1.234,50"
    """
    n = nz(n, 0.0)
    txt = f"{abs(n):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if n < 0 else ""
    return f"{sign}{symbol} {txt}"
