from __future__ import annotations
import os, json
from typing import Dict, Any, List

# --------------------------
# Rutas
# --------------------------
def _documents_dir() -> str:
    home = os.path.expanduser("~")
    if os.name == "nt":
        home = os.environ.get("USERPROFILE") or home
    return os.path.join(home, "Documents")


def app_home() -> str:
    """
    Raíz de datos del usuario.
    PRESUPUESTOS_HOME (si está definida) pisa a Documentos/Presupuestos.
    """
    env = (os.environ.get("PRESUPUESTOS_HOME") or "").strip()
    if env:
        return os.path.abspath(os.path.expanduser(env))
    return os.path.join(_documents_dir(), "Presupuestos")


# --------------------------
# Archivo de configuración
# --------------------------
CONFIG_NAMES = ("config.json", "app_config.json")


def _config_search_dirs() -> List[str]:
    # raíz de datos, cwd y carpeta del paquete (sin repetir)
    here = os.path.dirname(os.path.abspath(__file__))
    dirs = [os.path.join(base, "config") for base in (app_home(), os.getcwd(), here)]
    return list(dict.fromkeys(dirs))


def find_config_path() -> str:
    """Primer config.json/app_config.json existente; si no hay, dónde debería ir."""
    dirs = _config_search_dirs()
    for d in dirs:
        for name in CONFIG_NAMES:
            p = os.path.join(d, name)
            if os.path.isfile(p):
                return p
    return os.path.join(dirs[0], CONFIG_NAMES[0])


CONFIG_PATH = find_config_path()
CONFIG_DIR = os.path.dirname(CONFIG_PATH)

# --------------------------
# Defaults + constantes exportadas
# --------------------------
DEFAULT_NOTES = "Este presupuesto posee una validez de 7 días a partir de su emisión."

DEFAULT_CONFIG: Dict[str, Any] = {
    "business_name": "Presupuestos",
    "currency": "ARS",
    "sale_prefix": "VEN",
    "repair_prefix": "REP",
    "max_date_days": 50,         # fecha del presupuesto: hoy .. hoy + N
    "share_max_items": 12,       # ítems listados en el texto para compartir
    "default_notes": DEFAULT_NOTES,
    "db_path": "",               # vacío => DATA_DIR/app.sqlite3

    # logging opcional:
    # "log_dir": "C:/Users/<usuario>/Documents/Presupuestos/logs"
    # "log_level": "INFO"  # ERROR, WARNING, INFO, DEBUG
}

FISCAL_OPTIONS = [
    "Consumidor Final",
    "Responsable Inscripto",
    "Monotributista",
    "Exento",
    "No Responsable",
]

# Claves de almacenamiento (una colección por clave)
KEY_CATALOG = "product_catalog_v1"
KEY_SALE_QUOTES = "quotes_v2"
KEY_REPAIR_QUOTES = "repairs_v1"
KEY_DRAFT_SALE = "draft_sale_v1"
KEY_DRAFT_REPAIR = "draft_repair_v1"

# SKU de la línea sintética de mano de obra (reparaciones)
LABOR_SKU = "MO"


def _load_json(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, ValueError):
        return {}


def _positive_int(raw: Dict[str, Any], key: str, default: int) -> int:
    try:
        v = int(raw.get(key, default))
    except (TypeError, ValueError):
        return default
    return v if v > 0 else default


def load_app_config(path: str | None = None) -> Dict[str, Any]:
    cfg = DEFAULT_CONFIG.copy()
    raw = _load_json(path or CONFIG_PATH)
    if raw:
        for k in ("business_name", "currency", "default_notes", "db_path"):
            if k in raw and isinstance(raw[k], str):
                cfg[k] = raw[k].strip()

        for k in ("sale_prefix", "repair_prefix"):
            val = str(raw.get(k, "") or "").strip().upper()
            if val:
                cfg[k] = val

        cfg["max_date_days"] = _positive_int(raw, "max_date_days", cfg["max_date_days"])
        cfg["share_max_items"] = _positive_int(raw, "share_max_items", cfg["share_max_items"])

        # logging (opcionales)
        if "log_dir" in raw and str(raw["log_dir"]).strip():
            cfg["log_dir"] = str(raw["log_dir"]).strip()
        if "log_level" in raw and str(raw["log_level"]).strip():
            cfg["log_level"] = str(raw["log_level"]).strip().upper()
    return cfg


APP_CONFIG = load_app_config()

# --------------------------
# Parámetros principales
# --------------------------
BUSINESS_NAME: str   = APP_CONFIG["business_name"]
APP_CURRENCY: str    = APP_CONFIG["currency"]
SALE_PREFIX: str     = APP_CONFIG["sale_prefix"]
REPAIR_PREFIX: str   = APP_CONFIG["repair_prefix"]
MAX_DATE_DAYS: int   = APP_CONFIG["max_date_days"]
SHARE_MAX_ITEMS: int = APP_CONFIG["share_max_items"]
NOTES_DEFAULT: str   = APP_CONFIG["default_notes"]
DB_PATH_CONFIG: str  = APP_CONFIG["db_path"]


# --------------------------
# Logging (rutas y nivel)
# --------------------------
def _default_log_dir() -> str:
    return os.path.join(app_home(), "logs")


_raw_log_dir = (os.environ.get("LOG_DIR") or APP_CONFIG.get("log_dir") or "").strip()
if _raw_log_dir:
    LOG_DIR: str = os.path.abspath(os.path.expanduser(os.path.expandvars(_raw_log_dir)))
else:
    LOG_DIR: str = _default_log_dir()

LOG_LEVEL: str = str(os.environ.get("LOG_LEVEL") or APP_CONFIG.get("log_level", "INFO")).strip().upper()
if LOG_LEVEL not in ("ERROR", "WARNING", "INFO", "DEBUG"):
    LOG_LEVEL = "INFO"


__all__ = [
    "CONFIG_DIR", "CONFIG_PATH", "APP_CONFIG", "DEFAULT_CONFIG", "DEFAULT_NOTES",
    "BUSINESS_NAME", "APP_CURRENCY", "SALE_PREFIX", "REPAIR_PREFIX",
    "MAX_DATE_DAYS", "SHARE_MAX_ITEMS", "NOTES_DEFAULT", "DB_PATH_CONFIG",
    "FISCAL_OPTIONS", "LABOR_SKU",
    "KEY_CATALOG", "KEY_SALE_QUOTES", "KEY_REPAIR_QUOTES", "KEY_DRAFT_SALE", "KEY_DRAFT_REPAIR",
    "app_home", "find_config_path", "load_app_config",
    "LOG_DIR", "LOG_LEVEL",
]
