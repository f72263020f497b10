import os, re

from .config import app_home


def user_docs_root() -> str:
    root = app_home()
    os.makedirs(root, exist_ok=True)
    return root

def user_docs_dir(subfolder: str) -> str:
    d = os.path.join(user_docs_root(), subfolder)
    os.makedirs(d, exist_ok=True)
    return d

def data_dir() -> str:
    """Carpeta escribible para la base (app.sqlite3)."""
    return user_docs_dir("data")

def exports_dir() -> str:
    """Carpeta por defecto para PDFs y exportaciones JSON."""
    return user_docs_dir("presupuestos")

def safe_filename_part(text: str, default: str) -> str:
    """Deja solo [A-Za-z0-9_-]; si queda vacío devuelve default."""
    s = re.sub(r"[^A-Za-z0-9_-]+", "", str(text or ""))
    return s or default
