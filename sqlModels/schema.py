# sqlModels/schema.py
from __future__ import annotations

SCHEMA_VERSION = 2

# meta siempre existe: guarda schema_version
META_DDL = """
CREATE TABLE IF NOT EXISTS meta (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""

# v1: una fila por colección (catálogo, ventas, reparaciones, borradores)
STORAGE_DDL = """
CREATE TABLE IF NOT EXISTS storage (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""

# v2
STORAGE_UPDATED_INDEX = "CREATE INDEX IF NOT EXISTS idx_storage_updated ON storage(updated_at)"
