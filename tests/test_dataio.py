import pandas as pd
import pytest

import presupuestos.dataio as dio
from presupuestos.errors import FormatError


def test_cell_str():
    assert dio._cell_str(None) == ""
    assert dio._cell_str(float("nan")) == ""
    assert dio._cell_str(1001.0) == "1001"
    assert dio._cell_str("  TC80 ") == "TC80"


def test_leer_planilla_detecta_columnas(monkeypatch):
    def fake_read_excel(path, sheet_name=0, header=0, engine=None):
        return pd.DataFrame({
            "Código": ["TC80", 1001.0, None],
            "Descripción": ["Termostato", "Relé", None],
            "Stock": [3, 4, None],
            "Precio Venta": [18500, "6.200", None],
        })

    monkeypatch.setattr(dio.pd, "read_excel", fake_read_excel)

    out = dio.leer_productos_planilla("fake.xlsx")
    assert list(out.columns) == ["sku", "name", "price"]
    assert len(out) == 2
    assert out.loc[0, "sku"] == "TC80"
    assert out.loc[1, "sku"] == "1001"
    assert out.loc[0, "price"] == 18500
    assert out.loc[1, "price"] == 6.2


def test_leer_planilla_por_contiene(monkeypatch):
    def fake_read_excel(path, sheet_name=0, header=0, engine=None):
        return pd.DataFrame({
            "Cod. interno": ["A"],
            "Nombre del producto": ["Uno"],
            "Precio unitario $": [10],
        })

    monkeypatch.setattr(dio.pd, "read_excel", fake_read_excel)
    out = dio.leer_productos_planilla("fake.xlsx")
    assert out.to_dict("records") == [{"sku": "A", "name": "Uno", "price": 10.0}]


def test_leer_planilla_sin_precio(monkeypatch):
    def fake_read_excel(path, sheet_name=0, header=0, engine=None):
        return pd.DataFrame({"Codigo": ["A"], "Nombre": ["Uno"]})

    monkeypatch.setattr(dio.pd, "read_excel", fake_read_excel)
    with pytest.raises(FormatError):
        dio.leer_productos_planilla("fake.xlsx")


def test_escribir_csv(tmp_path):
    path = dio.escribir_productos_planilla(str(tmp_path / "p.csv"), [{"sku": "A", "name": "Uno", "price": 10}])
    assert open(path, encoding="utf-8").read().splitlines() == ["sku,name,price", "A,Uno,10"]
