import os
import pytest
from reportlab.pdfgen import canvas

import presupuestos.pdfgen as pg
from presupuestos.models import Equipment, LineItem
from presupuestos.quotes import RepairQuote, SaleQuote


def _sale(n_items=2):
    return SaleQuote(
        quote_number="VEN-0703-A",
        date="2024-03-07",
        client_name="Juan Perez",
        items=[LineItem(f"S{i}", f"Producto número {i} con un nombre bastante largo para probar el wrap", 100, 1)
               for i in range(n_items)],
        apply_discount=True,
        discount=10,
        has_shipping=True,
        shipping=20,
        notes="Entrega en 48 hs.",
    )


def _repair():
    return RepairQuote(
        quote_number="REP-0307-A",
        date="2024-03-07",
        client_name="Ana",
        equipments=[
            Equipment(id="e1", marca="Gafa", modelo="X1", serie="S1", descripcion="No enfría",
                      mano_obra=50, repuestos=[LineItem("TC80", "Termostato", 25, 1)]),
            Equipment(id="e2", marca="Patrick", mano_obra=80),
        ],
    )


@pytest.fixture
def page_counter(monkeypatch):
    calls = {"n": 0}
    original = canvas.Canvas.showPage

    def spy(self):
        calls["n"] += 1
        return original(self)

    monkeypatch.setattr(canvas.Canvas, "showPage", spy)
    return calls


def test_pdf_venta(page_counter):
    data = pg.render_quote_pdf(_sale())
    assert data.startswith(b"%PDF")
    assert page_counter["n"] == 1


def test_pdf_venta_pagina_muchos_items(page_counter):
    data = pg.render_quote_pdf(_sale(n_items=120))
    assert data.startswith(b"%PDF")
    assert page_counter["n"] >= 3


def test_pdf_reparacion(page_counter):
    data = pg.render_quote_pdf(_repair())
    assert data.startswith(b"%PDF")
    assert page_counter["n"] == 1


def test_pdf_desde_dict():
    d = _repair().to_dict()
    d.pop("type")
    assert pg.render_quote_pdf(d, kind="reparacion").startswith(b"%PDF")


def test_pdf_tipo_invalido():
    with pytest.raises(TypeError):
        pg.render_quote_pdf(["nada"])


def test_wrap_words():
    c = canvas.Canvas(os.devnull)
    lines = pg._wrap_words(c, "uno dos tres cuatro cinco seis", 40, "Helvetica", 9)
    assert len(lines) > 1
    assert " ".join(lines) == "uno dos tres cuatro cinco seis"
    assert pg._wrap_words(c, "", 40, "Helvetica", 9) == [""]


def test_save_quote_pdf(tmp_path):
    path = pg.save_quote_pdf(_sale(), out_dir=str(tmp_path))
    assert os.path.basename(path) == "VEN-0703-A-JuanPerez.pdf"
    with open(path, "rb") as fh:
        assert fh.read(4) == b"%PDF"


def test_pdf_filename_sin_cliente():
    assert pg.pdf_filename(RepairQuote(quote_number="REP 1/2")) == "REP12-cliente.pdf"


def test_pdf_reparacion_pagina_muchos_equipos(page_counter):
    q = _repair()
    q.equipments = [
        Equipment(id=f"e{i}", marca="Gafa", modelo=f"M{i}", descripcion="Falla " * 40,
                  mano_obra=10, repuestos=[LineItem("TC80", "Termostato", 25, 1)])
        for i in range(25)
    ]
    assert pg.render_quote_pdf(q).startswith(b"%PDF")
    assert page_counter["n"] >= 3
