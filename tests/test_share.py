from presupuestos.models import Equipment, LineItem
from presupuestos.quotes import RepairQuote, SaleQuote
from presupuestos.share import (
    mailto_url,
    repair_share_text,
    sale_share_text,
    share_text,
    whatsapp_url,
)


def _sale(**kw):
    base = dict(
        quote_number="VEN-0703-A",
        date="2024-03-07",
        client_name="Juan",
        items=[LineItem("TC80", "Termostato", 100, 2), LineItem("RL-10", "Relé", 50, 1)],
    )
    base.update(kw)
    return SaleQuote(**base)


def test_texto_venta_con_descuento_y_envio():
    txt = sale_share_text(_sale(apply_discount=True, discount=10, has_shipping=True, shipping=20))
    assert txt.startswith("*Presupuesto de Venta*")
    assert "N°: VEN-0703-A" in txt
    assert "• TC80 — Termostato x2 @ $ 100,00 = $ 200,00" in txt
    assert "Subtotal: $ 250,00" in txt
    assert "Descuento (10%): -$ 25,00" in txt
    assert "Envío: $ 20,00" in txt
    assert txt.rstrip().endswith("TOTAL: *$ 245,00*")


def test_texto_venta_omite_vacios():
    txt = sale_share_text(_sale())
    assert "Email:" not in txt
    assert "Descuento" not in txt
    assert "Envío" not in txt
    assert "\n\n" not in txt


def test_texto_venta_trunca_items():
    items = [LineItem(f"S{i}", f"Item {i}", 1, 1) for i in range(5)]
    txt = sale_share_text(_sale(items=items), max_items=2)
    assert "S1 — Item 1" in txt
    assert "S2 — Item 2" not in txt
    assert "… (3 más)" in txt


def test_texto_reparacion_no_modifica_el_presupuesto():
    q = RepairQuote(
        quote_number="REP-0307-A",
        client_name="Ana",
        equipments=[Equipment(id="e1", marca="Gafa", modelo="X1", descripcion="No enfría", mano_obra=50,
                              repuestos=[LineItem("TC80", "Termostato", 25, 1)])],
    )
    txt = repair_share_text(q)
    assert "• E1: Gafa X1 — No enfría" in txt
    assert "*Ítems (2)*" in txt
    assert "TOTAL: *$ 75,00*" in txt
    assert q.final_total == 0
    assert q.items == []
    assert share_text(q) == txt


def test_whatsapp_url():
    assert whatsapp_url("hola mundo", "+54 9 11 1234-5678") == "https://wa.me/5491112345678?text=hola%20mundo"
    assert whatsapp_url("a&b") == "https://api.whatsapp.com/send?text=a%26b"


def test_mailto_url():
    assert mailto_url("Presupuesto 1", "x=1") == "mailto:?subject=Presupuesto%201&body=x%3D1"



def test_envio_negativo_se_muestra_en_cero():
    txt = sale_share_text(_sale(has_shipping=True, shipping=-15))
    assert "Envío: $ 0,00" in txt
    assert "TOTAL: *$ 250,00*" in txt
