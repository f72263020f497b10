import pytest

import presupuestos.pricing as pr
from presupuestos.models import LineItem, Product


def _items():
    return [
        LineItem(sku="TC80", name="Termostato", price=100, qty=2),
        LineItem(sku="RL-10", name="Relé", price=50, qty=1),
    ]


def test_compute_totals_descuento_y_envio():
    t = pr.compute_totals(_items(), apply_discount=True, discount=10, has_shipping=True, shipping=20)
    assert t.subtotal == 250
    assert t.discount_amount == pytest.approx(25)
    assert t.final_total == pytest.approx(245)


def test_compute_totals_flags_apagados_ignoran_valores():
    t = pr.compute_totals(_items(), apply_discount=False, discount=50, has_shipping=False, shipping=999)
    assert t.discount_amount == 0
    assert t.final_total == t.subtotal == 250


def test_compute_totals_clamps():
    # descuento > 100 => 100%; envío negativo => 0
    t = pr.compute_totals(_items(), apply_discount=True, discount=150, has_shipping=True, shipping=-30)
    assert t.discount_amount == pytest.approx(250)
    assert t.final_total == 0

    t = pr.compute_totals(_items(), apply_discount=True, discount=-5)
    assert t.final_total == 250


def test_compute_totals_valores_no_numericos():
    t = pr.compute_totals(_items(), apply_discount=True, discount="abc", has_shipping=True, shipping=None)
    assert t.final_total == 250


def test_compute_totals_sin_items():
    t = pr.compute_totals([], has_shipping=True, shipping=15)
    assert t.subtotal == 0
    assert t.final_total == 15


def test_add_or_increment_nuevo_y_repetido():
    items = []
    pr.add_or_increment(items, Product(sku="TC80", name="Termostato", price=100.0))
    it = pr.add_or_increment(items, {"sku": "TC80", "name": "Termostato TC80", "price": 120})

    assert len(items) == 1
    assert it.qty == 2
    # el precio del catálogo pisa al de la línea
    assert it.price == 120
    assert it.name == "Termostato TC80"


def test_add_or_increment_sku_distinto_por_mayusculas():
    items = []
    pr.add_or_increment(items, Product(sku="TC80", name="A", price=1.0))
    pr.add_or_increment(items, Product(sku="tc80", name="A", price=1.0))
    assert len(items) == 2


@pytest.mark.parametrize("value, expected", [("3", 3), (0, 1), (-2, 1), ("abc", 1), (2.5, 2.5)])
def test_set_quantity_minimo_uno(value, expected):
    items = _items()
    it = pr.set_quantity(items, "TC80", value)
    assert it.qty == expected


def test_set_quantity_sku_inexistente():
    assert pr.set_quantity(_items(), "NOPE", 4) is None


def test_remove_item():
    items = _items()
    assert pr.remove_item(items, "TC80") is True
    assert [it.sku for it in items] == ["RL-10"]
    assert pr.remove_item(items, "TC80") is False
