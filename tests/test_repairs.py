import presupuestos.repairs as rp
from presupuestos.models import Equipment, LineItem


def _eq(id_, mano_obra=50, repuestos=None, **kw):
    return Equipment(
        id=id_,
        marca=kw.get("marca", "Gafa"),
        modelo=kw.get("modelo", "X1"),
        serie=kw.get("serie", "S123"),
        mano_obra=mano_obra,
        repuestos=repuestos if repuestos is not None else [LineItem("TC80", "Termostato", 25, 1)],
    )


def test_totales_por_equipo_y_presupuesto():
    e1, e2 = _eq("e1"), _eq("e2")
    assert rp.equipment_total(e1) == 75
    t = rp.compute_repair_totals([e1, e2])
    assert t.subtotal == 150
    assert t.final_total == t.subtotal


def test_mano_obra_negativa_no_suma():
    assert rp.equipment_total(_eq("e1", mano_obra=-100)) == 25


def test_flatten_mano_de_obra_primero():
    items = rp.flatten([_eq("e1")])
    assert [it.sku for it in items] == ["MO", "TC80"]
    assert items[0].name == "Mano de obra — Gafa X1 (S123)"
    assert items[0].price == 50 and items[0].qty == 1
    assert items[1].name == "Termostato — Gafa X1"


def test_flatten_sin_mano_de_obra_ni_datos():
    eq = Equipment(id="e1", repuestos=[LineItem("A", "Parte", 10, 2)])
    items = rp.flatten([eq])
    assert len(items) == 1
    assert items[0].name == "Parte —"
    assert items[0].qty == 2


def test_edicion_de_equipos(ids):
    eqs = []
    e1 = rp.add_equipment(eqs, ids)
    e2 = rp.add_equipment(eqs, ids)
    assert [e.id for e in eqs] == ["id-1", "id-2"]
    assert rp.find_equipment(eqs, "id-2") is e2

    assert rp.remove_equipment(eqs, "id-1") is True
    assert rp.remove_equipment(eqs, "id-1") is False
    assert eqs == [e2]
    assert e1.mano_obra == 0


def test_repuestos_de_un_equipo():
    eq = Equipment(id="e1")
    rp.add_repuesto(eq, {"sku": "TC80", "name": "Termostato", "price": 10})
    rp.add_repuesto(eq, {"sku": "TC80", "name": "Termostato", "price": 12})
    assert eq.repuestos[0].qty == 2
    assert eq.repuestos[0].price == 12

    rp.set_repuesto_qty(eq, "TC80", 0)
    assert eq.repuestos[0].qty == 1

    assert rp.remove_repuesto(eq, "TC80") is True
    assert eq.repuestos == []


def test_equipment_label():
    assert rp.equipment_label(Equipment(id="e", marca="Gafa", serie="9")) == "Gafa 9"
