import json
import pytest

from presupuestos.catalog import DEFAULT_PRODUCTS, CatalogStore, clean_products, is_valid
from presupuestos.config import KEY_CATALOG
from presupuestos.errors import FormatError
from presupuestos.models import Product
from presupuestos.storage import MemoryStore


def test_siembra_si_no_hay_catalogo(store):
    cat = CatalogStore(store)
    products, seeded = cat.load_or_seed()
    assert seeded is True
    assert len(products) == len(DEFAULT_PRODUCTS)
    # quedó persistido
    assert len(json.loads(store.get(KEY_CATALOG))) == len(DEFAULT_PRODUCTS)

    _, seeded = cat.load_or_seed()
    assert seeded is False


@pytest.mark.parametrize("raw", ["{no es json", "[]", '{"sku": "A"}', '[{"sku": "", "name": "x", "price": 1}]'])
def test_siembra_si_lo_guardado_no_sirve(store, raw):
    store.set(KEY_CATALOG, raw)
    products, seeded = CatalogStore(store).load_or_seed()
    assert seeded is True
    assert products[0].sku == DEFAULT_PRODUCTS[0]["sku"]


def test_clean_products_normaliza_y_descarta():
    out = clean_products([
        {"sku": "  A1 ", "name": " Uno ", "price": "10"},
        {"sku": "B", "name": "Dos", "price": "caro"},
        {"sku": "C", "name": "Tres", "price": -1},
        "basura",
    ])
    assert out == [Product(sku="A1", name="Uno", price=10.0)]


def test_is_valid_precio_cero():
    assert is_valid(Product(sku="A", name="a", price=0.0))


def test_upsert_idempotente(store):
    cat = CatalogStore(store, defaults=[{"sku": "A", "name": "a", "price": 1}])
    p = {"sku": "NEW", "name": "Nuevo", "price": 99}
    cat.upsert(p)
    cat.upsert(p)
    skus = [x.sku for x in cat.list()]
    assert skus == ["A", "NEW"]


def test_upsert_actualiza_sin_distinguir_mayusculas(store):
    cat = CatalogStore(store, defaults=[{"sku": "TC80", "name": "Termostato", "price": 100}])
    merged = cat.upsert({"sku": "tc80", "name": "Termostato nuevo", "price": 150})
    assert merged.price == 150
    products = cat.list()
    assert len(products) == 1
    assert products[0].name == "Termostato nuevo"


def test_upsert_invalido_no_escribe(store):
    cat = CatalogStore(store)
    cat.list()
    before = store.get(KEY_CATALOG)
    assert cat.upsert({"sku": "X", "name": "", "price": 5}) is None
    assert cat.upsert({"sku": "X", "name": "x", "price": "NaN"}) is None
    assert store.get(KEY_CATALOG) == before


def test_remove_y_find(store):
    cat = CatalogStore(store)
    assert cat.find("tc80").sku == "TC80"
    assert cat.remove("TC80") is True
    assert cat.find("TC80") is None
    assert cat.remove("TC80") is False


def test_search(store):
    cat = CatalogStore(store)
    assert {p.sku for p in cat.search("termo")} == {"TC80", "TC90"}
    assert [p.sku for p in cat.search("cap-")] == ["CAP-35"]
    assert cat.search("   ") == []
    assert len(cat.search("e", limit=2)) == 2


def test_replace_all_rechaza_no_lista(store):
    with pytest.raises(FormatError):
        CatalogStore(store).replace_all({"sku": "A"})


def test_export_import_snapshot(store):
    cat = CatalogStore(store)
    cat.upsert({"sku": "EXTRA", "name": "Extra", "price": 1.5})
    snap = cat.export_snapshot()

    other = CatalogStore(MemoryStore())
    assert other.import_snapshot(snap) == {"count": len(DEFAULT_PRODUCTS) + 1}
    assert [p.to_dict() for p in other.list()] == [p.to_dict() for p in cat.list()]


def test_import_snapshot_descarta_invalidos(store):
    data = json.dumps([
        {"sku": "A", "name": "a", "price": "x"},
        {"sku": "B", "name": "b", "price": 5},
    ])
    assert CatalogStore(store).import_snapshot(data) == {"count": 1}


@pytest.mark.parametrize("data", [b"no json", b'{"sku": "A"}', b'"texto"'])
def test_import_snapshot_formato_invalido(store, data):
    cat = CatalogStore(store)
    cat.list()
    before = store.get(KEY_CATALOG)
    with pytest.raises(FormatError):
        cat.import_snapshot(data)
    assert store.get(KEY_CATALOG) == before


def test_import_file_csv(store, tmp_path):
    path = tmp_path / "productos.csv"
    path.write_text("codigo;nombre;precio\nA1;Uno;10\nB2;Dos;20.5\n", encoding="utf-8")

    res = CatalogStore(store).import_file(str(path))
    assert res == {"count": 2}
    assert [(p.sku, p.price) for p in CatalogStore(store).list()] == [("A1", 10.0), ("B2", 20.5)]


def test_import_file_json_merge(store, tmp_path):
    path = tmp_path / "productos.json"
    path.write_text(json.dumps([{"sku": "TC80", "name": "Termostato", "price": 1}, {"sku": "Z", "name": "z", "price": 2}]))

    cat = CatalogStore(store)
    assert cat.import_file(str(path), merge=True) == {"count": 2}
    assert len(cat.list()) == len(DEFAULT_PRODUCTS) + 1
    assert cat.find("TC80").price == 1


def test_export_file_xlsx_y_reimport(store, tmp_path):
    cat = CatalogStore(store)
    out = cat.export_file(str(tmp_path / "catalogo.xlsx"))

    other = CatalogStore(MemoryStore(), defaults=[])
    assert other.import_file(out) == {"count": len(DEFAULT_PRODUCTS)}
    assert [p.sku for p in other.list()] == [d["sku"] for d in DEFAULT_PRODUCTS]


def test_reset_y_clear(store):
    cat = CatalogStore(store)
    cat.remove("TC80")
    assert len(cat.reset_to_defaults()) == len(DEFAULT_PRODUCTS)
    cat.clear()
    assert store.get(KEY_CATALOG) is None


def test_validate_product():
    from presupuestos.catalog import validate_product
    from presupuestos.errors import ValidationError

    p = Product(sku="A", name="a", price=1.0)
    assert validate_product(p) is p
    for bad in (Product("", "a", 1.0), Product("A", "", 1.0), Product("A", "a", float("inf")), Product("A", "a", -1.0)):
        with pytest.raises(ValidationError):
            validate_product(bad)
