from __future__ import annotations

import argparse
import sys

from .catalog import CatalogStore
from .errors import FormatError, PresupuestosError
from .logging_setup import get_logger, init_logging
from .pdfgen import save_quote_pdf
from .repository import RepairQuoteRepository, SaleQuoteRepository
from .share import share_text, whatsapp_url
from .storage import SqliteStore, open_default_store
from .utils import fmt_money

log = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="presupuestos", description="Presupuestos de venta y reparación")
    ap.add_argument("--db", default="", help="ruta de la base SQLite (por defecto la configurada)")
    ap.add_argument("--log-level", default="", help="DEBUG, INFO, WARNING, ERROR")
    sub = ap.add_subparsers(dest="command", required=True)

    # catalog
    cat = sub.add_parser("catalog", help="catálogo de productos")
    cat_sub = cat.add_subparsers(dest="action", required=True)
    cat_sub.add_parser("list")
    p = cat_sub.add_parser("search")
    p.add_argument("query")
    p.add_argument("--limit", type=int, default=30)
    p = cat_sub.add_parser("export")
    p.add_argument("file")
    p = cat_sub.add_parser("import")
    p.add_argument("file")
    p.add_argument("--merge", action="store_true", help="combinar por SKU en lugar de reemplazar")
    cat_sub.add_parser("reset")

    # quotes
    qs = sub.add_parser("quotes", help="presupuestos guardados")
    qs_sub = qs.add_subparsers(dest="action", required=True)
    p = qs_sub.add_parser("list")
    p.add_argument("--repairs", action="store_true")
    p.add_argument("--search", default="")
    p = qs_sub.add_parser("remove")
    p.add_argument("id")
    p.add_argument("--repairs", action="store_true")

    # repairs
    rp = sub.add_parser("repairs", help="exportar/importar reparaciones")
    rp_sub = rp.add_subparsers(dest="action", required=True)
    p = rp_sub.add_parser("export")
    p.add_argument("file")
    p = rp_sub.add_parser("import")
    p.add_argument("file")

    # pdf / share
    p = sub.add_parser("pdf", help="genera el PDF de un presupuesto")
    p.add_argument("id")
    p.add_argument("--repairs", action="store_true")
    p.add_argument("--out", default="")
    p = sub.add_parser("share", help="texto para WhatsApp/email")
    p.add_argument("id")
    p.add_argument("--repairs", action="store_true")
    p.add_argument("--phone", default="")

    return ap


def _repo(store, repairs: bool):
    return RepairQuoteRepository(store) if repairs else SaleQuoteRepository(store)


def _cmd_catalog(args, store) -> int:
    catalog = CatalogStore(store)
    if args.action == "list":
        for p in catalog.list():
            print(f"{p.sku}\t{p.name}\t{fmt_money(p.price)}")
    elif args.action == "search":
        for p in catalog.search(args.query, args.limit):
            print(f"{p.sku}\t{p.name}\t{fmt_money(p.price)}")
    elif args.action == "export":
        print(catalog.export_file(args.file))
    elif args.action == "import":
        res = catalog.import_file(args.file, merge=args.merge)
        print(f"Productos importados: {res['count']}")
    elif args.action == "reset":
        print(f"Catálogo restablecido ({len(catalog.reset_to_defaults())} productos)")
    return 0


def _cmd_quotes(args, store) -> int:
    repo = _repo(store, args.repairs)
    if args.action == "list":
        for q in repo.search(args.search):
            print(f"{q.id}\t{q.quote_number}\t{q.date}\t{q.client_name}\t{fmt_money(q.final_total)}")
        return 0
    if repo.remove(args.id):
        print(f"Eliminado: {args.id}")
        return 0
    print(f"No existe el presupuesto {args.id}", file=sys.stderr)
    return 1


def _cmd_repairs(args, store) -> int:
    repo = RepairQuoteRepository(store)
    if args.action == "export":
        with open(args.file, "wb") as fh:
            fh.write(repo.export_snapshot())
        print(args.file)
        return 0
    with open(args.file, "rb") as fh:
        res = repo.import_snapshot(fh.read())
    print(f"Reparaciones importadas: {res['count']}")
    return 0


def _cmd_pdf(args, store) -> int:
    q = _repo(store, args.repairs).get(args.id)
    if q is None:
        print(f"No existe el presupuesto {args.id}", file=sys.stderr)
        return 1
    print(save_quote_pdf(q, out_dir=args.out or None))
    return 0


def _cmd_share(args, store) -> int:
    q = _repo(store, args.repairs).get(args.id)
    if q is None:
        print(f"No existe el presupuesto {args.id}", file=sys.stderr)
        return 1
    text = share_text(q)
    print(text)
    print()
    print(whatsapp_url(text, args.phone or None))
    return 0


COMMANDS = {
    "catalog": _cmd_catalog,
    "quotes": _cmd_quotes,
    "repairs": _cmd_repairs,
    "pdf": _cmd_pdf,
    "share": _cmd_share,
}


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.log_level:
        init_logging(level=args.log_level)

    store = SqliteStore(args.db).open() if args.db else open_default_store()

    try:
        return COMMANDS[args.command](args, store)
    except FormatError as e:
        print(f"Error de formato: {e}", file=sys.stderr)
        return 2
    except (PresupuestosError, OSError) as e:
        log.error("Comando '%s' falló: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()
