import io, os
from typing import Any, Mapping

from reportlab.pdfgen import canvas
from reportlab.lib.pagesizes import A4
from reportlab.lib import colors

from .config import APP_CURRENCY, BUSINESS_NAME, NOTES_DEFAULT
from .logging_setup import get_logger
from .models import LineItem, as_number
from .paths import exports_dir, safe_filename_part
from .quotes import TYPE_REPAIR, TYPE_SALE, RepairQuote, SaleQuote, quote_from_dict
from .repairs import compute_repair_totals, equipment_total, repuestos_subtotal
from .utils import fmt_money, nz

log = get_logger(__name__)

# Paleta
PRIMARY = colors.HexColor("#e74c3c")   # rojo marca
ACCENT  = colors.HexColor("#0067ff")   # azul detalles
BORDER  = colors.HexColor("#e5e7eb")
GRAY    = colors.HexColor("#6b7280")
TEXT    = colors.HexColor("#111827")

FONT_REG, FONT_BOLD = "Helvetica", "Helvetica-Bold"

# =====================================================
# LAYOUT (puntos PDF; origen abajo-izquierda)
# =====================================================
LAYOUT = {
    "MARGIN_X": 40,
    "TOP_MARGIN": 40,
    "BOTTOM_LIMIT": 60,          # debajo de esto se pasa a otra página
    "ROW_LINE_H": 12,
    "BODY_FS": 9,
    # Columnas de la tabla (offset desde MARGIN_X). Números alineados a la derecha.
    "COLS": {"sku": 0, "name": 75, "qty": 365, "price": 440, "total": 515},
    "INFO_BOX_H": 82,
}

TITLES = {
    TYPE_SALE: "PRESUPUESTO DE VENTA",
    TYPE_REPAIR: "PRESUPUESTO DE REPARACIÓN",
}


# ---------- helpers de wrapping ----------
def _wrap_words(c: canvas.Canvas, text: str, max_width: float, font_name: str, font_size: int):
    """Word wrap clásico; una palabra más ancha que la columna queda sola en su línea."""
    words = str(text or "").split(" ")
    lines, current = [], ""
    for w in words:
        test = (current + " " + w).strip()
        if c.stringWidth(test, font_name, font_size) <= max_width:
            current = test
        else:
            if current: lines.append(current)
            current = w
    if current: lines.append(current)
    return lines or [""]


class _QuoteCanvas:
    """Canvas con cursor vertical y salto de página automático."""

    def __init__(self, buf: io.BytesIO, title: str):
        self.c = canvas.Canvas(buf, pagesize=A4)
        self.c.setTitle(title)
        self.W, self.H = A4
        self.L = LAYOUT
        self.left = self.L["MARGIN_X"]
        self.right = self.W - self.L["MARGIN_X"]
        self.page = 1
        self.y = self.H - self.L["TOP_MARGIN"]
        self.title = title

    # ---------- paginado ----------
    def _page_footer(self):
        self.c.setFont(FONT_REG, 8)
        self.c.setFillColor(GRAY)
        self.c.drawRightString(self.right, 30, f"Página {self.page}")

    def new_page(self):
        self._page_footer()
        self.c.showPage()
        self.page += 1
        self.y = self.H - self.L["TOP_MARGIN"]
        # encabezado reducido en páginas siguientes
        self.c.setFont(FONT_BOLD, 10)
        self.c.setFillColor(PRIMARY)
        self.c.drawString(self.left, self.y, f"{self.title} (continuación)")
        self.y -= 20

    def ensure_space(self, h: float) -> bool:
        """True si tuvo que saltar de página."""
        if self.y - h < self.L["BOTTOM_LIMIT"]:
            self.new_page()
            return True
        return False

    def finish(self):
        self._page_footer()
        self.c.save()

    # ---------- bloques ----------
    def text(self, x, txt, font=FONT_REG, size=9, color=TEXT, right=False):
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        if right:
            self.c.drawRightString(x, self.y, txt)
        else:
            self.c.drawString(x, self.y, txt)

    def hline(self, color=BORDER, width=0.8):
        self.c.setStrokeColor(color)
        self.c.setLineWidth(width)
        self.c.line(self.left, self.y, self.right, self.y)

    def paragraph(self, txt: str, font=FONT_REG, size=9, color=TEXT, indent=0):
        max_w = self.right - self.left - indent
        line_h = size + 3
        for raw_line in str(txt or "").splitlines() or [""]:
            for line in _wrap_words(self.c, raw_line, max_w, font, size):
                self.ensure_space(line_h)
                self.text(self.left + indent, line, font, size, color)
                self.y -= line_h


def _draw_header(pc: _QuoteCanvas, kind: str):
    pc.text(pc.left, BUSINESS_NAME, FONT_BOLD, 11, GRAY)
    pc.y -= 24
    pc.text(pc.left, TITLES.get(kind, TITLES[TYPE_SALE]), FONT_BOLD, 20, PRIMARY)
    pc.y -= 10
    pc.hline(ACCENT, 2)
    pc.y -= 20


def _draw_info_boxes(pc: _QuoteCanvas, q, kind: str):
    c = pc.c
    box_h = pc.L["INFO_BOX_H"]
    gap = 14
    box_w = (pc.right - pc.left - gap) / 2
    top = pc.y + 8
    c.setStrokeColor(BORDER)
    c.setLineWidth(0.8)
    c.roundRect(pc.left, top - box_h, box_w, box_h, 6, stroke=1, fill=0)
    c.roundRect(pc.left + box_w + gap, top - box_h, box_w, box_h, 6, stroke=1, fill=0)

    cliente = [
        ("Nombre", q.client_name),
        ("Contacto", q.client_contact),
        ("Email", q.client_email),
        ("CUIT/CUIL", q.client_cuit),
        ("Condición fiscal", q.client_fiscal),
    ]
    presupuesto = [
        ("N°", q.quote_number),
        ("Fecha", q.date),
        ("Tipo", kind.upper()),
        ("Moneda", APP_CURRENCY),
    ]

    y0 = pc.y - 6
    for x, title, rows in (
        (pc.left + 8, "Datos del Cliente", cliente),
        (pc.left + box_w + gap + 8, "Datos del Presupuesto", presupuesto),
    ):
        pc.y = y0
        pc.text(x, title, FONT_BOLD, 8, GRAY)
        pc.y -= 12
        for label, value in rows:
            pc.text(x, f"{label}:", FONT_BOLD, 9)
            pc.text(x + 80, str(value or "-")[:48], FONT_REG, 9)
            pc.y -= 12

    pc.y = top - box_h - 20


def _draw_table_header(pc: _QuoteCanvas, name_label: str):
    cols = pc.L["COLS"]
    x = lambda k: pc.left + cols[k]
    pc.c.setFillColor(colors.HexColor("#f7f9ff"))
    pc.c.rect(pc.left, pc.y - 4, pc.right - pc.left, 15, stroke=0, fill=1)
    pc.text(x("sku"), "SKU", FONT_BOLD, 9)
    pc.text(x("name"), name_label, FONT_BOLD, 9)
    pc.text(x("qty"), "Cant.", FONT_BOLD, 9, right=True)
    pc.text(x("price"), "P. Unit.", FONT_BOLD, 9, right=True)
    pc.text(x("total"), "Total", FONT_BOLD, 9, right=True)
    pc.y -= 16


def _draw_items_table(pc: _QuoteCanvas, items: list[LineItem], name_label: str = "Producto"):
    cols = pc.L["COLS"]
    fs = pc.L["BODY_FS"]
    line_h = pc.L["ROW_LINE_H"]
    x = lambda k: pc.left + cols[k]
    max_name_w = (x("qty") - 40) - x("name")

    pc.ensure_space(16 + line_h)
    _draw_table_header(pc, name_label)

    for it in items:
        name_lines = _wrap_words(pc.c, it.name, max_name_w, FONT_REG, fs)
        h_needed = len(name_lines) * line_h + 4
        if pc.ensure_space(h_needed):
            _draw_table_header(pc, name_label)

        pc.text(x("sku"), str(it.sku)[:14], FONT_REG, fs)
        for idx, line in enumerate(name_lines):
            pc.c.drawString(x("name"), pc.y - idx * line_h, line)
        pc.text(x("qty"), str(as_number(nz(it.qty))), FONT_REG, fs, right=True)
        pc.text(x("price"), fmt_money(it.price), FONT_REG, fs, right=True)
        pc.text(x("total"), fmt_money(it.total), FONT_REG, fs, right=True)
        pc.y -= h_needed - line_h
        pc.hline()
        pc.y -= line_h


def _draw_totals(pc: _QuoteCanvas, rows: list[tuple[str, str]], final: tuple[str, str]):
    pc.ensure_space((len(rows) + 2) * 16)
    label_x = pc.right - 130
    for label, value in rows:
        pc.text(label_x, label, FONT_REG, 10, GRAY, right=True)
        pc.text(pc.right, value, FONT_REG, 10, right=True)
        pc.y -= 15
    pc.y -= 2
    pc.text(label_x, final[0], FONT_BOLD, 13, PRIMARY, right=True)
    pc.text(pc.right, final[1], FONT_BOLD, 13, PRIMARY, right=True)
    pc.y -= 24


def _draw_sale(pc: _QuoteCanvas, q: SaleQuote):
    _draw_items_table(pc, q.items)
    pc.y -= 6

    t = None if q.keeps_stored_totals else q.totals()
    rows = [("Subtotal:", fmt_money(t.subtotal if t else q.subtotal))]
    if q.apply_discount and t is not None:
        rows.append((f"Descuento ({as_number(nz(q.discount))}%):", f"- {fmt_money(t.discount_amount)}"))
    if q.has_shipping:
        rows.append(("Envío:", fmt_money(max(0.0, nz(q.shipping)))))
    _draw_totals(pc, rows, ("TOTAL:", fmt_money(t.final_total if t else q.final_total)))


def _draw_repair(pc: _QuoteCanvas, q: RepairQuote):
    line_h = pc.L["ROW_LINE_H"]
    for idx, eq in enumerate(q.equipments, start=1):
        pc.ensure_space(5 * line_h)
        pc.text(pc.left, f"Equipo #{idx}", FONT_BOLD, 11)
        pc.y -= 14
        pc.text(pc.left, f"Marca: {eq.marca or '-'}", FONT_REG, 9)
        pc.text(pc.left + 170, f"Modelo: {eq.modelo or '-'}", FONT_REG, 9)
        pc.text(pc.left + 340, f"N° Serie: {eq.serie or '-'}", FONT_REG, 9)
        pc.y -= line_h
        pc.paragraph(f"Descripción / Falla: {eq.descripcion or '-'}")
        pc.y -= 4

        if eq.repuestos:
            _draw_items_table(pc, eq.repuestos, "Repuesto")

        rows = []
        if eq.repuestos:
            rows.append(("Repuestos:", fmt_money(repuestos_subtotal(eq))))
        if nz(eq.mano_obra) > 0:
            rows.append(("Mano de obra:", fmt_money(eq.mano_obra)))
        pc.ensure_space((len(rows) + 1) * 14)
        for label, value in rows:
            pc.text(pc.right - 130, label, FONT_REG, 9, GRAY, right=True)
            pc.text(pc.right, value, FONT_REG, 9, right=True)
            pc.y -= 13
        pc.text(pc.right - 130, "Total equipo:", FONT_BOLD, 10, right=True)
        pc.text(pc.right, fmt_money(equipment_total(eq)), FONT_BOLD, 10, right=True)
        pc.y -= 10
        pc.hline(ACCENT, 0.6)
        pc.y -= 16

    total = q.final_total if q.keeps_stored_totals else compute_repair_totals(q.equipments).final_total
    _draw_totals(pc, [], ("TOTAL:", fmt_money(total)))


def _draw_notes(pc: _QuoteCanvas, notes: str):
    notes = (notes or "").strip()
    if notes:
        pc.ensure_space(30)
        pc.text(pc.left, "Observaciones", FONT_BOLD, 10)
        pc.y -= 14
        pc.paragraph(notes)
        pc.y -= 8
    if NOTES_DEFAULT and NOTES_DEFAULT not in notes:
        pc.paragraph(NOTES_DEFAULT, FONT_REG, 8, GRAY)


def _coerce(quote: Any, kind: str | None) -> tuple[SaleQuote | RepairQuote, str]:
    if isinstance(quote, Mapping):
        d = dict(quote)
        if kind:
            d["type"] = kind
        quote = quote_from_dict(d)
    if isinstance(quote, RepairQuote):
        return quote, TYPE_REPAIR
    if isinstance(quote, SaleQuote):
        return quote, TYPE_SALE
    raise TypeError(f"No se puede generar PDF de {type(quote).__name__}")


# =====================================================
# Generación de PDF (paginado)
# =====================================================
def render_quote_pdf(quote, kind: str | None = None) -> bytes:
    """
    PDF (A4) de un presupuesto de venta o reparación. Devuelve los bytes.
    kind ("venta" | "reparacion") solo hace falta si quote es un dict sin type.
    """
    q, kind = _coerce(quote, kind)
    buf = io.BytesIO()
    pc = _QuoteCanvas(buf, f"{TITLES[kind].title()} - {q.client_name}".strip(" -"))

    _draw_header(pc, kind)
    _draw_info_boxes(pc, q, kind)
    if kind == TYPE_REPAIR:
        _draw_repair(pc, q)
    else:
        _draw_sale(pc, q)
    _draw_notes(pc, q.notes)

    pc.finish()
    log.debug("PDF generado (%s, %d páginas)", q.quote_number, pc.page)
    return buf.getvalue()


def pdf_filename(quote) -> str:
    q, kind = _coerce(quote, None)
    num = safe_filename_part(q.quote_number, "reparacion" if kind == TYPE_REPAIR else "venta")
    cli = safe_filename_part(q.client_name, "cliente")
    return f"{num}-{cli}.pdf"


def save_quote_pdf(quote, kind: str | None = None, out_dir: str | None = None) -> str:
    q, kind = _coerce(quote, kind)
    out_dir = out_dir or exports_dir()
    os.makedirs(out_dir, exist_ok=True)
    out_path = os.path.join(out_dir, pdf_filename(q))
    with open(out_path, "wb") as fh:
        fh.write(render_quote_pdf(q, kind))
    log.info("PDF guardado: %s", out_path)
    return out_path
