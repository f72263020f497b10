from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote

from .config import SHARE_MAX_ITEMS
from .models import LineItem, as_number
from .quotes import RepairQuote, SaleQuote
from .repairs import compute_repair_totals, equipment_label, flatten
from .utils import fmt_money, nz


def _client_lines(q: SaleQuote | RepairQuote) -> list[str]:
    return [
        f"N°: {q.quote_number}",
        f"Fecha: {q.date}",
        f"Cliente: {q.client_name}",
        f"Contacto: {q.client_contact}" if q.client_contact else "",
        f"Email: {q.client_email}" if q.client_email else "",
        f"CUIT/CUIL: {q.client_cuit}" if q.client_cuit else "",
        f"Cond. Fiscal: {q.client_fiscal}" if q.client_fiscal else "",
    ]


def _item_lines(items: list[LineItem], max_items: int) -> list[str]:
    """Primeros max_items ítems; el resto se resume como "… (N más)"."""
    top = items[: max(0, int(max_items))]
    out = [
        f"• {it.sku} — {it.name} x{as_number(nz(it.qty))} @ {fmt_money(it.price)} = {fmt_money(it.total)}"
        for it in top
    ]
    if len(items) > len(top):
        out.append(f"… ({len(items) - len(top)} más)")
    return out


def _join(lines: list[str]) -> str:
    return "\n".join(ln for ln in lines if ln)


def sale_share_text(q: SaleQuote, max_items: int = SHARE_MAX_ITEMS) -> str:
    t = None if q.keeps_stored_totals else q.totals()
    lines = [
        "*Presupuesto de Venta*",
        *_client_lines(q),
        f"*Ítems ({len(q.items)})*",
        *_item_lines(q.items, max_items),
        f"Subtotal: {fmt_money(t.subtotal if t else q.subtotal)}",
    ]
    if q.apply_discount and t is not None:
        lines.append(f"Descuento ({as_number(nz(q.discount))}%): -{fmt_money(t.discount_amount)}")
    if q.has_shipping:
        lines.append(f"Envío: {fmt_money(max(0.0, nz(q.shipping)))}")
    lines.append(f"TOTAL: *{fmt_money(t.final_total if t else q.final_total)}*")
    if q.notes:
        lines.append(f"\nNotas: {q.notes}")
    return _join(lines)


def repair_share_text(q: RepairQuote, max_items: int = SHARE_MAX_ITEMS) -> str:
    items = list(q.items) if q.keeps_stored_totals else flatten(q.equipments)
    resumen = [
        "• E{}: {}{}".format(
            i,
            equipment_label(e),
            f" — {e.descripcion}" if e.descripcion else "",
        )
        for i, e in enumerate(q.equipments, start=1)
    ]
    total = q.final_total if q.keeps_stored_totals else compute_repair_totals(q.equipments).final_total

    lines = [
        "*Presupuesto de Reparación*",
        *_client_lines(q),
        f"*Equipos ({len(q.equipments)})*",
        "\n".join(resumen) or "-",
        f"*Ítems ({len(items)})*",
        *_item_lines(items, max_items),
        f"TOTAL: *{fmt_money(total)}*",
    ]
    if q.notes:
        lines.append(f"\nNotas: {q.notes}")
    return _join(lines)


def share_text(q: SaleQuote | RepairQuote, max_items: int = SHARE_MAX_ITEMS) -> str:
    if isinstance(q, RepairQuote):
        return repair_share_text(q, max_items)
    return sale_share_text(q, max_items)


def whatsapp_url(text: str, phone: Optional[str] = None) -> str:
    """
    Con teléfono: wa.me/<dígitos>; sin teléfono: api.whatsapp.com/send.
    """
    encoded = quote(text or "", safe="")
    clean_phone = re.sub(r"\D", "", phone or "")
    if clean_phone:
        return f"https://wa.me/{clean_phone}?text={encoded}"
    return f"https://api.whatsapp.com/send?text={encoded}"


def mailto_url(subject: str, body: str) -> str:
    return f"mailto:?subject={quote(subject or '', safe='')}&body={quote(body or '', safe='')}"
