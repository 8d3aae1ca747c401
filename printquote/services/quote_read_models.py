from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import or_
from sqlmodel import Session, select

from ..config import get_currency
from ..models import Material, Quote, QuoteItem
from ..pricing import Breakdown, Totals
from ..snapshots import decode_breakdown, decode_totals, extract_total
from .errors import NotFoundError


class QuoteListRow(BaseModel):
    id: int
    created_at: datetime
    title: str
    total: float


class QuoteItemRow(BaseModel):
    material_id: int
    material_name: str
    grams: float
    print_minutes: float
    labor_minutes: float
    quantity: float


class QuoteDetail(BaseModel):
    id: int
    created_at: datetime
    title: str
    notes: str
    currency: str
    waste_percent: float
    margin_percent: float
    tax_enabled: bool
    tax_percent: float
    items: List[QuoteItemRow]
    breakdown: Breakdown
    totals: Totals


def list_quotes(session: Session, q: Optional[str] = None) -> List[QuoteListRow]:
    """Return quotes newest first, optionally filtered by title or notes.

    ``q`` is matched as a substring with the database's ``LIKE`` semantics
    (``%`` and ``_`` are taken literally).  The total of each row comes from
    the stored snapshot, never from a new calculation.
    """

    stmt = select(Quote.id, Quote.created_at, Quote.title, Quote.totals_json)
    if q:
        stmt = stmt.where(
            or_(
                Quote.title.contains(q, autoescape=True),
                Quote.notes.contains(q, autoescape=True),
            )
        )
    stmt = stmt.order_by(Quote.created_at.desc(), Quote.id.desc())
    return [
        QuoteListRow(
            id=quote_id,
            created_at=created_at,
            title=title or "",
            total=extract_total(totals_json),
        )
        for quote_id, created_at, title, totals_json in session.exec(stmt).all()
    ]


def get_quote_detail(
    session: Session, quote_id: int, *, currency: Optional[str] = None
) -> QuoteDetail:
    quote = session.get(Quote, quote_id)
    if quote is None:
        raise NotFoundError("quote not found")

    stmt = (
        select(QuoteItem, Material)
        .join(Material, Material.id == QuoteItem.material_id, isouter=True)
        .where(QuoteItem.quote_id == quote_id)
        .order_by(QuoteItem.id)
    )
    items = [
        QuoteItemRow(
            material_id=item.material_id,
            material_name=material.name if material else "",
            grams=item.grams,
            print_minutes=item.print_minutes,
            labor_minutes=item.labor_minutes,
            quantity=item.quantity,
        )
        for item, material in session.exec(stmt).all()
    ]

    return QuoteDetail(
        id=quote.id,
        created_at=quote.created_at,
        title=quote.title or "",
        notes=quote.notes or "",
        currency=currency or get_currency(),
        waste_percent=quote.waste_percent,
        margin_percent=quote.margin_percent,
        tax_enabled=quote.tax_enabled,
        tax_percent=quote.tax_percent_snapshot,
        items=items,
        breakdown=decode_breakdown(quote.breakdown_json),
        totals=decode_totals(quote.totals_json),
    )


def build_quote_text(detail: QuoteDetail) -> str:
    """Render a plain-text summary suitable for pasting into a message."""

    cur = detail.currency
    b = detail.breakdown
    title = detail.title or f"Quote #{detail.id}"
    lines = [
        title,
        f"Date: {detail.created_at:%Y-%m-%d %H:%M:%S}",
        "",
        f"Total: {detail.totals.total:.2f} {cur}",
        "",
        "Breakdown:",
        f"- Material: {b.material_cost:.2f} {cur}",
        f"- Machine: {b.machine_cost:.2f} {cur}",
        f"- Labor: {b.labor_cost:.2f} {cur}",
        f"- Subtotal: {b.subtotal:.2f} {cur}",
        f"- Overhead: {b.overhead:.2f} {cur}",
        f"- Failure insurance: {b.failure_insurance:.2f} {cur}",
        f"- Packaging: {b.packaging_cost:.2f} {cur}",
        f"- Shipping: {b.shipping_cost:.2f} {cur}",
        f"- Margin: {b.margin:.2f} {cur}",
        f"- Tax: {b.tax:.2f} {cur}",
        "",
        "Assumptions:",
        f"- Waste: {detail.waste_percent:.2f}%",
        f"- Margin: {detail.margin_percent:.2f}%",
        "- Tax: {} ({:.2f}%)".format(
            "included" if detail.tax_enabled else "not included", detail.tax_percent
        ),
    ]
    for index, item in enumerate(detail.items, start=1):
        header = "Item data:" if len(detail.items) == 1 else f"Item {index} data:"
        lines += [
            "",
            header,
            f"- Material: {item.material_name}",
            f"- Grams: {item.grams:.2f}",
            f"- Print time: {item.print_minutes:.2f} min",
            f"- Labor: {item.labor_minutes:.2f} min",
            f"- Quantity: {item.quantity:.0f}",
        ]
    if detail.notes:
        lines += ["", "Notes:", detail.notes]
    return "\n".join(lines)
