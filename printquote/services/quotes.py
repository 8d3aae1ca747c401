"""Quote pricing and persistence.

``calculate_quote`` prices a single line for preview; ``create_quote``
prices one or more lines and stores the quote together with a snapshot of
the computed breakdown and total.  Stored snapshots are never recomputed:
see :mod:`printquote.services.quote_read_models` for the read side.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import List, Optional

from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ..models import Quote, QuoteItem
from ..pricing import Breakdown, ItemInput, Result, Totals, calculate_batch
from ..snapshots import encode_breakdown, encode_totals
from .catalog import (
    get_active_material,
    get_optional_active_packaging_cost,
    get_optional_active_shipping_cost,
)
from .errors import QuoteSaveError, ValidationError
from .rates import build_global_input, get_rate_config
from .validation import (
    optional_text,
    parse_flag,
    parse_non_negative_float,
    parse_optional_id,
    parse_percent,
    parse_positive_float,
    parse_required_id,
)

logger = logging.getLogger(__name__)


class QuoteLine(BaseModel):
    material_id: int
    grams: float
    print_minutes: float = 0.0
    labor_minutes: float = 0.0
    quantity: float = 1.0


class QuoteOptions(BaseModel):
    shipping_id: Optional[int] = None
    packaging_id: Optional[int] = None
    waste_percent: float = 0.0
    margin_percent: float = 0.0
    tax_enabled: bool = False
    tax_percent: Optional[float] = None


class QuoteCalcRequest(QuoteOptions, QuoteLine):
    pass


class QuoteCreateRequest(QuoteOptions):
    title: Optional[str] = None
    notes: Optional[str] = None
    items: List[QuoteLine] = Field(default_factory=list)


class QuoteCalculation(BaseModel):
    currency: str
    breakdown: Breakdown
    totals: Totals


@dataclass(frozen=True)
class _ValidLine:
    material_id: int
    grams: float
    print_minutes: float
    labor_minutes: float
    quantity: float


@dataclass(frozen=True)
class _ValidOptions:
    shipping_id: Optional[int]
    packaging_id: Optional[int]
    waste_percent: float
    margin_percent: float
    tax_enabled: bool
    tax_percent: Optional[float]


@dataclass(frozen=True)
class PricedQuote:
    lines: List[_ValidLine]
    options: _ValidOptions
    tax_percent: float
    currency: str
    result: Result


def _validate_line(line: QuoteLine) -> _ValidLine:
    return _ValidLine(
        material_id=parse_required_id(line.material_id, "material_id"),
        grams=parse_positive_float(line.grams, "grams"),
        print_minutes=parse_non_negative_float(line.print_minutes, "print_minutes"),
        labor_minutes=parse_non_negative_float(line.labor_minutes, "labor_minutes"),
        quantity=parse_positive_float(line.quantity, "quantity"),
    )


def _validate_options(options: QuoteOptions) -> _ValidOptions:
    return _ValidOptions(
        shipping_id=parse_optional_id(options.shipping_id, "shipping_id"),
        packaging_id=parse_optional_id(options.packaging_id, "packaging_id"),
        waste_percent=parse_percent(options.waste_percent, "waste_percent"),
        margin_percent=parse_percent(options.margin_percent, "margin_percent"),
        tax_enabled=parse_flag(options.tax_enabled),
        tax_percent=(
            None if options.tax_percent is None
            else parse_percent(options.tax_percent, "tax_percent")
        ),
    )


def price_lines(session: Session, lines: List[QuoteLine], options: QuoteOptions) -> PricedQuote:
    """Validate input, resolve catalog lookups and run the pricing engine.

    Raises :class:`ValidationError` for bad input and
    :class:`~printquote.services.errors.NotFoundError` for unknown or
    inactive materials, shipping or packaging selections.
    """

    if not lines:
        raise ValidationError("at least one item is required")
    valid_lines = [_validate_line(line) for line in lines]
    valid_options = _validate_options(options)

    rates = get_rate_config(session)
    inputs = [
        ItemInput(
            grams=line.grams,
            print_minutes=line.print_minutes,
            labor_minutes=line.labor_minutes,
            quantity=line.quantity,
            cost_per_kg=float(get_active_material(session, line.material_id).cost_per_kg),
        )
        for line in valid_lines
    ]
    g = build_global_input(
        rates,
        waste_percent=valid_options.waste_percent,
        margin_percent=valid_options.margin_percent,
        tax_enabled=valid_options.tax_enabled,
        tax_percent=valid_options.tax_percent,
        packaging_cost=get_optional_active_packaging_cost(session, valid_options.packaging_id),
        shipping_cost=get_optional_active_shipping_cost(session, valid_options.shipping_id),
    )
    result = calculate_batch(inputs, g)
    amounts = [*asdict(result.breakdown).values(), result.totals.total]
    if not all(math.isfinite(value) for value in amounts):
        raise ValidationError("quote amounts are out of range")
    return PricedQuote(
        lines=valid_lines,
        options=valid_options,
        tax_percent=g.tax_percent,
        currency=rates.currency,
        result=result,
    )


def calculate_quote(session: Session, request: QuoteCalcRequest) -> QuoteCalculation:
    line = QuoteLine(
        material_id=request.material_id,
        grams=request.grams,
        print_minutes=request.print_minutes,
        labor_minutes=request.labor_minutes,
        quantity=request.quantity,
    )
    priced = price_lines(session, [line], request)
    return QuoteCalculation(
        currency=priced.currency,
        breakdown=priced.result.breakdown,
        totals=priced.result.totals,
    )


def create_quote(session: Session, request: QuoteCreateRequest) -> Quote:
    """Price and persist a quote with all of its line items atomically.

    The header and every item are written in one transaction; any storage
    failure rolls everything back and raises :class:`QuoteSaveError`.
    """

    priced = price_lines(session, request.items, request)
    result = priced.result
    try:
        breakdown_json = encode_breakdown(result.breakdown)
        totals_json = encode_totals(result.totals)
    except ValueError as exc:
        raise ValidationError("quote amounts are out of range") from exc

    quote = Quote(
        title=optional_text(request.title),
        notes=optional_text(request.notes),
        waste_percent=priced.options.waste_percent,
        margin_percent=priced.options.margin_percent,
        tax_enabled=priced.options.tax_enabled,
        tax_percent_snapshot=priced.tax_percent,
        breakdown_json=breakdown_json,
        totals_json=totals_json,
    )
    try:
        session.add(quote)
        session.flush()
        for line in priced.lines:
            session.add(
                QuoteItem(
                    quote_id=quote.id,
                    material_id=line.material_id,
                    grams=line.grams,
                    print_minutes=line.print_minutes,
                    labor_minutes=line.labor_minutes,
                    quantity=line.quantity,
                )
            )
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Saving quote failed, rolled back: %s", exc)
        raise QuoteSaveError("failed to save quote") from exc

    session.refresh(quote)
    logger.info(
        "Saved quote %s with %d item(s), total %.2f %s",
        quote.id,
        len(priced.lines),
        result.totals.total,
        priced.currency,
    )
    return quote
