from __future__ import annotations

from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel
from sqlmodel import Session

from .database import get_session
from .models import Material, PackagingRate, RateConfig, ShippingRate
from .services import (
    NotFoundError,
    QuoteCalcRequest,
    QuoteCalculation,
    QuoteCreateRequest,
    QuoteDetail,
    QuoteListRow,
    QuoteSaveError,
    ValidationError,
    build_quote_text,
    calculate_quote,
    create_material,
    create_packaging_rate,
    create_quote,
    create_shipping_rate,
    get_quote_detail,
    get_rate_config,
    list_active_materials,
    list_materials,
    list_packaging_rates,
    list_quotes,
    list_shipping_rates,
    update_material,
    update_packaging_rate,
    update_rate_config,
    update_shipping_rate,
)

app = FastAPI(title="printquote")


class RateConfigIn(BaseModel):
    machine_hourly_rate: float
    labor_per_minute: float
    overhead_fixed: float
    overhead_percent: float
    failure_rate_percent: float
    tax_percent: float


class MaterialIn(BaseModel):
    name: str
    cost_per_kg: float
    notes: Optional[str] = None
    active: bool = True


class ShippingRateIn(BaseModel):
    scope: str
    country: str
    city: Optional[str] = None
    flat_cost: float = 0.0
    notes: Optional[str] = None
    active: bool = True


class PackagingRateIn(BaseModel):
    name: str
    flat_cost: float = 0.0
    notes: Optional[str] = None
    active: bool = True


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


# ----------------------------------------------------------------- rates


@app.get("/admin/rates", response_model=RateConfig)
def read_rates(session: Session = Depends(get_session)):
    return get_rate_config(session)


@app.put("/admin/rates", response_model=RateConfig)
def write_rates(payload: RateConfigIn, session: Session = Depends(get_session)):
    try:
        return update_rate_config(session, payload.model_dump())
    except ValidationError as exc:
        raise _http_error(exc) from exc


# --------------------------------------------------------------- catalog


@app.get("/admin/materials", response_model=List[Material])
def read_materials(active: bool = False, session: Session = Depends(get_session)):
    if active:
        return list_active_materials(session)
    return list_materials(session)


@app.post("/admin/materials", response_model=Material, status_code=201)
def add_material(payload: MaterialIn, session: Session = Depends(get_session)):
    try:
        return create_material(session, payload.model_dump())
    except ValidationError as exc:
        raise _http_error(exc) from exc


@app.put("/admin/materials/{material_id}", response_model=Material)
def edit_material(material_id: int, payload: MaterialIn, session: Session = Depends(get_session)):
    try:
        return update_material(session, material_id, payload.model_dump())
    except (ValidationError, NotFoundError) as exc:
        raise _http_error(exc) from exc


@app.get("/admin/shipping", response_model=List[ShippingRate])
def read_shipping(active: bool = False, session: Session = Depends(get_session)):
    return list_shipping_rates(session, active_only=active)


@app.post("/admin/shipping", response_model=ShippingRate, status_code=201)
def add_shipping(payload: ShippingRateIn, session: Session = Depends(get_session)):
    try:
        return create_shipping_rate(session, payload.model_dump())
    except ValidationError as exc:
        raise _http_error(exc) from exc


@app.put("/admin/shipping/{rate_id}", response_model=ShippingRate)
def edit_shipping(rate_id: int, payload: ShippingRateIn, session: Session = Depends(get_session)):
    try:
        return update_shipping_rate(session, rate_id, payload.model_dump())
    except (ValidationError, NotFoundError) as exc:
        raise _http_error(exc) from exc


@app.get("/admin/packaging", response_model=List[PackagingRate])
def read_packaging(active: bool = False, session: Session = Depends(get_session)):
    return list_packaging_rates(session, active_only=active)


@app.post("/admin/packaging", response_model=PackagingRate, status_code=201)
def add_packaging(payload: PackagingRateIn, session: Session = Depends(get_session)):
    try:
        return create_packaging_rate(session, payload.model_dump())
    except ValidationError as exc:
        raise _http_error(exc) from exc


@app.put("/admin/packaging/{rate_id}", response_model=PackagingRate)
def edit_packaging(rate_id: int, payload: PackagingRateIn, session: Session = Depends(get_session)):
    try:
        return update_packaging_rate(session, rate_id, payload.model_dump())
    except (ValidationError, NotFoundError) as exc:
        raise _http_error(exc) from exc


# ---------------------------------------------------------------- quotes


@app.post("/quote/calc", response_model=QuoteCalculation)
def quote_calc(payload: QuoteCalcRequest, session: Session = Depends(get_session)):
    try:
        return calculate_quote(session, payload)
    except (ValidationError, NotFoundError) as exc:
        raise _http_error(exc) from exc


@app.post("/quotes", response_model=QuoteDetail, status_code=201)
def quote_create(payload: QuoteCreateRequest, session: Session = Depends(get_session)):
    try:
        quote = create_quote(session, payload)
    except (ValidationError, NotFoundError, QuoteSaveError) as exc:
        raise _http_error(exc) from exc
    return get_quote_detail(session, quote.id)


@app.get("/quotes", response_model=List[QuoteListRow])
def quote_list(q: str = Query(default=""), session: Session = Depends(get_session)):
    return list_quotes(session, q.strip())


@app.get("/quotes/{quote_id}", response_model=QuoteDetail)
def quote_detail(quote_id: int, session: Session = Depends(get_session)):
    try:
        return get_quote_detail(session, quote_id)
    except NotFoundError as exc:
        raise _http_error(exc) from exc


@app.get("/quotes/{quote_id}/text", response_class=PlainTextResponse)
def quote_text(quote_id: int, session: Session = Depends(get_session)):
    try:
        detail = get_quote_detail(session, quote_id)
    except NotFoundError as exc:
        raise _http_error(exc) from exc
    return PlainTextResponse(build_quote_text(detail))
