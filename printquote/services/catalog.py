"""Catalog service helpers: materials, shipping rates and packaging rates."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from sqlmodel import Session, select

from ..models import Material, PackagingRate, ShippingRate, utcnow
from .errors import NotFoundError, ValidationError
from .validation import (
    optional_text,
    parse_flag,
    parse_non_negative_float,
    parse_positive_float,
    require_text,
)

SHIPPING_SCOPES = ("CO", "INTL", "CITY")


# ------------------------------------------------------------- materials


def list_materials(session: Session) -> List[Material]:
    return session.exec(select(Material).order_by(Material.id.desc())).all()


def list_active_materials(session: Session) -> List[Material]:
    stmt = select(Material).where(Material.active == True).order_by(Material.name)  # noqa: E712
    return session.exec(stmt).all()


def create_material(session: Session, data: Mapping[str, Any]) -> Material:
    """Create an active material.

    Parameters
    ----------
    data:
        ``name`` (required), ``cost_per_kg`` (> 0) and optional ``notes``.
    """

    material = Material(
        name=require_text(data.get("name"), "name"),
        cost_per_kg=parse_positive_float(data.get("cost_per_kg"), "cost_per_kg"),
        notes=optional_text(data.get("notes")),
        active=True,
    )
    session.add(material)
    session.commit()
    session.refresh(material)
    return material


def update_material(session: Session, material_id: int, data: Mapping[str, Any]) -> Material:
    name = require_text(data.get("name"), "name")
    cost_per_kg = parse_positive_float(data.get("cost_per_kg"), "cost_per_kg")
    material = session.get(Material, material_id)
    if material is None:
        raise NotFoundError("material not found")
    material.name = name
    material.cost_per_kg = cost_per_kg
    material.notes = optional_text(data.get("notes"))
    material.active = parse_flag(data.get("active", True))
    material.updated_at = utcnow()
    session.add(material)
    session.commit()
    session.refresh(material)
    return material


def get_active_material(session: Session, material_id: int) -> Material:
    material = session.exec(
        select(Material).where(Material.id == material_id, Material.active == True)  # noqa: E712
    ).first()
    if material is None:
        raise NotFoundError("material not found or inactive")
    return material


# -------------------------------------------------------- shipping rates


def _parse_shipping(data: Mapping[str, Any]) -> dict:
    scope = (data.get("scope") or "").strip().upper()
    if scope not in SHIPPING_SCOPES:
        raise ValidationError("scope must be one of " + ", ".join(SHIPPING_SCOPES))
    return {
        "scope": scope,
        "country": require_text(data.get("country"), "country"),
        "city": optional_text(data.get("city")),
        "flat_cost": parse_non_negative_float(data.get("flat_cost"), "flat_cost"),
        "notes": optional_text(data.get("notes")),
        "active": parse_flag(data.get("active", True)),
    }


def list_shipping_rates(session: Session, *, active_only: bool = False) -> List[ShippingRate]:
    stmt = select(ShippingRate)
    if active_only:
        stmt = stmt.where(ShippingRate.active == True)  # noqa: E712
    return session.exec(stmt.order_by(ShippingRate.id.desc())).all()


def create_shipping_rate(session: Session, data: Mapping[str, Any]) -> ShippingRate:
    rate = ShippingRate(**_parse_shipping(data))
    session.add(rate)
    session.commit()
    session.refresh(rate)
    return rate


def update_shipping_rate(session: Session, rate_id: int, data: Mapping[str, Any]) -> ShippingRate:
    values = _parse_shipping(data)
    rate = session.get(ShippingRate, rate_id)
    if rate is None:
        raise NotFoundError("shipping rate not found")
    for key, value in values.items():
        setattr(rate, key, value)
    rate.updated_at = utcnow()
    session.add(rate)
    session.commit()
    session.refresh(rate)
    return rate


def get_optional_active_shipping_cost(session: Session, rate_id: Optional[int]) -> float:
    """Flat cost of an active shipping rate, ``0`` when nothing was selected."""
    if not rate_id:
        return 0.0
    rate = session.exec(
        select(ShippingRate).where(ShippingRate.id == rate_id, ShippingRate.active == True)  # noqa: E712
    ).first()
    if rate is None:
        raise NotFoundError("shipping not found or inactive")
    return float(rate.flat_cost)


# ------------------------------------------------------- packaging rates


def _parse_packaging(data: Mapping[str, Any]) -> dict:
    return {
        "name": require_text(data.get("name"), "name"),
        "flat_cost": parse_non_negative_float(data.get("flat_cost"), "flat_cost"),
        "notes": optional_text(data.get("notes")),
        "active": parse_flag(data.get("active", True)),
    }


def list_packaging_rates(session: Session, *, active_only: bool = False) -> List[PackagingRate]:
    stmt = select(PackagingRate)
    if active_only:
        stmt = stmt.where(PackagingRate.active == True)  # noqa: E712
    return session.exec(stmt.order_by(PackagingRate.id.desc())).all()


def create_packaging_rate(session: Session, data: Mapping[str, Any]) -> PackagingRate:
    rate = PackagingRate(**_parse_packaging(data))
    session.add(rate)
    session.commit()
    session.refresh(rate)
    return rate


def update_packaging_rate(session: Session, rate_id: int, data: Mapping[str, Any]) -> PackagingRate:
    values = _parse_packaging(data)
    rate = session.get(PackagingRate, rate_id)
    if rate is None:
        raise NotFoundError("packaging rate not found")
    for key, value in values.items():
        setattr(rate, key, value)
    rate.updated_at = utcnow()
    session.add(rate)
    session.commit()
    session.refresh(rate)
    return rate


def get_optional_active_packaging_cost(session: Session, rate_id: Optional[int]) -> float:
    """Flat cost of an active packaging rate, ``0`` when nothing was selected."""
    if not rate_id:
        return 0.0
    rate = session.exec(
        select(PackagingRate).where(PackagingRate.id == rate_id, PackagingRate.active == True)  # noqa: E712
    ).first()
    if rate is None:
        raise NotFoundError("packaging not found or inactive")
    return float(rate.flat_cost)
