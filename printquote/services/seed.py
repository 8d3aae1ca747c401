"""Idempotent startup seed for a fresh database."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlmodel import Session, select

from ..models import Material, PackagingRate, ShippingRate
from .rates import ensure_rate_config

logger = logging.getLogger(__name__)

DEFAULT_MATERIAL_NAME = "PLA (Generic)"
DEFAULT_PACKAGING_NAME = "Standard packaging"
DEFAULT_SHIPPING_COUNTRY = "Colombia"
DEFAULT_SHIPPING_CITY = "Bogotá"
DEFAULT_TAX_PERCENT = 19.0


@dataclass
class SeedStats:
    inserts: int = 0


def run_seed(session: Session) -> SeedStats:
    """Ensure the default material, rates, packaging and shipping exist.

    Running it again inserts nothing.  Everything is committed together.
    """

    stats = SeedStats()
    try:
        if not session.exec(select(Material).where(Material.name == DEFAULT_MATERIAL_NAME)).first():
            session.add(Material(name=DEFAULT_MATERIAL_NAME, cost_per_kg=0.0, active=True))
            stats.inserts += 1

        if not session.exec(
            select(PackagingRate).where(PackagingRate.name == DEFAULT_PACKAGING_NAME)
        ).first():
            session.add(PackagingRate(name=DEFAULT_PACKAGING_NAME, flat_cost=0.0, active=True))
            stats.inserts += 1

        if not session.exec(
            select(ShippingRate).where(
                ShippingRate.country == DEFAULT_SHIPPING_COUNTRY,
                ShippingRate.city == DEFAULT_SHIPPING_CITY,
            )
        ).first():
            session.add(
                ShippingRate(
                    scope="CITY",
                    country=DEFAULT_SHIPPING_COUNTRY,
                    city=DEFAULT_SHIPPING_CITY,
                    flat_cost=0.0,
                    active=True,
                )
            )
            stats.inserts += 1

        # commits the pending rows as well
        if ensure_rate_config(session, tax_percent=DEFAULT_TAX_PERCENT):
            stats.inserts += 1
        else:
            session.commit()
    except Exception:
        session.rollback()
        raise

    if stats.inserts:
        logger.info("Seed inserted %d row(s)", stats.inserts)
    return stats
