"""Shop-wide rate configuration (singleton row)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlmodel import Session

from ..config import DEFAULT_CURRENCY
from ..models import RateConfig, utcnow
from ..pricing import GlobalInput
from .errors import NotFoundError
from .validation import parse_non_negative_float, parse_percent

RATE_CONFIG_ID = 1


@dataclass(frozen=True)
class RateValues:
    machine_hourly_rate: float
    labor_per_minute: float
    overhead_fixed: float
    overhead_percent: float
    failure_rate_percent: float
    tax_percent: float


def ensure_rate_config(session: Session, *, tax_percent: float = 0.0) -> bool:
    """Insert the singleton row if missing. Return ``True`` when inserted."""

    if session.get(RateConfig, RATE_CONFIG_ID) is not None:
        return False
    session.add(
        RateConfig(
            id=RATE_CONFIG_ID,
            tax_percent=tax_percent,
            currency=DEFAULT_CURRENCY,
        )
    )
    session.commit()
    return True


def get_rate_config(session: Session) -> RateConfig:
    ensure_rate_config(session)
    rates = session.get(RateConfig, RATE_CONFIG_ID)
    if rates is None:
        raise NotFoundError("rate configuration not found")
    return rates


def parse_rate_values(data: Mapping[str, Any]) -> RateValues:
    """Validate raw rate fields; amounts must be >= 0, percents 0-100."""

    return RateValues(
        machine_hourly_rate=parse_non_negative_float(
            data.get("machine_hourly_rate"), "machine_hourly_rate"
        ),
        labor_per_minute=parse_non_negative_float(data.get("labor_per_minute"), "labor_per_minute"),
        overhead_fixed=parse_non_negative_float(data.get("overhead_fixed"), "overhead_fixed"),
        overhead_percent=parse_percent(data.get("overhead_percent"), "overhead_percent"),
        failure_rate_percent=parse_percent(
            data.get("failure_rate_percent"), "failure_rate_percent"
        ),
        tax_percent=parse_percent(data.get("tax_percent"), "tax_percent"),
    )


def update_rate_config(session: Session, data: Mapping[str, Any]) -> RateConfig:
    values = parse_rate_values(data)
    rates = get_rate_config(session)
    rates.machine_hourly_rate = values.machine_hourly_rate
    rates.labor_per_minute = values.labor_per_minute
    rates.overhead_fixed = values.overhead_fixed
    rates.overhead_percent = values.overhead_percent
    rates.failure_rate_percent = values.failure_rate_percent
    rates.tax_percent = values.tax_percent
    rates.currency = DEFAULT_CURRENCY
    rates.updated_at = utcnow()
    session.add(rates)
    session.commit()
    session.refresh(rates)
    return rates


def build_global_input(
    rates: RateConfig,
    *,
    waste_percent: float,
    margin_percent: float,
    tax_enabled: bool,
    tax_percent: Optional[float] = None,
    packaging_cost: float = 0.0,
    shipping_cost: float = 0.0,
) -> GlobalInput:
    """Combine the shop rates with the per-quote percentages.

    ``tax_percent`` defaults to the shop's configured rate.
    """

    return GlobalInput(
        machine_hourly_rate=float(rates.machine_hourly_rate),
        labor_per_minute=float(rates.labor_per_minute),
        overhead_fixed=float(rates.overhead_fixed),
        overhead_percent=float(rates.overhead_percent),
        failure_rate_percent=float(rates.failure_rate_percent),
        waste_percent=waste_percent,
        margin_percent=margin_percent,
        tax_enabled=tax_enabled,
        tax_percent=float(rates.tax_percent) if tax_percent is None else tax_percent,
        packaging_cost=packaging_cost,
        shipping_cost=shipping_cost,
    )
