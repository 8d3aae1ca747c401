from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Column, Index, Text
from sqlmodel import Field, SQLModel

if SQLModel.metadata.tables:
    SQLModel.metadata.clear()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Material(SQLModel, table=True):
    __tablename__ = "materials"
    __table_args__ = (
        Index("idx_materials_name", "name"),
        Index("idx_materials_active", "active"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    cost_per_kg: float
    notes: Optional[str] = None
    active: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, server_default="1"),
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class RateConfig(SQLModel, table=True):
    """Shop-wide rates; a single row with ``id == 1``."""

    __tablename__ = "rate_config"
    __table_args__ = (CheckConstraint("id = 1", name="chk_rate_config_singleton"),)

    id: Optional[int] = Field(default=1, primary_key=True)
    machine_hourly_rate: float = 0.0
    labor_per_minute: float = 0.0
    overhead_fixed: float = 0.0
    overhead_percent: float = 0.0
    failure_rate_percent: float = 0.0
    tax_percent: float = 0.0
    currency: str = "COP"
    updated_at: datetime = Field(default_factory=utcnow)


class ShippingRate(SQLModel, table=True):
    __tablename__ = "shipping_rates"
    __table_args__ = (
        Index("idx_shipping_rates_scope_country_city", "scope", "country", "city"),
        Index("idx_shipping_rates_active", "active"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    scope: str
    country: str
    city: Optional[str] = None
    flat_cost: float = 0.0
    notes: Optional[str] = None
    active: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, server_default="1"),
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class PackagingRate(SQLModel, table=True):
    __tablename__ = "packaging_rates"
    __table_args__ = (
        Index("idx_packaging_rates_name", "name"),
        Index("idx_packaging_rates_active", "active"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    flat_cost: float = 0.0
    notes: Optional[str] = None
    active: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, server_default="1"),
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Quote(SQLModel, table=True):
    """Immutable quote header with the cost snapshot taken at creation."""

    __tablename__ = "quotes"
    __table_args__ = (Index("idx_quotes_created_at", "created_at"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow)
    title: Optional[str] = None
    notes: Optional[str] = None
    waste_percent: float
    margin_percent: float
    tax_enabled: bool
    tax_percent_snapshot: float
    totals_json: str = Field(sa_column=Column(Text, nullable=False))
    breakdown_json: str = Field(sa_column=Column(Text, nullable=False))


class QuoteItem(SQLModel, table=True):
    __tablename__ = "quote_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    quote_id: int = Field(foreign_key="quotes.id", ondelete="CASCADE", index=True)
    material_id: int = Field(foreign_key="materials.id", index=True)
    grams: float
    print_minutes: float
    labor_minutes: float
    quantity: float
