"""Cost formula for 3D-printed parts.

The engine is a pure function over numbers: no database access, no
validation.  Callers reject out-of-range input before calling it (see
``printquote.services.validation``); anything that reaches the engine is
simply propagated through the formula.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True)
class ItemInput:
    grams: float
    print_minutes: float = 0.0
    labor_minutes: float = 0.0
    quantity: float = 1.0
    cost_per_kg: float = 0.0


@dataclass(frozen=True)
class GlobalInput:
    machine_hourly_rate: float = 0.0
    labor_per_minute: float = 0.0
    overhead_fixed: float = 0.0
    overhead_percent: float = 0.0
    failure_rate_percent: float = 0.0
    waste_percent: float = 0.0
    margin_percent: float = 0.0
    tax_enabled: bool = False
    tax_percent: float = 0.0
    packaging_cost: float = 0.0
    shipping_cost: float = 0.0


@dataclass(frozen=True)
class Breakdown:
    material_cost: float = 0.0
    machine_cost: float = 0.0
    labor_cost: float = 0.0
    subtotal: float = 0.0
    overhead: float = 0.0
    failure_insurance: float = 0.0
    packaging_cost: float = 0.0
    shipping_cost: float = 0.0
    margin: float = 0.0
    tax: float = 0.0


@dataclass(frozen=True)
class Totals:
    total: float = 0.0


@dataclass(frozen=True)
class Result:
    breakdown: Breakdown = field(default_factory=Breakdown)
    totals: Totals = field(default_factory=Totals)


def _unit_costs(item: ItemInput, g: GlobalInput) -> tuple[float, float, float]:
    material = (item.grams / 1000.0) * item.cost_per_kg * (1.0 + g.waste_percent / 100.0)
    machine = (item.print_minutes / 60.0) * g.machine_hourly_rate
    labor = item.labor_minutes * g.labor_per_minute
    return material, machine, labor


def _finish(
    material: float,
    machine: float,
    labor: float,
    subtotal: float,
    g: GlobalInput,
) -> Result:
    # Overhead, failure insurance, margin and tax are batch-level.
    overhead = g.overhead_fixed + subtotal * (g.overhead_percent / 100.0)
    failure_insurance = subtotal * (g.failure_rate_percent / 100.0)
    margin = (g.margin_percent / 100.0) * (subtotal + overhead + failure_insurance)

    tax = 0.0
    if g.tax_enabled:
        tax = (g.tax_percent / 100.0) * (subtotal + overhead + failure_insurance + margin)

    # Packaging and shipping are pass-through: no margin, no tax.
    total = (
        subtotal
        + overhead
        + failure_insurance
        + g.packaging_cost
        + g.shipping_cost
        + margin
        + tax
    )

    return Result(
        breakdown=Breakdown(
            material_cost=material,
            machine_cost=machine,
            labor_cost=labor,
            subtotal=subtotal,
            overhead=overhead,
            failure_insurance=failure_insurance,
            packaging_cost=g.packaging_cost,
            shipping_cost=g.shipping_cost,
            margin=margin,
            tax=tax,
        ),
        totals=Totals(total=total),
    )


def calculate(item: ItemInput, g: GlobalInput) -> Result:
    """Price a single line item.

    Material, machine and labor costs are reported per unit; the subtotal
    is their sum multiplied by ``item.quantity`` so the quantity scaling
    is applied once.
    """

    material, machine, labor = _unit_costs(item, g)
    subtotal = (material + machine + labor) * item.quantity
    return _finish(material, machine, labor, subtotal, g)


def calculate_batch(items: Iterable[ItemInput], g: GlobalInput) -> Result:
    """Price several line items as one quote.

    Each item's material, machine and labor costs are extended by its own
    quantity and accumulated, so the reported component costs sum to the
    shared subtotal.  A single item is priced exactly like
    :func:`calculate`.
    """

    items = list(items)
    if len(items) == 1:
        return calculate(items[0], g)

    material = machine = labor = 0.0
    for item in items:
        m, mc, lb = _unit_costs(item, g)
        material += m * item.quantity
        machine += mc * item.quantity
        labor += lb * item.quantity
    subtotal = material + machine + labor
    return _finish(material, machine, labor, subtotal, g)
