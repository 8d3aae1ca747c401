import pytest

from printquote.services.catalog import (
    create_material,
    create_packaging_rate,
    create_shipping_rate,
    get_active_material,
    get_optional_active_packaging_cost,
    get_optional_active_shipping_cost,
    list_active_materials,
    list_materials,
    list_packaging_rates,
    list_shipping_rates,
    update_material,
    update_packaging_rate,
    update_shipping_rate,
)
from printquote.services.errors import NotFoundError, ValidationError


def test_create_and_list_materials(session):
    pla = create_material(session, {"name": "  PLA ", "cost_per_kg": "85000"})
    petg = create_material(session, {"name": "PETG", "cost_per_kg": 95000, "notes": "negro"})
    update_material(session, pla.id, {"name": "PLA", "cost_per_kg": 85000, "active": False})

    assert pla.name == "PLA"
    assert [m.id for m in list_materials(session)] == [petg.id, pla.id]
    assert [m.name for m in list_active_materials(session)] == ["PETG"]


def test_material_validation(session):
    with pytest.raises(ValidationError, match="name is required"):
        create_material(session, {"name": " ", "cost_per_kg": 1})
    with pytest.raises(ValidationError, match="cost_per_kg must be greater than 0"):
        create_material(session, {"name": "PLA", "cost_per_kg": 0})
    with pytest.raises(NotFoundError, match="material not found"):
        update_material(session, 999, {"name": "PLA", "cost_per_kg": 1})


def test_get_active_material(session):
    pla = create_material(session, {"name": "PLA", "cost_per_kg": 85000})
    assert get_active_material(session, pla.id).cost_per_kg == 85000

    update_material(session, pla.id, {"name": "PLA", "cost_per_kg": 85000, "active": False})
    with pytest.raises(NotFoundError, match="material not found or inactive"):
        get_active_material(session, pla.id)
    with pytest.raises(NotFoundError):
        get_active_material(session, 12345)


def test_shipping_rates(session):
    co = create_shipping_rate(session, {"scope": "co", "country": "Colombia", "flat_cost": 12000})
    intl = create_shipping_rate(
        session, {"scope": "INTL", "country": "Peru", "flat_cost": 90000, "active": False}
    )
    assert co.scope == "CO"
    assert [r.id for r in list_shipping_rates(session)] == [intl.id, co.id]
    assert [r.id for r in list_shipping_rates(session, active_only=True)] == [co.id]

    with pytest.raises(ValidationError, match="scope must be one of"):
        create_shipping_rate(session, {"scope": "MARS", "country": "X"})
    with pytest.raises(ValidationError, match="country is required"):
        create_shipping_rate(session, {"scope": "CO", "country": ""})

    updated = update_shipping_rate(
        session, co.id, {"scope": "CITY", "country": "Colombia", "city": "Medellín", "flat_cost": 8000}
    )
    assert updated.city == "Medellín"
    assert updated.flat_cost == 8000
    with pytest.raises(NotFoundError):
        update_shipping_rate(session, 999, {"scope": "CO", "country": "Colombia", "flat_cost": 0})


def test_optional_shipping_cost(session):
    co = create_shipping_rate(session, {"scope": "CO", "country": "Colombia", "flat_cost": 12000})
    off = create_shipping_rate(
        session, {"scope": "CO", "country": "Colombia", "flat_cost": 1, "active": False}
    )
    assert get_optional_active_shipping_cost(session, None) == 0
    assert get_optional_active_shipping_cost(session, co.id) == 12000
    with pytest.raises(NotFoundError, match="shipping not found or inactive"):
        get_optional_active_shipping_cost(session, off.id)


def test_packaging_rates(session):
    box = create_packaging_rate(session, {"name": "Caja", "flat_cost": "1500"})
    bag = create_packaging_rate(session, {"name": "Bolsa", "flat_cost": 300, "active": False})
    assert [r.id for r in list_packaging_rates(session)] == [bag.id, box.id]
    assert [r.id for r in list_packaging_rates(session, active_only=True)] == [box.id]

    assert get_optional_active_packaging_cost(session, None) == 0
    assert get_optional_active_packaging_cost(session, box.id) == 1500
    with pytest.raises(NotFoundError, match="packaging not found or inactive"):
        get_optional_active_packaging_cost(session, bag.id)

    with pytest.raises(ValidationError, match="flat_cost"):
        create_packaging_rate(session, {"name": "Caja", "flat_cost": -1})
    update_packaging_rate(session, bag.id, {"name": "Bolsa", "flat_cost": 300, "active": True})
    assert get_optional_active_packaging_cost(session, bag.id) == 300
