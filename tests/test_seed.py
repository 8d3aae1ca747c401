import logging

from sqlmodel import select

from printquote.models import Material, PackagingRate, RateConfig, ShippingRate
from printquote.services.seed import (
    DEFAULT_MATERIAL_NAME,
    DEFAULT_PACKAGING_NAME,
    run_seed,
)


def test_seed_is_idempotent(session, caplog):
    with caplog.at_level(logging.INFO, logger="printquote.services.seed"):
        first = run_seed(session)
    second = run_seed(session)

    assert first.inserts == 4
    assert second.inserts == 0
    assert "Seed inserted 4 row(s)" in caplog.text

    assert [m.name for m in session.exec(select(Material)).all()] == [DEFAULT_MATERIAL_NAME]
    assert [p.name for p in session.exec(select(PackagingRate)).all()] == [DEFAULT_PACKAGING_NAME]
    shipping = session.exec(select(ShippingRate)).all()
    assert len(shipping) == 1
    assert (shipping[0].scope, shipping[0].country, shipping[0].city) == ("CITY", "Colombia", "Bogotá")
    rates = session.get(RateConfig, 1)
    assert rates.tax_percent == 19
    assert rates.currency == "COP"


def test_seed_keeps_existing_rates(session):
    session.add(RateConfig(id=1, tax_percent=5))
    session.commit()

    stats = run_seed(session)

    assert stats.inserts == 3
    assert session.get(RateConfig, 1).tax_percent == 5
