from datetime import timezone

from printquote.models import Material, Quote, RateConfig, utcnow
from printquote.services.catalog import create_material, update_material


def test_timestamps_default_to_aware_utc():
    assert utcnow().tzinfo is timezone.utc
    material = Material(name="PLA", cost_per_kg=1)
    assert material.created_at.tzinfo is timezone.utc
    assert material.updated_at.tzinfo is timezone.utc
    assert RateConfig().updated_at.tzinfo is timezone.utc
    quote = Quote(
        waste_percent=0,
        margin_percent=0,
        tax_enabled=False,
        tax_percent_snapshot=0,
        totals_json="{}",
        breakdown_json="{}",
    )
    assert quote.created_at.tzinfo is timezone.utc


def test_timestamped_rows_insert_and_update(session):
    material = create_material(session, {"name": "PLA", "cost_per_kg": 85000})
    created = material.created_at

    updated = update_material(session, material.id, {"name": "PLA+", "cost_per_kg": 90000})

    assert updated.name == "PLA+"
    assert updated.updated_at.replace(tzinfo=None) >= created.replace(tzinfo=None)
