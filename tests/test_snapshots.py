import json
import logging

import pytest

from printquote.pricing import Breakdown, GlobalInput, ItemInput, Totals, calculate
from printquote.snapshots import (
    BREAKDOWN_ALIASES,
    SCHEMA_VERSION_KEY,
    SNAPSHOT_SCHEMA_VERSION,
    SnapshotDecodeError,
    decode_breakdown,
    decode_snapshot,
    decode_totals,
    encode_breakdown,
    encode_totals,
    extract_total,
    parse_snapshot,
)


def test_encoded_snapshot_uses_stable_keys_and_version_tag():
    data = json.loads(encode_breakdown(Breakdown(material_cost=1.5, tax=2)))
    assert data[SCHEMA_VERSION_KEY] == SNAPSHOT_SCHEMA_VERSION
    assert set(data) == {
        SCHEMA_VERSION_KEY,
        "material_cost",
        "machine_cost",
        "labor_cost",
        "subtotal",
        "overhead",
        "failure_insurance",
        "packaging_cost",
        "shipping_cost",
        "margin",
        "tax",
    }
    assert json.loads(encode_totals(Totals(total=9.5))) == {
        SCHEMA_VERSION_KEY: SNAPSHOT_SCHEMA_VERSION,
        "total": 9.5,
    }


def test_calculated_result_reads_back_unchanged():
    item = ItemInput(grams=137, print_minutes=95, labor_minutes=12, quantity=4, cost_per_kg=85000)
    g = GlobalInput(
        machine_hourly_rate=4500,
        labor_per_minute=300,
        overhead_fixed=2000,
        overhead_percent=12.5,
        failure_rate_percent=7,
        waste_percent=8,
        margin_percent=35,
        tax_enabled=True,
        tax_percent=19,
        packaging_cost=1500,
        shipping_cost=9000,
    )
    result = calculate(item, g)

    assert decode_breakdown(encode_breakdown(result.breakdown)) == result.breakdown
    assert decode_totals(encode_totals(result.totals)) == result.totals


def test_legacy_short_keys():
    b = decode_breakdown('{"material": 1, "machine": 2, "labor": 3}')
    assert b == Breakdown(material_cost=1, machine_cost=2, labor_cost=3)


def test_breakdown_nested_under_wrapper():
    raw = json.dumps({"breakdown": {"material_cost": 4, "failure": 1.25, "shipping": 10}})
    b = decode_breakdown(raw)
    assert b.material_cost == 4
    assert b.failure_insurance == 1.25
    assert b.shipping_cost == 10
    assert b.tax == 0


def test_keys_are_normalised():
    b = decode_breakdown('{"Material-Cost": 7, "PACKAGING": 2}')
    assert b.material_cost == 7
    assert b.packaging_cost == 2


def test_canonical_key_wins_over_legacy_alias():
    b = decode_breakdown('{"material": 1, "material_cost": 5}')
    assert b.material_cost == 5


def test_totals_alias_priority():
    assert extract_total('{"total": 1, "grand_total": 2, "final_total": 3}') == 1
    assert extract_total('{"grand_total": 2, "final_total": 3}') == 2
    assert extract_total('{"final_total": 3}') == 3
    assert extract_total('{"totals": {"total": 42}}') == 42
    assert extract_total('{"subtotal": 99}') == 0


def test_non_numeric_leaves_are_ignored():
    b = decode_breakdown('{"material_cost": "12", "tax": true, "margin": null, "overhead": 3}')
    assert b.material_cost == 0
    assert b.tax == 0
    assert b.margin == 0
    assert b.overhead == 3


@pytest.mark.parametrize("raw", ["not json", "", None, "[1, 2]", "42"])
def test_unreadable_snapshot_reads_as_zeros(raw, caplog):
    with caplog.at_level(logging.WARNING, logger="printquote.snapshots"):
        assert decode_breakdown(raw) == Breakdown()
        assert decode_totals(raw) == Totals(total=0)
    assert "Unreadable quote snapshot" in caplog.text


def test_parse_snapshot_raises_on_non_object():
    with pytest.raises(SnapshotDecodeError):
        parse_snapshot("[]")
    with pytest.raises(SnapshotDecodeError):
        parse_snapshot("{oops")


def test_injected_alias_table():
    aliases = dict(BREAKDOWN_ALIASES)
    aliases["material_cost"] = ("filament",) + tuple(aliases["material_cost"])
    decoded = decode_snapshot('{"filament": 8, "material": 1}', aliases, wrapper="breakdown")
    assert decoded["material_cost"] == 8
    assert set(decoded) == set(BREAKDOWN_ALIASES)


@pytest.mark.parametrize(
    "raw",
    [
        '{"total": NaN}',
        '{"total": Infinity}',
        '{"totals": {"total": -Infinity}}',
        '{"total": 1e400}',
        '{"total": 1' + "0" * 400 + "}",
    ],
)
def test_non_finite_numbers_read_as_zeros(raw):
    assert extract_total(raw) == 0
    assert decode_breakdown(raw) == Breakdown()


def test_deeply_nested_snapshot_reads_as_zeros():
    raw = '{"a":' * 5000 + "1" + "}" * 5000
    assert decode_totals(raw) == Totals(total=0)
    with pytest.raises(SnapshotDecodeError):
        parse_snapshot(raw)


def test_nested_values_below_recursion_limit_are_flattened():
    depth = 50
    raw = '{"a":' * depth + '{"total": 5}' + "}" * depth
    values = parse_snapshot(raw)
    assert values["_".join(["a"] * depth) + "_total"] == 5


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
def test_writer_refuses_non_finite_amounts(value):
    with pytest.raises(ValueError):
        encode_totals(Totals(total=value))
    with pytest.raises(ValueError):
        encode_breakdown(Breakdown(tax=value))
