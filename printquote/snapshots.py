"""Serialize and read back the cost snapshot stored with every quote.

Quotes keep the breakdown and total that were computed when they were
created as two JSON documents.  The field names of those documents have
changed over time (``material`` vs ``material_cost``, flat vs nested under
``breakdown``), so reading them goes through an alias table instead of a
fixed schema:

1. the text is decoded into a nested mapping,
2. nested objects are flattened by joining parent and child keys with
   ``_`` and every key is normalised (lower case, ``-`` -> ``_``),
3. each canonical field takes the value of the first alias present,
   trying ``<alias>`` and then ``<wrapper>_<alias>`` for each alias.

Fields without a matching alias read as zero.  Text that is not JSON at
all reads as an all-zero snapshot: historical quotes must always render.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, fields
from typing import Any, Dict, Mapping, Sequence

from .pricing import Breakdown, Totals

logger = logging.getLogger(__name__)

SNAPSHOT_SCHEMA_VERSION = 2
SCHEMA_VERSION_KEY = "schema_version"

AliasTable = Mapping[str, Sequence[str]]

BREAKDOWN_ALIASES: Dict[str, tuple[str, ...]] = {
    "material_cost": ("material_cost", "material"),
    "machine_cost": ("machine_cost", "machine"),
    "labor_cost": ("labor_cost", "labor"),
    "subtotal": ("subtotal",),
    "overhead": ("overhead",),
    "failure_insurance": ("failure_insurance", "failure"),
    "packaging_cost": ("packaging_cost", "packaging"),
    "shipping_cost": ("shipping_cost", "shipping"),
    "margin": ("margin",),
    "tax": ("tax",),
}

TOTALS_ALIASES: Dict[str, tuple[str, ...]] = {
    "total": ("total", "grand_total", "final_total"),
}


class SnapshotDecodeError(ValueError):
    """Raised when snapshot text is not a JSON object."""
    pass


# ---------------------------------------------------------------- writer


def _dump(values: Mapping[str, Any]) -> str:
    payload: Dict[str, Any] = {SCHEMA_VERSION_KEY: SNAPSHOT_SCHEMA_VERSION}
    payload.update(values)
    # Raises ValueError for NaN and infinities, which are not JSON.
    return json.dumps(payload, allow_nan=False)


def encode_breakdown(breakdown: Breakdown) -> str:
    return _dump(asdict(breakdown))


def encode_totals(totals: Totals) -> str:
    return _dump(asdict(totals))


# ---------------------------------------------------------------- reader


def normalize_key(key: str) -> str:
    return str(key).strip().lower().replace("-", "_")


def _reject_constant(token: str) -> Any:
    raise SnapshotDecodeError(f"snapshot is not valid JSON: {token} is not a number")


def _finite(value: Any, name: str) -> float:
    try:
        number = float(value)
    except OverflowError as exc:
        raise SnapshotDecodeError(f"snapshot value {name} is out of range") from exc
    if not math.isfinite(number):
        raise SnapshotDecodeError(f"snapshot value {name} is out of range")
    return number


def _collect_numbers(source: Mapping[str, Any]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    stack = [("", source)]
    while stack:
        prefix, mapping = stack.pop()
        for key, value in mapping.items():
            name = normalize_key(key)
            if prefix:
                name = f"{prefix}_{name}"
            if isinstance(value, bool):
                continue
            if isinstance(value, (int, float)):
                out[name] = _finite(value, name)
            elif isinstance(value, Mapping):
                stack.append((name, value))
    return out


def parse_snapshot(raw: str | bytes | None) -> Dict[str, float]:
    """Return the flattened numeric values of a snapshot document.

    Raises :class:`SnapshotDecodeError` when ``raw`` is not a JSON object,
    uses the non-standard ``NaN``/``Infinity`` tokens or holds a number
    outside the float range.
    Non-numeric leaves (strings, lists, booleans, null) are dropped.
    """

    if raw is None:
        raise SnapshotDecodeError("snapshot is empty")
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except SnapshotDecodeError:
        raise
    except (TypeError, ValueError) as exc:
        raise SnapshotDecodeError(f"snapshot is not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise SnapshotDecodeError("snapshot is nested too deeply") from exc
    if not isinstance(data, dict):
        raise SnapshotDecodeError(
            f"snapshot must be a JSON object, got {type(data).__name__}"
        )
    return _collect_numbers(data)


def pick(values: Mapping[str, float], aliases: Sequence[str], wrapper: str | None = None) -> float:
    for alias in aliases:
        key = normalize_key(alias)
        if key in values:
            return values[key]
        if wrapper and f"{wrapper}_{key}" in values:
            return values[f"{wrapper}_{key}"]
    return 0.0


def decode_snapshot(
    raw: str | bytes | None,
    aliases: AliasTable,
    wrapper: str | None = None,
) -> Dict[str, float]:
    """Map a stored snapshot onto the canonical fields of ``aliases``.

    ``aliases`` maps each canonical field to the ordered keys accepted for
    it.  Every canonical field is present in the result; unreadable input
    yields zeros for all of them.
    """

    try:
        values = parse_snapshot(raw)
    except SnapshotDecodeError as exc:
        logger.warning("Unreadable quote snapshot, reading as zeros: %s", exc)
        values = {}
    return {name: pick(values, keys, wrapper) for name, keys in aliases.items()}


def decode_breakdown(raw: str | bytes | None, aliases: AliasTable = BREAKDOWN_ALIASES) -> Breakdown:
    decoded = decode_snapshot(raw, aliases, wrapper="breakdown")
    known = {f.name for f in fields(Breakdown)}
    return Breakdown(**{k: v for k, v in decoded.items() if k in known})


def decode_totals(raw: str | bytes | None, aliases: AliasTable = TOTALS_ALIASES) -> Totals:
    decoded = decode_snapshot(raw, aliases, wrapper="totals")
    return Totals(total=decoded.get("total", 0.0))


def extract_total(raw: str | bytes | None) -> float:
    """Shortcut used by quote listings."""
    return decode_totals(raw).total
