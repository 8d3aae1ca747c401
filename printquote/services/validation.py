"""Parsing helpers for user supplied numbers and ids.

Values may arrive as raw form strings or as already-decoded JSON numbers;
both are accepted.  Every helper raises :class:`ValidationError` with a
message naming the offending field.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from .errors import ValidationError


def _to_float(raw: Any, field: str) -> float:
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be numeric")
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        try:
            value = float(str(raw).strip())
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"{field} must be numeric") from exc
    if math.isnan(value) or math.isinf(value):
        raise ValidationError(f"{field} must be numeric")
    return value


def parse_non_negative_float(raw: Any, field: str) -> float:
    value = _to_float(raw, field)
    if value < 0:
        raise ValidationError(f"{field} must be greater than or equal to 0")
    return value


def parse_positive_float(raw: Any, field: str) -> float:
    value = _to_float(raw, field)
    if value <= 0:
        raise ValidationError(f"{field} must be greater than 0")
    return value


def parse_percent(raw: Any, field: str) -> float:
    value = parse_non_negative_float(raw, field)
    if value > 100:
        raise ValidationError(f"{field} must be between 0 and 100")
    return value


def parse_required_id(raw: Any, field: str) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field} is invalid") from exc
    if value <= 0:
        raise ValidationError(f"{field} is invalid")
    return value


def parse_optional_id(raw: Any, field: str) -> Optional[int]:
    """Return ``None`` for an empty selection, otherwise a positive id."""
    if raw is None or str(raw).strip() == "":
        return None
    return parse_required_id(raw, field)


def parse_flag(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw or "").strip().lower() in ("1", "true", "yes", "on")


def require_text(raw: Optional[str], field: str) -> str:
    value = (raw or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    return value


def optional_text(raw: Optional[str]) -> Optional[str]:
    return (raw or "").strip() or None
