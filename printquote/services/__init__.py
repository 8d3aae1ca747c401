"""Service layer for business logic.

Each function is UI agnostic and operates directly on a SQLModel
``Session`` instance.  The most commonly used names are re-exported so
callers can write ``from printquote.services import create_quote``.
"""

from .errors import NotFoundError, QuoteSaveError, ValidationError
from .rates import (
    build_global_input,
    ensure_rate_config,
    get_rate_config,
    update_rate_config,
)
from .catalog import (
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
from .quotes import (
    QuoteCalcRequest,
    QuoteCalculation,
    QuoteCreateRequest,
    QuoteLine,
    calculate_quote,
    create_quote,
    price_lines,
)
from .quote_read_models import (
    QuoteDetail,
    QuoteItemRow,
    QuoteListRow,
    build_quote_text,
    get_quote_detail,
    list_quotes,
)
from .seed import SeedStats, run_seed

__all__ = [
    "NotFoundError",
    "QuoteSaveError",
    "ValidationError",
    "build_global_input",
    "ensure_rate_config",
    "get_rate_config",
    "update_rate_config",
    "create_material",
    "create_packaging_rate",
    "create_shipping_rate",
    "get_active_material",
    "get_optional_active_packaging_cost",
    "get_optional_active_shipping_cost",
    "list_active_materials",
    "list_materials",
    "list_packaging_rates",
    "list_shipping_rates",
    "update_material",
    "update_packaging_rate",
    "update_shipping_rate",
    "QuoteCalcRequest",
    "QuoteCalculation",
    "QuoteCreateRequest",
    "QuoteLine",
    "calculate_quote",
    "create_quote",
    "price_lines",
    "QuoteDetail",
    "QuoteItemRow",
    "QuoteListRow",
    "build_quote_text",
    "get_quote_detail",
    "list_quotes",
    "SeedStats",
    "run_seed",
]
