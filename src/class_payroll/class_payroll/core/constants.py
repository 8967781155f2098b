"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_BASE_AMOUNT = Decimal("150.00")
DEFAULT_HISTORY_LIMIT = 50
DEFAULT_PENDING_LIMIT = 200

MONEY_QUANT = Decimal("0.01")

# Fields the client may send but which the store generates itself.
GENERATED_EVENT_FIELDS = frozenset({"id", "created_at", "updated_at", "total_amount"})
