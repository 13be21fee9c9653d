"""Field extraction over raw Stripe documents.

Stripe payloads come in two shapes: the current Prices API nests amounts
under ``item.price`` while legacy subscriptions carry ``item.plan``. Each
logical field is resolved through a prioritized fallback chain (new shape,
old shape, default). Missing or malformed fields degrade to the default,
never to an exception.

CRITICAL: amounts are converted to Decimal. Never use float for money.
"""

from decimal import Decimal
from typing import Any

MINOR_UNITS_PER_MAJOR = Decimal("100")

DEFAULT_INTERVAL = "month"
UNKNOWN_PRODUCT = "unknown"

# Monthly-equivalent multipliers per billing interval.
_INTERVAL_FACTORS: dict[str, Decimal] = {
    "year": Decimal("1") / Decimal("12"),
    "month": Decimal("1"),
    "week": Decimal("4.33"),
    "day": Decimal("30"),
}


def dig(document: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists along path, returning None on any miss."""
    current = document
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        if current is None:
            return None
    return current


def _as_decimal(value: Any) -> Decimal | None:
    """Numeric JSON value to Decimal; anything else (bool, str, None) is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    return None


def _as_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def first(*candidates: Any) -> Any:
    """Return the first candidate that is not None."""
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


# ──────────────────────────────────────────────
# Subscription items
# ──────────────────────────────────────────────


def primary_item(subscription: Any) -> dict:
    """The first subscription item, or an empty dict."""
    item = dig(subscription, "items", "data", 0)
    return item if isinstance(item, dict) else {}


def item_amount(item: dict) -> Decimal:
    """Unit amount in minor currency units: price.unit_amount, else plan.amount, else 0."""
    return first(
        _as_decimal(dig(item, "price", "unit_amount")),
        _as_decimal(dig(item, "plan", "amount")),
        Decimal("0"),
    )


def item_interval(item: dict) -> str:
    """Billing interval: price.recurring.interval, else plan.interval, else "month"."""
    return first(
        _as_str(dig(item, "price", "recurring", "interval")),
        _as_str(dig(item, "plan", "interval")),
        DEFAULT_INTERVAL,
    )


def item_quantity(item: dict) -> Decimal:
    return first(_as_decimal(dig(item, "quantity")), Decimal("1"))


def _product_ref(value: Any) -> str | None:
    # product is either an id string or an expanded product object
    if isinstance(value, dict):
        return _as_str(value.get("id"))
    return _as_str(value)


def item_product_id(item: dict) -> str:
    """Product identifier: price.product, else plan.product, else "unknown"."""
    return first(
        _product_ref(dig(item, "price", "product")),
        _product_ref(dig(item, "plan", "product")),
        UNKNOWN_PRODUCT,
    )


def item_nickname(item: dict) -> str | None:
    return first(
        _as_str(dig(item, "price", "nickname")),
        _as_str(dig(item, "plan", "nickname")),
    )


def interval_factor(interval: str) -> Decimal:
    """Monthly-equivalent multiplier; unrecognized intervals count as monthly."""
    return _INTERVAL_FACTORS.get(interval, Decimal("1"))


def monthly_revenue(subscription: Any) -> Decimal:
    """Monthly-equivalent revenue of a subscription in major currency units.

    monthly = amount * quantity * factor(interval) / 100
    """
    item = primary_item(subscription)
    monthly_minor = (
        item_amount(item) * item_quantity(item) * interval_factor(item_interval(item))
    )
    return monthly_minor / MINOR_UNITS_PER_MAJOR


def total_monthly_revenue(subscriptions: list[Any]) -> Decimal:
    return sum((monthly_revenue(s) for s in subscriptions), Decimal("0"))


# ──────────────────────────────────────────────
# Products and charges
# ──────────────────────────────────────────────


def product_names(products: list[Any]) -> dict[str, str]:
    """Map product id -> display name, skipping records without both."""
    names: dict[str, str] = {}
    for product in products:
        product_id = _as_str(dig(product, "id"))
        name = _as_str(dig(product, "name"))
        if product_id is not None and name is not None:
            names[product_id] = name
    return names


def is_succeeded(charge: Any) -> bool:
    return dig(charge, "status") == "succeeded"


def charge_amount(charge: Any) -> Decimal:
    """Charge amount in major currency units (0 when missing)."""
    amount = _as_decimal(dig(charge, "amount"))
    if amount is None:
        return Decimal("0")
    return amount / MINOR_UNITS_PER_MAJOR


def charge_created(charge: Any) -> int | None:
    """Creation time as unix seconds, or None."""
    created = dig(charge, "created")
    if isinstance(created, bool) or not isinstance(created, int):
        return None
    return created
