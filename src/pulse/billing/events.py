"""Recent billing activity feed built from raw Stripe events."""

from dataclasses import dataclass
from typing import Any

from pulse.billing.client import BillingClient
from pulse.billing.records import dig, first
from pulse.logging import get_logger

logger = get_logger(__name__)

FEED_EVENT_TYPES = [
    "invoice.paid",
    "invoice.payment_failed",
    "customer.subscription.created",
    "customer.subscription.deleted",
    "charge.succeeded",
]


@dataclass
class BillingEvent:
    """One entry of the activity feed. Amounts stay in minor currency units."""

    id: str
    type: str
    created: int
    description: str
    amount: int | None = None
    customer_email: str | None = None
    plan_name: str | None = None
    currency: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "created": self.created,
            "description": self.description,
            "amount": self.amount,
            "customerEmail": self.customer_email,
            "planName": self.plan_name,
            "currency": self.currency,
        }


def _int(value: Any) -> int | None:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def _str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def map_event(raw: dict) -> BillingEvent | None:
    """Map one raw event to a BillingEvent; None when id, type or created is missing."""
    event_id = _str(raw.get("id"))
    event_type = _str(raw.get("type"))
    created = _int(raw.get("created"))
    if event_id is None or event_type is None or created is None:
        return None

    obj = dig(raw, "data", "object") or {}
    event = BillingEvent(id=event_id, type=event_type, created=created, description=event_type)

    if event_type == "invoice.paid":
        event.amount = _int(dig(obj, "amount_paid"))
        event.customer_email = _str(dig(obj, "customer_email"))
        event.currency = _str(dig(obj, "currency"))
        event.description = f"Invoice paid for {event.customer_email or 'customer'}"
    elif event_type == "invoice.payment_failed":
        event.amount = _int(dig(obj, "amount_due"))
        event.customer_email = _str(dig(obj, "customer_email"))
        event.description = f"Payment failed for {event.customer_email or 'customer'}"
    elif event_type == "customer.subscription.created":
        price = dig(obj, "items", "data", 0, "price")
        event.plan_name = first(_str(dig(price, "nickname")), _str(dig(price, "product")))
        event.description = "New subscription created"
    elif event_type == "customer.subscription.deleted":
        event.description = "Subscription canceled"
    elif event_type == "charge.succeeded":
        event.amount = _int(dig(obj, "amount"))
        event.customer_email = _str(dig(obj, "billing_details", "email"))
        event.currency = _str(dig(obj, "currency"))
        event.description = f"Payment received from {event.customer_email or 'customer'}"

    return event


async def recent_events(client: BillingClient, limit: int = 20) -> list[BillingEvent]:
    """Fetch and map the most recent feed events, newest first as returned."""
    raw_events = await client.list_events(FEED_EVENT_TYPES, limit)
    events = [e for e in (map_event(r) for r in raw_events) if e is not None]
    logger.debug(
        "billing_events_mapped",
        vendor=client.vendor,
        received=len(raw_events),
        mapped=len(events),
    )
    return events
