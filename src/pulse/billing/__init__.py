"""Billing vendor layer -- Stripe API access and raw record extraction."""

from pulse.billing.client import BillingClient
from pulse.billing.events import BillingEvent, recent_events
from pulse.billing.stripe_client import StripeClient

__all__ = ["BillingClient", "BillingEvent", "StripeClient", "recent_events"]
