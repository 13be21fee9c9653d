"""Revenue metrics fetch orchestration.

Issues the billing sub-fetches concurrently and feeds their results to
derive_metrics. The active-subscriptions listing is mandatory: its failure
aborts the derivation with a VendorFetchError. Every other listing is
optional and degrades to an empty result (charges to "unavailable") with
a warning.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

from pulse.billing import records
from pulse.billing.client import BillingClient
from pulse.config import StripeSettings
from pulse.exceptions import VendorFetchError
from pulse.logging import get_logger
from pulse.revenue.engine import derive_metrics
from pulse.revenue.models import RevenueMetrics

logger = get_logger(__name__)


class RevenueMetricsService:
    """Fetches raw billing records and derives RevenueMetrics.

    Stateless per call; the client is owned by the caller.

    Usage:
        service = RevenueMetricsService(settings.stripe)
        async with StripeClient(api_key, settings.stripe) as client:
            metrics = await service.fetch_metrics(client)
    """

    def __init__(self, settings: StripeSettings) -> None:
        self._settings = settings

    async def fetch_metrics(
        self, client: BillingClient, now: datetime | None = None
    ) -> RevenueMetrics:
        """Run all sub-fetches concurrently and derive metrics.

        Raises:
            VendorFetchError: if the active subscriptions cannot be fetched.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = int((now - timedelta(days=self._settings.lookback_days)).timestamp())

        products, active, canceled, new, charges = await asyncio.gather(
            client.list_products(),
            client.list_subscriptions("active"),
            client.list_subscriptions("canceled", created_gte=cutoff),
            client.list_subscriptions("active", created_gte=cutoff),
            client.list_charges(created_gte=cutoff),
            return_exceptions=True,
        )

        if isinstance(active, BaseException):
            logger.error(
                "active_subscriptions_fetch_failed",
                vendor=client.vendor,
                error=str(active),
            )
            if isinstance(active, VendorFetchError):
                raise active
            raise VendorFetchError(
                client.vendor, f"active subscriptions unavailable: {active}"
            ) from active

        product_list = self._optional(client, "products", products)
        canceled_list = self._optional(client, "canceled_subscriptions", canceled)
        new_list = self._optional(client, "new_subscriptions", new)
        charge_list = self._optional(client, "charges", charges)

        logger.info(
            "billing_records_fetched",
            vendor=client.vendor,
            active=len(active),
            canceled=len(canceled_list or []),
            new=len(new_list or []),
            charges=len(charge_list) if charge_list is not None else None,
        )

        return derive_metrics(
            product_names=records.product_names(product_list or []),
            active_subs=active,
            canceled_subs_30d=canceled_list or [],
            new_subs_30d=new_list or [],
            charges_30d=charge_list,
            now=now,
        )

    @staticmethod
    def _optional(client: BillingClient, name: str, result: Any) -> list[dict] | None:
        """Unwrap an optional sub-fetch result; None when it failed.

        Only vendor failures degrade. Anything else is a bug and propagates.
        """
        if isinstance(result, VendorFetchError):
            logger.warning(
                "optional_billing_fetch_failed",
                vendor=client.vendor,
                listing=name,
                error=str(result),
            )
            return None
        if isinstance(result, BaseException):
            raise result
        return result
