"""Per-app metrics collection: fetch and derive for every enabled integration.

Each integration is isolated: a vendor failure leaves that vendor's metrics
unset and never prevents the others from being collected.
"""

from collections.abc import Callable
from datetime import datetime

import structlog

from pulse.billing.client import BillingClient
from pulse.billing.events import recent_events
from pulse.billing.stripe_client import StripeClient
from pulse.config import StripeSettings
from pulse.exceptions import VendorFetchError
from pulse.logging import get_logger
from pulse.models import App, AppMetrics, Integration
from pulse.revenue.service import RevenueMetricsService

logger = get_logger(__name__)

BillingClientFactory = Callable[[str], BillingClient]


class MetricsCollector:
    """Builds AppMetrics for an app from its enabled integrations.

    Only billing (Stripe) is fetched here. Deployment, analytics and
    database metrics are supplied by their own adapters through AppMetrics
    and are skipped by the collector.

    Args:
        settings: Stripe access settings.
        client_factory: Builds a BillingClient from an API key. Defaults to
            StripeClient; tests inject fakes here.
    """

    def __init__(
        self,
        settings: StripeSettings,
        client_factory: BillingClientFactory | None = None,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory or (
            lambda api_key: StripeClient(api_key, settings)
        )
        self._revenue_service = RevenueMetricsService(settings)

    async def collect(self, app: App, now: datetime | None = None) -> AppMetrics:
        """Fetch metrics for every enabled integration of an app."""
        metrics = AppMetrics()
        with structlog.contextvars.bound_contextvars(app_id=app.id):
            for integration in app.enabled_integrations():
                if integration.type == "stripe":
                    await self._collect_stripe(integration, metrics, now)
                else:
                    logger.debug("integration_not_collected", integration=integration.type)

            logger.info(
                "app_metrics_collected",
                stripe=metrics.stripe is not None,
                events=len(metrics.stripe_events or []),
            )
        return metrics

    async def _collect_stripe(
        self, integration: Integration, metrics: AppMetrics, now: datetime | None
    ) -> None:
        if not integration.api_key:
            logger.warning("stripe_integration_missing_api_key")
            return

        client = self._client_factory(integration.api_key)
        try:
            try:
                metrics.stripe = await self._revenue_service.fetch_metrics(client, now=now)
            except VendorFetchError as e:
                logger.error(
                    "revenue_metrics_unavailable",
                    vendor=e.vendor,
                    status_code=e.status_code,
                    error=str(e),
                )

            try:
                metrics.stripe_events = await recent_events(
                    client, self._settings.events_limit
                )
            except VendorFetchError as e:
                logger.warning("billing_events_unavailable", vendor=e.vendor, error=str(e))
        finally:
            await client.close()
