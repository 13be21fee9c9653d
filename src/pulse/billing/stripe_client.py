"""Stripe billing client implementation via httpx async.

Wraps httpx.AsyncClient with Stripe authentication (secret key as the
basic-auth username), query construction and error mapping. Non-2xx
answers and transport failures become VendorFetchError with the HTTP
status when one exists.
"""

from typing import Any, Self

import httpx

from pulse.billing.client import BillingClient
from pulse.config import StripeSettings
from pulse.exceptions import VendorFetchError
from pulse.logging import get_logger

logger = get_logger(__name__)


class StripeClient(BillingClient):
    """Concrete Stripe client using httpx async.

    Usage:
        async with StripeClient(api_key, settings) as client:
            subs = await client.list_subscriptions("active")
    """

    vendor = "stripe"

    def __init__(
        self,
        api_key: str,
        settings: StripeSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._http = httpx.AsyncClient(
            base_url=settings.api_base,
            auth=httpx.BasicAuth(api_key, ""),
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        await self.close()

    async def list_products(self) -> list[dict]:
        return await self._list(
            "/products", [("limit", str(self._settings.page_size)), ("active", "true")]
        )

    async def list_subscriptions(
        self, status: str, created_gte: int | None = None
    ) -> list[dict]:
        params = [("status", status), ("limit", str(self._settings.page_size))]
        if created_gte is not None:
            params.append(("created[gte]", str(created_gte)))
        return await self._list("/subscriptions", params)

    async def list_charges(self, created_gte: int) -> list[dict]:
        return await self._list(
            "/charges",
            [
                ("limit", str(self._settings.page_size)),
                ("created[gte]", str(created_gte)),
            ],
        )

    async def list_events(self, types: list[str], limit: int) -> list[dict]:
        params = [("limit", str(limit))]
        params.extend(("types[]", event_type) for event_type in types)
        return await self._list("/events", params)

    # ──────────────────────────────────────────────
    # Internal
    # ──────────────────────────────────────────────

    async def _list(self, path: str, params: list[tuple[str, str]]) -> list[dict]:
        """GET a Stripe list endpoint and return its ``data`` array.

        A body without a ``data`` array yields an empty list; a body that
        is not a JSON object is a fetch failure.
        """
        try:
            response = await self._http.get(path, params=params)
        except httpx.HTTPError as exc:
            raise VendorFetchError(self.vendor, f"GET {path} failed: {exc}") from exc

        if response.is_error:
            raise VendorFetchError(
                self.vendor,
                f"GET {path} rejected: {_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise VendorFetchError(
                self.vendor, f"GET {path} returned invalid JSON"
            ) from exc
        if not isinstance(body, dict):
            raise VendorFetchError(self.vendor, f"GET {path} returned a non-object body")

        data = body.get("data")
        records = [r for r in data if isinstance(r, dict)] if isinstance(data, list) else []
        logger.debug("stripe_list_fetched", path=path, count=len(records))
        return records


def _error_message(response: httpx.Response) -> str:
    """Extract Stripe's error.message, falling back to the raw body."""
    try:
        body: Any = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        message = body["error"].get("message")
        if isinstance(message, str):
            return message
    return response.text[:200]
