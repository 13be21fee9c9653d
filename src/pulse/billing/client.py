"""Abstract billing client interface.

Defines the contract for billing vendor adapters. The revenue service
depends only on this interface, keeping Stripe-specific HTTP details
isolated in the concrete implementation.
"""

from abc import ABC, abstractmethod


class BillingClient(ABC):
    """Abstract base class for billing vendor API clients.

    Every list method returns the raw, untyped records of a single page
    (at most page_size entries). Pagination is NOT handled here.
    """

    vendor: str = "billing"

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        ...

    @abstractmethod
    async def list_products(self) -> list[dict]:
        """Active products, used to label plan revenue."""
        ...

    @abstractmethod
    async def list_subscriptions(
        self, status: str, created_gte: int | None = None
    ) -> list[dict]:
        """Subscriptions with the given status, optionally created at or after a unix time."""
        ...

    @abstractmethod
    async def list_charges(self, created_gte: int) -> list[dict]:
        """Charges created at or after a unix time."""
        ...

    @abstractmethod
    async def list_events(self, types: list[str], limit: int) -> list[dict]:
        """Most recent events of the given types."""
        ...
