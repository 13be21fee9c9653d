"""Shared test fixtures for the Pulse metrics core."""

from pathlib import Path

import pytest

from pulse.billing.client import BillingClient
from pulse.config import PulseSettings, StorageSettings, StripeSettings
from pulse.history.store import HistoryStore
from pulse.settings_store import SettingsStore


class FakeBillingClient(BillingClient):
    """In-memory BillingClient.

    Each listing returns its configured records, or raises the configured
    exception. Calls are recorded for assertions.
    """

    vendor = "stripe"

    def __init__(
        self,
        products: list[dict] | None = None,
        active: list[dict] | None = None,
        canceled: list[dict] | None = None,
        new: list[dict] | None = None,
        charges: list[dict] | None = None,
        events: list[dict] | None = None,
        failures: dict[str, Exception] | None = None,
    ) -> None:
        self.records = {
            "products": products or [],
            "active": active or [],
            "canceled": canceled or [],
            "new": new or [],
            "charges": charges or [],
            "events": events or [],
        }
        self.failures = failures or {}
        self.calls: list[tuple] = []
        self.closed = False

    def _answer(self, name: str) -> list[dict]:
        if name in self.failures:
            raise self.failures[name]
        return self.records[name]

    async def close(self) -> None:
        self.closed = True

    async def list_products(self) -> list[dict]:
        self.calls.append(("products",))
        return self._answer("products")

    async def list_subscriptions(
        self, status: str, created_gte: int | None = None
    ) -> list[dict]:
        self.calls.append(("subscriptions", status, created_gte))
        if status == "canceled":
            return self._answer("canceled")
        if created_gte is not None:
            return self._answer("new")
        return self._answer("active")

    async def list_charges(self, created_gte: int) -> list[dict]:
        self.calls.append(("charges", created_gte))
        return self._answer("charges")

    async def list_events(self, types: list[str], limit: int) -> list[dict]:
        self.calls.append(("events", tuple(types), limit))
        return self._answer("events")


@pytest.fixture
def fake_client_cls() -> type[FakeBillingClient]:
    return FakeBillingClient


@pytest.fixture
def stripe_settings() -> StripeSettings:
    return StripeSettings(api_base="https://api.stripe.test/v1")


@pytest.fixture
def pulse_settings(tmp_path: Path) -> PulseSettings:
    """PulseSettings rooted in an isolated storage directory."""
    return PulseSettings(
        log_level="DEBUG",
        storage=StorageSettings(base_dir=tmp_path / "pulse"),
        stripe=StripeSettings(api_base="https://api.stripe.test/v1"),
    )


@pytest.fixture
def history_store(pulse_settings: PulseSettings) -> HistoryStore:
    return HistoryStore(pulse_settings.storage.history_dir)


@pytest.fixture
def settings_store(pulse_settings: PulseSettings) -> SettingsStore:
    return SettingsStore(pulse_settings.storage.settings_path)
