"""Snapshot history data models.

A MetricSnapshot is one day's reduced projection of an app's metrics; the
full RevenueMetrics and vendor payloads are never persisted. HistoricalData
is the per-app document kept by HistoryStore.

CRITICAL: Monetary values use Decimal in memory and plain JSON numbers on disk.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from pulse.models import AppMetrics
from pulse.revenue.models import to_decimal, to_int, to_number


@dataclass
class StripeSnapshot:
    mrr: Decimal
    active_subscriptions: int
    churn_rate: Decimal
    arr: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "mrr": to_number(self.mrr),
            "activeSubscriptions": self.active_subscriptions,
            "churnRate": to_number(self.churn_rate),
            "arr": to_number(self.arr),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StripeSnapshot":
        return cls(
            mrr=to_decimal(data.get("mrr")),
            active_subscriptions=to_int(data.get("activeSubscriptions")),
            churn_rate=to_decimal(data.get("churnRate")),
            arr=to_decimal(data.get("arr")),
        )


@dataclass
class VercelSnapshot:
    deployment_count: int
    success_rate: float

    def to_dict(self) -> dict[str, Any]:
        return {"deployments": self.deployment_count, "successRate": self.success_rate}

    @classmethod
    def from_dict(cls, data: dict) -> "VercelSnapshot":
        rate = data.get("successRate")
        return cls(
            deployment_count=to_int(data.get("deployments")),
            success_rate=float(rate) if isinstance(rate, (int, float)) else 100.0,
        )


@dataclass
class PostHogSnapshot:
    unique_users: int
    total_events: int

    def to_dict(self) -> dict[str, Any]:
        return {"uniqueUsers": self.unique_users, "totalEvents": self.total_events}

    @classmethod
    def from_dict(cls, data: dict) -> "PostHogSnapshot":
        return cls(
            unique_users=to_int(data.get("uniqueUsers")),
            total_events=to_int(data.get("totalEvents")),
        )


@dataclass
class SupabaseSnapshot:
    total_users: int
    api_requests: int

    def to_dict(self) -> dict[str, Any]:
        return {"totalUsers": self.total_users, "apiRequests": self.api_requests}

    @classmethod
    def from_dict(cls, data: dict) -> "SupabaseSnapshot":
        return cls(
            total_users=to_int(data.get("totalUsers")),
            api_requests=to_int(data.get("apiRequests")),
        )


@dataclass
class MetricSnapshot:
    """One app's reduced metrics for one UTC calendar day (date is YYYY-MM-DD)."""

    date: str
    app_id: str
    stripe: StripeSnapshot | None = None
    vercel: VercelSnapshot | None = None
    posthog: PostHogSnapshot | None = None
    supabase: SupabaseSnapshot | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "appId": self.app_id,
            "stripe": self.stripe.to_dict() if self.stripe is not None else None,
            "vercel": self.vercel.to_dict() if self.vercel is not None else None,
            "posthog": self.posthog.to_dict() if self.posthog is not None else None,
            "supabase": self.supabase.to_dict() if self.supabase is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MetricSnapshot":
        """Parse a stored snapshot. Raises ValueError without a string date."""
        snapshot_date = data.get("date")
        if not isinstance(snapshot_date, str):
            raise ValueError("snapshot is missing its date")

        def section(key: str) -> dict | None:
            value = data.get(key)
            return value if isinstance(value, dict) else None

        stripe = section("stripe")
        vercel = section("vercel")
        posthog = section("posthog")
        supabase = section("supabase")
        return cls(
            date=snapshot_date,
            app_id=str(data.get("appId", "")),
            stripe=StripeSnapshot.from_dict(stripe) if stripe is not None else None,
            vercel=VercelSnapshot.from_dict(vercel) if vercel is not None else None,
            posthog=PostHogSnapshot.from_dict(posthog) if posthog is not None else None,
            supabase=SupabaseSnapshot.from_dict(supabase) if supabase is not None else None,
        )


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class HistoricalData:
    """Retained snapshot history of one app, ascending and unique by date."""

    app_id: str
    snapshots: list[MetricSnapshot] = field(default_factory=list)
    last_updated: str = field(default_factory=_utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "appId": self.app_id,
            "snapshots": [s.to_dict() for s in self.snapshots],
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "HistoricalData":
        """Parse a stored history document.

        Raises:
            ValueError: if the document does not have the expected structure.
        """
        if not isinstance(data, dict):
            raise ValueError("history document is not an object")
        snapshots = data.get("snapshots")
        if not isinstance(snapshots, list):
            raise ValueError("history document has no snapshot list")
        if not all(isinstance(s, dict) for s in snapshots):
            raise ValueError("history document has a malformed snapshot")
        last_updated = data.get("lastUpdated")
        return cls(
            app_id=str(data.get("appId", "")),
            snapshots=[MetricSnapshot.from_dict(s) for s in snapshots],
            last_updated=last_updated if isinstance(last_updated, str) else _utc_now_iso(),
        )


def reduce_snapshot(app_id: str, date: str, metrics: AppMetrics) -> MetricSnapshot:
    """Project full app metrics onto the per-vendor subset that history retains."""
    stripe = metrics.stripe
    vercel = metrics.vercel
    posthog = metrics.posthog
    supabase = metrics.supabase
    return MetricSnapshot(
        date=date,
        app_id=app_id,
        stripe=StripeSnapshot(
            mrr=stripe.mrr,
            active_subscriptions=stripe.active_subscriptions,
            churn_rate=stripe.churn_rate,
            arr=stripe.arr,
        )
        if stripe is not None
        else None,
        vercel=VercelSnapshot(
            deployment_count=len(vercel.deployments),
            success_rate=vercel.success_rate,
        )
        if vercel is not None
        else None,
        posthog=PostHogSnapshot(
            unique_users=posthog.unique_users_7d,
            total_events=posthog.total_events_7d,
        )
        if posthog is not None
        else None,
        supabase=SupabaseSnapshot(
            total_users=supabase.total_users,
            api_requests=supabase.api_requests_24h,
        )
        if supabase is not None
        else None,
    )
