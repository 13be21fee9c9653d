"""Core data models: configured apps, their integrations and fetched metrics.

Documents exchanged with the desktop shell use camelCase keys; every model
parses leniently (missing fields take defaults) and serializes back to the
same shape.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pulse.billing.events import BillingEvent
from pulse.revenue.models import RevenueMetrics, to_int


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@dataclass
class Integration:
    """A vendor connection configured on an app."""

    type: str
    enabled: bool = True
    api_key: str | None = None
    project_id: str | None = None
    team_id: str | None = None
    platform: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Integration":
        return cls(
            type=str(data.get("type", "")),
            enabled=bool(data.get("enabled", False)),
            api_key=_opt_str(data.get("apiKey")),
            project_id=_opt_str(data.get("projectId")),
            team_id=_opt_str(data.get("teamId")),
            platform=_opt_str(data.get("platform")),
        )


@dataclass
class App:
    """A user-configured product whose integrations feed one dashboard card."""

    id: str
    name: str
    platforms: list[str] = field(default_factory=list)
    integrations: list[Integration] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "App":
        platforms = data.get("platforms")
        integrations = data.get("integrations")
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            platforms=[p for p in platforms if isinstance(p, str)]
            if isinstance(platforms, list)
            else [],
            integrations=[
                Integration.from_dict(i) for i in integrations if isinstance(i, dict)
            ]
            if isinstance(integrations, list)
            else [],
        )

    def enabled_integrations(self) -> list[Integration]:
        return [i for i in self.integrations if i.enabled]


# ──────────────────────────────────────────────
# Vendor metrics other than billing
# ──────────────────────────────────────────────


@dataclass
class Deployment:
    id: str
    name: str
    state: str
    created_at: str
    url: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Deployment":
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            state=str(data.get("state", "unknown")),
            created_at=str(data.get("createdAt", "")),
            url=str(data.get("url", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state,
            "createdAt": self.created_at,
            "url": self.url,
        }


# Terminal Vercel deployment states; anything else is still in progress.
_SUCCEEDED_STATES = {"READY"}
_FAILED_STATES = {"ERROR", "CANCELED"}


@dataclass
class VercelMetrics:
    deployments: list[Deployment] = field(default_factory=list)
    last_deployed_at: str | None = None
    status: str = "unknown"

    @property
    def success_rate(self) -> float:
        """Percentage of finished deployments that reached READY.

        100 when no deployment has finished yet (no failure signal).
        """
        states = [d.state.upper() for d in self.deployments]
        succeeded = sum(1 for s in states if s in _SUCCEEDED_STATES)
        failed = sum(1 for s in states if s in _FAILED_STATES)
        finished = succeeded + failed
        if finished == 0:
            return 100.0
        return succeeded / finished * 100

    @classmethod
    def from_dict(cls, data: dict) -> "VercelMetrics":
        deployments = data.get("deployments")
        return cls(
            deployments=[
                Deployment.from_dict(d) for d in deployments if isinstance(d, dict)
            ]
            if isinstance(deployments, list)
            else [],
            last_deployed_at=_opt_str(data.get("lastDeployedAt")),
            status=str(data.get("status", "unknown")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "deployments": [d.to_dict() for d in self.deployments],
            "lastDeployedAt": self.last_deployed_at,
            "status": self.status,
        }


@dataclass
class PostHogMetrics:
    total_events_24h: int = 0
    unique_users_24h: int = 0
    total_events_7d: int = 0
    unique_users_7d: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "PostHogMetrics":
        return cls(
            total_events_24h=to_int(data.get("totalEvents24h")),
            unique_users_24h=to_int(data.get("uniqueUsers24h")),
            total_events_7d=to_int(data.get("totalEvents7d")),
            unique_users_7d=to_int(data.get("uniqueUsers7d")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalEvents24h": self.total_events_24h,
            "uniqueUsers24h": self.unique_users_24h,
            "totalEvents7d": self.total_events_7d,
            "uniqueUsers7d": self.unique_users_7d,
        }


@dataclass
class SupabaseMetrics:
    total_users: int = 0
    new_users_7d: int = 0
    database_size: str = "N/A"
    api_requests_24h: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "SupabaseMetrics":
        return cls(
            total_users=to_int(data.get("totalUsers")),
            new_users_7d=to_int(data.get("newUsers7d")),
            database_size=str(data.get("databaseSize", "N/A")),
            api_requests_24h=to_int(data.get("apiRequests24h")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalUsers": self.total_users,
            "newUsers7d": self.new_users_7d,
            "databaseSize": self.database_size,
            "apiRequests24h": self.api_requests_24h,
        }


# ──────────────────────────────────────────────
# Combined app metrics
# ──────────────────────────────────────────────


@dataclass
class AppMetrics:
    """Everything fetched for one app in one refresh.

    A vendor field is None when the integration is absent, disabled or its
    fetch failed.
    """

    stripe: RevenueMetrics | None = None
    vercel: VercelMetrics | None = None
    posthog: PostHogMetrics | None = None
    supabase: SupabaseMetrics | None = None
    stripe_events: list[BillingEvent] | None = None
    last_updated: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @classmethod
    def from_dict(cls, data: dict) -> "AppMetrics":
        def section(key: str) -> dict | None:
            value = data.get(key)
            return value if isinstance(value, dict) else None

        stripe = section("stripe")
        vercel = section("vercel")
        posthog = section("posthog")
        supabase = section("supabase")
        events = data.get("stripeEvents")
        metrics = cls(
            stripe=RevenueMetrics.from_dict(stripe) if stripe is not None else None,
            vercel=VercelMetrics.from_dict(vercel) if vercel is not None else None,
            posthog=PostHogMetrics.from_dict(posthog) if posthog is not None else None,
            supabase=SupabaseMetrics.from_dict(supabase) if supabase is not None else None,
            stripe_events=[
                BillingEvent(
                    id=str(e.get("id", "")),
                    type=str(e.get("type", "")),
                    created=to_int(e.get("created")),
                    description=str(e.get("description", "")),
                    amount=e.get("amount") if isinstance(e.get("amount"), int) else None,
                    customer_email=_opt_str(e.get("customerEmail")),
                    plan_name=_opt_str(e.get("planName")),
                    currency=_opt_str(e.get("currency")),
                )
                for e in events
                if isinstance(e, dict)
            ]
            if isinstance(events, list)
            else None,
        )
        if isinstance(data.get("lastUpdated"), str):
            metrics.last_updated = data["lastUpdated"]
        return metrics

    def to_dict(self) -> dict[str, Any]:
        return {
            "stripe": self.stripe.to_dict() if self.stripe is not None else None,
            "vercel": self.vercel.to_dict() if self.vercel is not None else None,
            "posthog": self.posthog.to_dict() if self.posthog is not None else None,
            "supabase": self.supabase.to_dict() if self.supabase is not None else None,
            "stripeEvents": [e.to_dict() for e in self.stripe_events]
            if self.stripe_events is not None
            else None,
            "lastUpdated": self.last_updated,
        }
