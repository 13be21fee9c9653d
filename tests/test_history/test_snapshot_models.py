"""Tests for snapshot reduction and app metrics documents."""

from decimal import Decimal

import pytest

from pulse.history.models import HistoricalData, MetricSnapshot, reduce_snapshot
from pulse.models import (
    AppMetrics,
    Deployment,
    PostHogMetrics,
    SupabaseMetrics,
    VercelMetrics,
)


def _deployment(state: str) -> Deployment:
    return Deployment(id=f"dpl_{state}", name="web", state=state, created_at="2024-01-01")


class TestSuccessRate:
    def test_no_deployments_is_100(self) -> None:
        assert VercelMetrics().success_rate == 100.0

    def test_only_in_progress_is_100(self) -> None:
        vercel = VercelMetrics(deployments=[_deployment("BUILDING"), _deployment("QUEUED")])
        assert vercel.success_rate == 100.0

    def test_ready_over_finished(self) -> None:
        vercel = VercelMetrics(
            deployments=[
                _deployment("READY"),
                _deployment("READY"),
                _deployment("READY"),
                _deployment("ERROR"),
                _deployment("BUILDING"),
            ]
        )
        assert vercel.success_rate == 75.0

    def test_canceled_counts_as_failure(self) -> None:
        vercel = VercelMetrics(deployments=[_deployment("READY"), _deployment("CANCELED")])
        assert vercel.success_rate == 50.0


class TestReduceSnapshot:
    def test_projects_every_vendor(self) -> None:
        metrics = AppMetrics.from_dict(
            {
                "stripe": {"mrr": 29, "arr": 348, "activeSubscriptions": 1, "churnRate": 2.5},
                "vercel": {
                    "deployments": [
                        {"id": "d1", "state": "READY"},
                        {"id": "d2", "state": "ERROR"},
                    ]
                },
                "posthog": {"uniqueUsers7d": 40, "totalEvents7d": 900, "uniqueUsers24h": 5},
                "supabase": {"totalUsers": 12, "apiRequests24h": 300},
            }
        )

        snapshot = reduce_snapshot("app-1", "2024-01-01", metrics)

        assert snapshot.to_dict() == {
            "date": "2024-01-01",
            "appId": "app-1",
            "stripe": {"mrr": 29, "activeSubscriptions": 1, "churnRate": 2.5, "arr": 348},
            "vercel": {"deployments": 2, "successRate": 50.0},
            "posthog": {"uniqueUsers": 40, "totalEvents": 900},
            "supabase": {"totalUsers": 12, "apiRequests": 300},
        }

    def test_absent_vendors_stay_null(self) -> None:
        snapshot = reduce_snapshot(
            "app-1", "2024-01-01", AppMetrics(posthog=PostHogMetrics(unique_users_7d=3))
        )

        assert snapshot.stripe is None
        assert snapshot.vercel is None
        assert snapshot.supabase is None
        assert snapshot.posthog.unique_users == 3

    def test_supabase_uses_24h_requests(self) -> None:
        snapshot = reduce_snapshot(
            "app-1",
            "2024-01-01",
            AppMetrics(supabase=SupabaseMetrics(total_users=7, api_requests_24h=70)),
        )
        assert snapshot.supabase.api_requests == 70


class TestDocuments:
    def test_snapshot_without_date_rejected(self) -> None:
        with pytest.raises(ValueError):
            MetricSnapshot.from_dict({"appId": "app-1"})

    def test_history_requires_snapshot_list(self) -> None:
        with pytest.raises(ValueError):
            HistoricalData.from_dict({"appId": "app-1"})
        with pytest.raises(ValueError):
            HistoricalData.from_dict(["not", "a", "dict"])

    def test_history_from_dict(self) -> None:
        history = HistoricalData.from_dict(
            {
                "appId": "app-1",
                "snapshots": [{"date": "2024-01-01", "stripe": {"mrr": 10.25}}],
                "lastUpdated": "2024-01-01T00:00:00Z",
            }
        )
        assert history.snapshots[0].stripe.mrr == Decimal("10.25")
        assert history.snapshots[0].stripe.active_subscriptions == 0

    def test_app_metrics_round_trip_keys(self) -> None:
        data = {
            "stripe": None,
            "vercel": {"deployments": [], "lastDeployedAt": None, "status": "ready"},
            "posthog": None,
            "supabase": None,
            "stripeEvents": [
                {
                    "id": "evt_1",
                    "type": "invoice.paid",
                    "created": 1700000000,
                    "description": "Invoice paid for customer",
                    "amount": 100,
                    "customerEmail": None,
                    "planName": None,
                    "currency": "usd",
                }
            ],
            "lastUpdated": "2024-01-01T00:00:00+00:00",
        }
        assert AppMetrics.from_dict(data).to_dict() == data
