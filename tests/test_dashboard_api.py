"""Tests for the dashboard JSON API."""

import pytest
from fastapi.testclient import TestClient

from pulse.collector import MetricsCollector
from pulse.config import PulseSettings
from pulse.dashboard.app import create_dashboard_app
from pulse.history.store import HistoryStore, utc_today
from pulse.settings_store import SettingsStore

ACTIVE_SUB = {
    "items": {
        "data": [
            {
                "price": {
                    "unit_amount": 2900,
                    "recurring": {"interval": "month"},
                    "product": "prod_a",
                },
                "quantity": 1,
            }
        ]
    }
}


@pytest.fixture
def client(
    pulse_settings: PulseSettings,
    settings_store: SettingsStore,
    history_store: HistoryStore,
    fake_client_cls,
) -> TestClient:
    """TestClient over an app wired to isolated stores and a fake billing vendor."""
    app = create_dashboard_app()
    app.state.settings_store = settings_store
    app.state.history_store = history_store
    app.state.collector = MetricsCollector(
        pulse_settings.stripe,
        client_factory=lambda api_key: fake_client_cls(active=[ACTIVE_SUB]),
    )
    return TestClient(app)


class TestSettingsEndpoints:
    def test_default_settings(self, client: TestClient) -> None:
        response = client.get("/api/settings")
        assert response.status_code == 200
        assert response.json() == {"apps": [], "refreshInterval": 5, "launchAtStartup": False}

    def test_save_then_get(self, client: TestClient) -> None:
        document = {"apps": [], "refreshInterval": 10, "launchAtStartup": True}

        response = client.put("/api/settings", json=document)

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get("/api/settings").json() == document

    def test_invalid_json_rejected(self, client: TestClient) -> None:
        response = client.put(
            "/api/settings",
            content=b"{broken",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400

    def test_non_object_rejected(self, client: TestClient) -> None:
        assert client.put("/api/settings", json=[1, 2]).status_code == 400


class TestHistoryEndpoints:
    def test_empty_history(self, client: TestClient) -> None:
        response = client.get("/api/history/app-1")

        assert response.status_code == 200
        body = response.json()
        assert body["appId"] == "app-1"
        assert body["snapshots"] == []
        assert "lastUpdated" in body

    def test_post_snapshot_then_read(self, client: TestClient) -> None:
        response = client.post(
            "/api/history/app-1/snapshots",
            json={"stripe": {"mrr": 29, "arr": 348, "activeSubscriptions": 1, "churnRate": 0}},
        )

        assert response.status_code == 200
        snapshots = client.get("/api/history/app-1").json()["snapshots"]
        assert snapshots == [
            {
                "date": utc_today(),
                "appId": "app-1",
                "stripe": {"mrr": 29, "activeSubscriptions": 1, "churnRate": 0, "arr": 348},
                "vercel": None,
                "posthog": None,
                "supabase": None,
            }
        ]

    def test_sparkline(self, client: TestClient) -> None:
        client.post("/api/history/app-1/snapshots", json={"stripe": {"mrr": 12.5}})

        response = client.get("/api/history/app-1/sparkline/mrr", params={"days": 7})

        assert response.status_code == 200
        assert response.json() == [12.5]

    def test_sparkline_unknown_metric(self, client: TestClient) -> None:
        response = client.get("/api/history/app-1/sparkline/bogus")
        assert response.status_code == 400

    def test_invalid_app_id(self, client: TestClient) -> None:
        assert client.get("/api/history/a%5Cb").status_code == 400
        assert client.post("/api/history/%5Cetc/snapshots", json={}).status_code == 400


class TestAppMetricsEndpoint:
    def test_unknown_app(self, client: TestClient) -> None:
        assert client.get("/api/apps/missing/metrics").status_code == 404

    def test_collects_configured_app(self, client: TestClient, settings_store) -> None:
        settings_store.save(
            {
                "apps": [
                    {
                        "id": "app-1",
                        "name": "Alpha",
                        "integrations": [
                            {"type": "stripe", "enabled": True, "apiKey": "sk_test_1"}
                        ],
                    }
                ]
            }
        )

        response = client.get("/api/apps/app-1/metrics")

        assert response.status_code == 200
        body = response.json()
        assert body["stripe"]["mrr"] == 29
        assert body["stripe"]["activeSubscriptions"] == 1
        assert body["vercel"] is None
        assert body["stripeEvents"] == []
