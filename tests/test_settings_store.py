"""Tests for the JSON settings document store."""

import json
from pathlib import Path

import pytest

from pulse.exceptions import PersistenceError
from pulse.settings_store import SettingsStore, default_settings


def _write(store: SettingsStore, content: str) -> None:
    store.path.parent.mkdir(parents=True, exist_ok=True)
    store.path.write_text(content, encoding="utf-8")


class TestLoad:
    def test_missing_file_gives_default(self, settings_store: SettingsStore) -> None:
        assert settings_store.load() == {
            "apps": [],
            "refreshInterval": 5,
            "launchAtStartup": False,
        }

    def test_unparsable_gives_default(self, settings_store: SettingsStore) -> None:
        _write(settings_store, "{oops")
        assert settings_store.load() == default_settings()

    def test_invalid_utf8_gives_default(self, settings_store: SettingsStore) -> None:
        settings_store.path.parent.mkdir(parents=True, exist_ok=True)
        settings_store.path.write_bytes(b"\xff\xfe garbage")

        assert settings_store.load() == default_settings()
        assert settings_store.refresh_interval() == 5
        assert settings_store.apps() == []

    def test_non_object_gives_default(self, settings_store: SettingsStore) -> None:
        _write(settings_store, "[1, 2]")
        assert settings_store.load() == default_settings()

    def test_save_then_load_verbatim(self, settings_store: SettingsStore) -> None:
        document = {
            "apps": [{"id": "a1", "name": "Alpha", "integrations": []}],
            "refreshInterval": 15,
            "launchAtStartup": True,
            "theme": "dark",
        }
        settings_store.save(document)

        assert settings_store.load() == document
        assert json.loads(settings_store.path.read_text(encoding="utf-8")) == document

    def test_save_failure_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("file", encoding="utf-8")
        store = SettingsStore(blocker / "settings.json")

        with pytest.raises(PersistenceError):
            store.save(default_settings())


class TestApps:
    def test_apps_parsed(self, settings_store: SettingsStore) -> None:
        settings_store.save(
            {
                "apps": [
                    {
                        "id": "a1",
                        "name": "Alpha",
                        "platforms": ["web"],
                        "integrations": [
                            {"type": "stripe", "enabled": True, "apiKey": "sk_test"},
                            {"type": "vercel", "enabled": False, "projectId": "prj"},
                        ],
                    },
                    "not an app",
                ]
            }
        )

        apps = settings_store.apps()

        assert len(apps) == 1
        assert apps[0].platforms == ["web"]
        assert apps[0].integrations[0].api_key == "sk_test"
        assert [i.type for i in apps[0].enabled_integrations()] == ["stripe"]

    def test_get_app(self, settings_store: SettingsStore) -> None:
        settings_store.save({"apps": [{"id": "a1", "name": "Alpha"}]})

        assert settings_store.get_app("a1").name == "Alpha"
        assert settings_store.get_app("missing") is None

    def test_apps_not_a_list(self, settings_store: SettingsStore) -> None:
        settings_store.save({"apps": {"id": "a1"}})
        assert settings_store.apps() == []


class TestRefreshInterval:
    @pytest.mark.parametrize(
        "value, expected",
        [(15, 15), (0, 1), (-3, 1), (2.7, 2), ("10", 5), (True, 5), (None, 5)],
    )
    def test_interval(self, settings_store: SettingsStore, value, expected: int) -> None:
        settings_store.save({"refreshInterval": value})
        assert settings_store.refresh_interval() == expected

    def test_default_when_absent(self, settings_store: SettingsStore) -> None:
        assert settings_store.refresh_interval() == 5
