"""JSON settings document shared with the desktop shell.

The document is ``{"apps": [...], "refreshInterval": <minutes>,
"launchAtStartup": <bool>}``. It is stored verbatim; only the fields the
core needs (apps, refresh interval) are interpreted here.
"""

import json
from pathlib import Path
from typing import Any

from pulse.exceptions import PersistenceError
from pulse.logging import get_logger
from pulse.models import App

logger = get_logger(__name__)

DEFAULT_REFRESH_INTERVAL = 5  # minutes


def default_settings() -> dict[str, Any]:
    return {
        "apps": [],
        "refreshInterval": DEFAULT_REFRESH_INTERVAL,
        "launchAtStartup": False,
    }


class SettingsStore:
    """Reads and writes the settings document at a fixed path.

    Read failures degrade to the default document; write failures raise
    PersistenceError.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return default_settings()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("settings_read_failed", path=str(self._path), error=str(exc))
            return default_settings()

        try:
            document = json.loads(raw)
        except ValueError as exc:
            logger.warning("settings_unparsable", path=str(self._path), error=str(exc))
            return default_settings()
        if not isinstance(document, dict):
            logger.warning("settings_not_an_object", path=str(self._path))
            return default_settings()
        return document

    def save(self, document: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error("settings_write_failed", path=str(self._path), error=str(exc))
            raise PersistenceError(str(self._path), f"cannot write settings: {exc}") from exc
        logger.info("settings_saved", path=str(self._path))

    def apps(self) -> list[App]:
        """Configured apps; entries that are not objects are skipped."""
        apps = self.load().get("apps")
        if not isinstance(apps, list):
            return []
        return [App.from_dict(a) for a in apps if isinstance(a, dict)]

    def get_app(self, app_id: str) -> App | None:
        for app in self.apps():
            if app.id == app_id:
                return app
        return None

    def refresh_interval(self) -> int:
        """Refresh cadence in minutes (at least 1)."""
        value = self.load().get("refreshInterval", DEFAULT_REFRESH_INTERVAL)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return DEFAULT_REFRESH_INTERVAL
        return max(1, int(value))
