"""Refresh orchestrator -- the timer that drives collect-then-commit.

Each cycle loads the configured apps from the settings document, collects
their metrics and commits today's snapshot to history. Cycles never
overlap, and one app's failure does not stop the cycle for the others.
The cadence is the settings document's refreshInterval (minutes), re-read
every cycle so edits take effect without a restart.
"""

import asyncio

from pulse.collector import MetricsCollector
from pulse.exceptions import PulseError
from pulse.history.store import HistoryStore, utc_today
from pulse.logging import get_logger
from pulse.models import App, AppMetrics
from pulse.settings_store import SettingsStore

logger = get_logger(__name__)


class Orchestrator:
    """Periodic refresh loop over all configured apps.

    Args:
        settings_store: Source of the configured apps and refresh interval.
        collector: Fetches metrics for one app.
        history_store: Receives one snapshot per app per cycle.
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        collector: MetricsCollector,
        history_store: HistoryStore,
    ) -> None:
        self._settings_store = settings_store
        self._collector = collector
        self._history_store = history_store
        self._running = False
        self._cycle_lock = asyncio.Lock()
        self._wake = asyncio.Event()
        self._latest: dict[str, AppMetrics] = {}

    @property
    def is_running(self) -> bool:
        return self._running

    def latest_metrics(self, app_id: str) -> AppMetrics | None:
        """Metrics collected for an app in the most recent cycle."""
        return self._latest.get(app_id)

    async def start(self) -> None:
        """Run refresh cycles until stop() is called."""
        logger.info("orchestrator_starting")
        self._running = True
        try:
            await self._run_loop()
        finally:
            logger.info("orchestrator_stopped")

    async def stop(self) -> None:
        logger.info("orchestrator_stopping")
        self._running = False
        self._wake.set()

    async def _run_loop(self) -> None:
        while self._running:
            # Cleared before the cycle so a stop() issued mid-cycle is kept.
            self._wake.clear()
            try:
                await self.run_cycle()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("refresh_cycle_error", error=str(e), exc_info=True)

            if not self._running:
                break
            interval_seconds = self._settings_store.refresh_interval() * 60
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=interval_seconds)
            except asyncio.TimeoutError:
                pass

    async def run_cycle(self) -> None:
        """Collect and commit every configured app once."""
        async with self._cycle_lock:
            apps = self._settings_store.apps()
            date = utc_today()
            logger.info("refresh_cycle_started", apps=len(apps), date=date)
            for app in apps:
                await self.refresh_app(app, date)

    async def refresh_app(self, app: App, date: str | None = None) -> AppMetrics | None:
        """Collect one app's metrics and commit its snapshot for `date`.

        Returns the collected metrics, or None when the app failed.
        """
        try:
            metrics = await self._collector.collect(app)
            self._latest[app.id] = metrics
            self._history_store.commit_snapshot(app.id, metrics, date=date or utc_today())
        except (PulseError, ValueError) as e:
            logger.error("app_refresh_failed", app_id=app.id, error=str(e))
            return None
        return metrics
