"""Entry point for the Pulse metrics service.

Wires all components together, optionally embeds the FastAPI dashboard
API, and starts the refresh orchestrator. When the dashboard is enabled
(default), the orchestrator and the API share a single asyncio event loop
via uvicorn's programmatic API and FastAPI's lifespan context manager.

Component wiring order (in build_components):
1. PulseSettings (configuration)
2. Logging setup
3. SettingsStore (apps, refresh interval)
4. HistoryStore (per-app snapshot history)
5. MetricsCollector (billing fetch + derivation)
6. Orchestrator (refresh loop)
"""

import asyncio
import signal
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from pulse.collector import MetricsCollector
from pulse.config import PulseSettings
from pulse.exceptions import ConfigurationError
from pulse.history.store import HistoryStore
from pulse.logging import get_logger, setup_logging
from pulse.orchestrator import Orchestrator
from pulse.settings_store import SettingsStore


def build_components(settings: PulseSettings) -> dict[str, Any]:
    """Build all components from settings.

    The storage base directory is passed explicitly to both stores.

    Returns:
        Dict mapping component names to instances.
    """
    settings_store = SettingsStore(settings.storage.settings_path)
    history_store = HistoryStore(
        settings.storage.history_dir, max_snapshots=settings.history.max_snapshots
    )
    collector = MetricsCollector(settings.stripe)
    orchestrator = Orchestrator(
        settings_store=settings_store,
        collector=collector,
        history_store=history_store,
    )
    return {
        "settings_store": settings_store,
        "history_store": history_store,
        "collector": collector,
        "orchestrator": orchestrator,
    }


def oauth_configured(settings: PulseSettings) -> bool:
    """Report whether the Google OAuth identity is available.

    A missing identity only disables the calendar integration, so it is
    logged rather than fatal.
    """
    logger = get_logger("pulse.main")
    try:
        settings.oauth.require_credentials()
    except ConfigurationError as e:
        logger.warning("google_oauth_unconfigured", reason=str(e))
        return False
    return True


def _setup_signal_handlers(orchestrator: Orchestrator) -> None:
    """SIGINT/SIGTERM stop the refresh loop. Must run inside the event loop."""
    logger = get_logger("pulse.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        asyncio.create_task(orchestrator.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the refresh loop alongside the API and stop it on shutdown."""
    logger = get_logger("pulse.main")
    settings: PulseSettings = app.state.settings
    components = app.state.components

    app.state.settings_store = components["settings_store"]
    app.state.history_store = components["history_store"]
    app.state.collector = components["collector"]
    app.state.orchestrator = components["orchestrator"]

    refresh_task = None
    if settings.refresh.enabled:
        refresh_task = asyncio.create_task(components["orchestrator"].start())

    logger.info("lifespan_started", refresh=settings.refresh.enabled)

    yield

    await components["orchestrator"].stop()
    if refresh_task is not None:
        refresh_task.cancel()
        try:
            await refresh_task
        except asyncio.CancelledError:
            pass

    logger.info("pulse_stopped")


async def run() -> None:
    """Run the Pulse service.

    With the dashboard enabled, uvicorn serves the API and the lifespan
    manages the refresh loop. Otherwise the refresh loop runs directly.
    """
    settings = PulseSettings()
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("pulse.main")

    oauth_configured(settings)
    components = build_components(settings)

    if settings.dashboard.enabled:
        from pulse.dashboard.app import create_dashboard_app

        app = create_dashboard_app(lifespan=lifespan)
        app.state.settings = settings
        app.state.components = components

        logger.info(
            "starting_with_dashboard",
            host=settings.dashboard.host,
            port=settings.dashboard.port,
            base_dir=str(settings.storage.base_dir),
        )

        config = uvicorn.Config(
            app,
            host=settings.dashboard.host,
            port=settings.dashboard.port,
            log_level="warning",
        )
        server = uvicorn.Server(config)
        await server.serve()
    else:
        _setup_signal_handlers(components["orchestrator"])
        logger.info("starting_without_dashboard", base_dir=str(settings.storage.base_dir))
        await components["orchestrator"].start()


def main() -> None:
    """Console script entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
