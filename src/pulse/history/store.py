"""Per-app snapshot history persisted as JSON documents.

Provides HistoryStore, which keeps one document per app under
``<base_dir>/history/<appId>.json`` and merges each day's reduced metrics
into it: at most one snapshot per date, ascending by date, and a sliding
window that evicts the oldest snapshots beyond max_snapshots.

Documents are read-modify-written as a whole. There is no cross-process
locking: callers serialize commits per app (single writer).
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from pulse.exceptions import PersistenceError
from pulse.history.models import HistoricalData, MetricSnapshot, reduce_snapshot
from pulse.logging import get_logger
from pulse.models import AppMetrics

logger = get_logger(__name__)

DEFAULT_MAX_SNAPSHOTS = 90


def utc_today() -> str:
    """Today's UTC calendar day as YYYY-MM-DD."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def merge_snapshot(
    snapshots: list[MetricSnapshot],
    snapshot: MetricSnapshot,
    max_snapshots: int = DEFAULT_MAX_SNAPSHOTS,
) -> list[MetricSnapshot]:
    """Upsert a snapshot by date and apply the retention window.

    Pure function of (prior snapshots, new snapshot):
    1. Replace the snapshot with the same date in place, else append.
    2. Sort ascending by date (lexicographic == chronological for YYYY-MM-DD).
    3. Keep only the newest max_snapshots entries.

    Sorting happens before truncation, unlike the desktop shell which
    truncates by insertion order first. A late commit for a date older than
    everything retained is therefore the entry evicted, so the window always
    holds the newest dates.

    Returns a new list; the input is not modified.
    """
    merged = list(snapshots)
    for index, existing in enumerate(merged):
        if existing.date == snapshot.date:
            merged[index] = snapshot
            break
    else:
        merged.append(snapshot)

    merged.sort(key=lambda s: s.date)

    if len(merged) > max_snapshots:
        merged = merged[len(merged) - max_snapshots :]
    return merged


class HistoryStore:
    """JSON-file store for per-app snapshot history.

    Usage:
        store = HistoryStore(settings.storage.history_dir)
        history = store.commit_snapshot("app-1", metrics)
    """

    def __init__(
        self, history_dir: Path, max_snapshots: int = DEFAULT_MAX_SNAPSHOTS
    ) -> None:
        self._history_dir = Path(history_dir)
        self._max_snapshots = max_snapshots

    def path_for(self, app_id: str) -> Path:
        """Location of an app's history document.

        Raises ValueError for ids that would escape the history directory.
        """
        if not app_id or app_id in (".", "..") or "/" in app_id or "\\" in app_id:
            raise ValueError(f"invalid app id: {app_id!r}")
        return self._history_dir / f"{app_id}.json"

    # ──────────────────────────────────────────────
    # Read
    # ──────────────────────────────────────────────

    def load(self, app_id: str) -> HistoricalData:
        """Load an app's history, or a fresh empty document.

        Missing, unreadable and unparsable documents all degrade to the
        default (empty snapshots, lastUpdated = now); never raises for I/O.
        """
        path = self.path_for(app_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return HistoricalData(app_id=app_id)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("history_read_failed", app_id=app_id, path=str(path), error=str(exc))
            return HistoricalData(app_id=app_id)

        try:
            history = HistoricalData.from_dict(json.loads(raw))
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError too
            logger.warning(
                "history_document_unparsable",
                app_id=app_id,
                path=str(path),
                error=str(exc),
            )
            return HistoricalData(app_id=app_id)

        history.app_id = app_id
        return history

    # ──────────────────────────────────────────────
    # Write
    # ──────────────────────────────────────────────

    def commit_snapshot(
        self, app_id: str, metrics: AppMetrics, date: str | None = None
    ) -> HistoricalData:
        """Reduce metrics to a snapshot for `date` (default: today UTC) and persist it.

        Committing twice for the same date overwrites the earlier snapshot.

        Returns:
            The updated HistoricalData, as persisted.

        Raises:
            PersistenceError: if the document cannot be written.
        """
        snapshot = reduce_snapshot(app_id, date or utc_today(), metrics)
        return self.commit(snapshot)

    def commit(self, snapshot: MetricSnapshot) -> HistoricalData:
        """Merge an already-reduced snapshot into its app's history and persist."""
        history = self.load(snapshot.app_id)
        replaced = any(s.date == snapshot.date for s in history.snapshots)

        history.snapshots = merge_snapshot(
            history.snapshots, snapshot, self._max_snapshots
        )
        history.last_updated = datetime.now(timezone.utc).isoformat()
        self._write(self.path_for(snapshot.app_id), history)

        logger.info(
            "snapshot_committed",
            app_id=snapshot.app_id,
            date=snapshot.date,
            replaced=replaced,
            retained=len(history.snapshots),
        )
        return history

    def _write(self, path: Path, history: HistoricalData) -> None:
        """Atomically replace the document (temp file + rename)."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(history.to_dict(), handle, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.error("history_write_failed", path=str(path), error=str(exc))
            raise PersistenceError(str(path), f"cannot write history: {exc}") from exc
