"""Snapshot history persistence layer.

Provides snapshot models, the reduction from full app metrics, the
per-app JSON history store and sparkline extraction.
"""

from pulse.history.models import (
    HistoricalData,
    MetricSnapshot,
    PostHogSnapshot,
    StripeSnapshot,
    SupabaseSnapshot,
    VercelSnapshot,
    reduce_snapshot,
)
from pulse.history.store import HistoryStore, merge_snapshot, utc_today
from pulse.history.trends import sparkline

__all__ = [
    "HistoricalData",
    "HistoryStore",
    "MetricSnapshot",
    "PostHogSnapshot",
    "StripeSnapshot",
    "SupabaseSnapshot",
    "VercelSnapshot",
    "merge_snapshot",
    "reduce_snapshot",
    "sparkline",
    "utc_today",
]
