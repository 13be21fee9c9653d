"""Revenue metrics derivation engine.

Turns raw billing records into MRR, ARR, churn, growth, the MRR bridge,
plan revenue shares and a daily revenue series.
"""

from pulse.revenue.engine import derive_metrics
from pulse.revenue.models import DailyRevenue, MrrBridge, PlanRevenue, RevenueMetrics
from pulse.revenue.service import RevenueMetricsService

__all__ = [
    "DailyRevenue",
    "MrrBridge",
    "PlanRevenue",
    "RevenueMetrics",
    "RevenueMetricsService",
    "derive_metrics",
]
