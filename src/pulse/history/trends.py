"""Sparkline series over retained snapshots."""

from decimal import Decimal

from pulse.history.models import MetricSnapshot

SPARKLINE_METRICS = ("mrr", "activeSubscriptions", "churnRate", "arr")


def sparkline(
    snapshots: list[MetricSnapshot], metric: str, days: int = 7
) -> list[Decimal]:
    """Last `days` values of a billing metric, oldest first.

    Snapshots without a billing projection contribute 0.

    Raises:
        ValueError: for a metric outside SPARKLINE_METRICS or a negative day count.
    """
    if metric not in SPARKLINE_METRICS:
        raise ValueError(f"unknown sparkline metric: {metric}")
    if days < 0:
        raise ValueError("days must be non-negative")
    if days == 0:
        return []

    values: list[Decimal] = []
    for snapshot in snapshots[-days:]:
        stripe = snapshot.stripe
        if stripe is None:
            values.append(Decimal("0"))
        elif metric == "mrr":
            values.append(stripe.mrr)
        elif metric == "activeSubscriptions":
            values.append(Decimal(stripe.active_subscriptions))
        elif metric == "churnRate":
            values.append(stripe.churn_rate)
        else:
            values.append(stripe.arr)
    return values
