"""Revenue metrics data models.

CRITICAL: All monetary values and rates use Decimal. JSON documents carry
plain numbers, so conversion happens only in to_dict/from_dict.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


def to_number(value: Decimal) -> float | int:
    """Decimal -> JSON number (int when integral)."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def to_decimal(value: Any) -> Decimal:
    """JSON number -> Decimal; anything else is 0."""
    if isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal("0")


def to_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return 0


@dataclass
class PlanRevenue:
    """Revenue attributed to one product across active subscriptions."""

    plan_id: str
    plan_name: str
    mrr: Decimal
    subscriber_count: int
    percent_of_total: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "planId": self.plan_id,
            "planName": self.plan_name,
            "mrr": to_number(self.mrr),
            "subscriberCount": self.subscriber_count,
            "percentOfTotal": to_number(self.percent_of_total),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PlanRevenue":
        return cls(
            plan_id=str(data.get("planId", "unknown")),
            plan_name=str(data.get("planName", "Unknown Plan")),
            mrr=to_decimal(data.get("mrr")),
            subscriber_count=to_int(data.get("subscriberCount")),
            percent_of_total=to_decimal(data.get("percentOfTotal")),
        )


@dataclass
class MrrBridge:
    """Decomposition of the period's MRR change.

    Expansion, contraction and reactivation need per-subscription history,
    which a point-in-time fetch does not have; they are reported as zero.
    """

    new_mrr: Decimal
    churned_mrr: Decimal
    net_new_mrr: Decimal
    expansion_mrr: Decimal = Decimal("0")
    contraction_mrr: Decimal = Decimal("0")
    reactivation_mrr: Decimal = Decimal("0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "newMrr": to_number(self.new_mrr),
            "expansionMrr": to_number(self.expansion_mrr),
            "contractionMrr": to_number(self.contraction_mrr),
            "churnedMrr": to_number(self.churned_mrr),
            "reactivationMrr": to_number(self.reactivation_mrr),
            "netNewMrr": to_number(self.net_new_mrr),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MrrBridge":
        return cls(
            new_mrr=to_decimal(data.get("newMrr")),
            churned_mrr=to_decimal(data.get("churnedMrr")),
            net_new_mrr=to_decimal(data.get("netNewMrr")),
            expansion_mrr=to_decimal(data.get("expansionMrr")),
            contraction_mrr=to_decimal(data.get("contractionMrr")),
            reactivation_mrr=to_decimal(data.get("reactivationMrr")),
        )


@dataclass
class DailyRevenue:
    """Succeeded-charge revenue for one UTC calendar day (YYYY-MM-DD)."""

    date: str
    revenue: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "revenue": to_number(self.revenue)}


@dataclass
class RevenueMetrics:
    """Point-in-time financial snapshot of one billing integration.

    Growth rates, churn rate and plan shares are percentages (0-100 scale).
    """

    mrr: Decimal
    arr: Decimal
    active_subscriptions: int
    revenue_30d: Decimal
    churn_rate: Decimal
    new_mrr: Decimal
    churned_mrr: Decimal
    net_new_mrr: Decimal
    new_subscribers_30d: int
    churned_subscribers_30d: int
    revenue_growth_rate: Decimal
    subscriber_growth_rate: Decimal
    arpu: Decimal
    ltv_estimate: Decimal
    mrr_bridge: MrrBridge
    revenue_by_plan: list[PlanRevenue] = field(default_factory=list)
    daily_revenue: list[DailyRevenue] = field(default_factory=list)
    daily_subscribers: list[int] = field(default_factory=list)
    expansion_mrr: Decimal = Decimal("0")
    trial_conversion_rate: Decimal = Decimal("0")

    @property
    def average_revenue_per_subscription(self) -> Decimal:
        return self.arpu

    def to_dict(self) -> dict[str, Any]:
        return {
            "mrr": to_number(self.mrr),
            "arr": to_number(self.arr),
            "activeSubscriptions": self.active_subscriptions,
            "revenue30d": to_number(self.revenue_30d),
            "churnRate": to_number(self.churn_rate),
            "newMrr": to_number(self.new_mrr),
            "expansionMrr": to_number(self.expansion_mrr),
            "churnedMrr": to_number(self.churned_mrr),
            "netNewMrr": to_number(self.net_new_mrr),
            "newSubscribers30d": self.new_subscribers_30d,
            "churnedSubscribers30d": self.churned_subscribers_30d,
            "revenueGrowthRate": to_number(self.revenue_growth_rate),
            "subscriberGrowthRate": to_number(self.subscriber_growth_rate),
            "arpu": to_number(self.arpu),
            "ltvEstimate": to_number(self.ltv_estimate),
            "revenueByPlan": [p.to_dict() for p in self.revenue_by_plan],
            "mrrBridge": self.mrr_bridge.to_dict(),
            "trialConversionRate": to_number(self.trial_conversion_rate),
            "averageRevenuePerSubscription": to_number(
                self.average_revenue_per_subscription
            ),
            "dailyRevenue": [d.to_dict() for d in self.daily_revenue],
            "dailySubscribers": list(self.daily_subscribers),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RevenueMetrics":
        """Parse a camelCase document; missing fields read as zero/empty."""
        bridge = data.get("mrrBridge")
        plans = data.get("revenueByPlan")
        daily = data.get("dailyRevenue")
        subscribers = data.get("dailySubscribers")
        return cls(
            mrr=to_decimal(data.get("mrr")),
            arr=to_decimal(data.get("arr")),
            active_subscriptions=to_int(data.get("activeSubscriptions")),
            revenue_30d=to_decimal(data.get("revenue30d")),
            churn_rate=to_decimal(data.get("churnRate")),
            new_mrr=to_decimal(data.get("newMrr")),
            churned_mrr=to_decimal(data.get("churnedMrr")),
            net_new_mrr=to_decimal(data.get("netNewMrr")),
            new_subscribers_30d=to_int(data.get("newSubscribers30d")),
            churned_subscribers_30d=to_int(data.get("churnedSubscribers30d")),
            revenue_growth_rate=to_decimal(data.get("revenueGrowthRate")),
            subscriber_growth_rate=to_decimal(data.get("subscriberGrowthRate")),
            arpu=to_decimal(data.get("arpu")),
            ltv_estimate=to_decimal(data.get("ltvEstimate")),
            mrr_bridge=MrrBridge.from_dict(bridge if isinstance(bridge, dict) else {}),
            revenue_by_plan=[
                PlanRevenue.from_dict(p) for p in (plans if isinstance(plans, list) else [])
                if isinstance(p, dict)
            ],
            daily_revenue=[
                DailyRevenue(date=str(d.get("date", "")), revenue=to_decimal(d.get("revenue")))
                for d in (daily if isinstance(daily, list) else [])
                if isinstance(d, dict)
            ],
            daily_subscribers=(
                [to_int(n) for n in subscribers] if isinstance(subscribers, list) else []
            ),
            expansion_mrr=to_decimal(data.get("expansionMrr")),
            trial_conversion_rate=to_decimal(data.get("trialConversionRate")),
        )
