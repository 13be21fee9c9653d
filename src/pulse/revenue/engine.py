"""Revenue metrics derivation.

Pure Decimal computations that turn raw subscription, charge and product
records into RevenueMetrics: MRR/ARR, churn, growth rates, the MRR bridge,
per-plan revenue shares and a 30-day daily revenue series.

The record lists are a single fetched page each (at most 100 entries) and
are treated as the full population for the period. No I/O happens here;
see revenue.service for the fetch orchestration.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from pulse.billing import records
from pulse.logging import get_logger
from pulse.revenue.models import DailyRevenue, MrrBridge, PlanRevenue, RevenueMetrics

logger = get_logger(__name__)

WINDOW_DAYS = 30
UNKNOWN_PLAN_NAME = "Unknown Plan"
# Assumed customer lifetime in months when there is no churn signal.
DEFAULT_LIFETIME_MONTHS = Decimal("24")

_HUNDRED = Decimal("100")
_ZERO = Decimal("0")


def growth_rate(net_change: Decimal, previous: Decimal, current: Decimal) -> Decimal:
    """Percentage growth over the window.

    Returns net_change / previous * 100 when there was a previous base,
    100 when the base was empty but something exists now, else 0.
    """
    if previous > _ZERO:
        return net_change / previous * _HUNDRED
    if current > _ZERO:
        return _HUNDRED
    return _ZERO


def churn_rate(active: int, churned: int) -> Decimal:
    """Churned share of (active + churned), as a percentage; 0 on an empty cohort."""
    cohort = active + churned
    if cohort == 0:
        return _ZERO
    return Decimal(churned) / Decimal(cohort) * _HUNDRED


def ltv_estimate(arpu: Decimal, churn_pct: Decimal) -> Decimal:
    """Lifetime value: ARPU / monthly churn, or ARPU over a 24-month floor without churn."""
    if churn_pct > _ZERO:
        return arpu / (churn_pct / _HUNDRED)
    return arpu * DEFAULT_LIFETIME_MONTHS


def revenue_by_plan(
    product_names: dict[str, str], active_subs: list[dict]
) -> list[PlanRevenue]:
    """Group active subscriptions by product and report each group's share of MRR.

    Plan names come from the product listing, else the price/plan nickname,
    else "Unknown Plan". The first subscription seen names the group.
    Ordered by plan MRR descending.
    """
    grouped_mrr: dict[str, Decimal] = defaultdict(Decimal)
    grouped_count: dict[str, int] = defaultdict(int)
    names: dict[str, str] = {}

    for sub in active_subs:
        item = records.primary_item(sub)
        product_id = records.item_product_id(item)
        if product_id not in names:
            names[product_id] = records.first(
                product_names.get(product_id),
                records.item_nickname(item),
                UNKNOWN_PLAN_NAME,
            )
        grouped_mrr[product_id] += records.monthly_revenue(sub)
        grouped_count[product_id] += 1

    total = sum(grouped_mrr.values(), _ZERO)
    plans = [
        PlanRevenue(
            plan_id=product_id,
            plan_name=names[product_id],
            mrr=plan_mrr,
            subscriber_count=grouped_count[product_id],
            percent_of_total=plan_mrr / total * _HUNDRED if total > _ZERO else _ZERO,
        )
        for product_id, plan_mrr in grouped_mrr.items()
    ]
    plans.sort(key=lambda p: p.mrr, reverse=True)
    return plans


def window_days(today: date, days: int = WINDOW_DAYS) -> list[date]:
    """The trailing `days` calendar days ending today, oldest first."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def daily_revenue(charges: list[dict], today: date) -> list[DailyRevenue]:
    """Succeeded-charge revenue per UTC day over the trailing 30 days.

    Every day of the window is present, zero when no charge landed on it.
    Charges outside the window or without a creation time are ignored.
    """
    totals: dict[str, Decimal] = {
        day.isoformat(): _ZERO for day in window_days(today)
    }
    for charge in charges:
        if not records.is_succeeded(charge):
            continue
        created = records.charge_created(charge)
        if created is None:
            continue
        day_key = datetime.fromtimestamp(created, tz=timezone.utc).date().isoformat()
        if day_key in totals:
            totals[day_key] += records.charge_amount(charge)

    return [DailyRevenue(date=day, revenue=revenue) for day, revenue in totals.items()]


def succeeded_revenue(charges: list[dict]) -> Decimal:
    return sum(
        (records.charge_amount(c) for c in charges if records.is_succeeded(c)), _ZERO
    )


def derive_metrics(
    product_names: dict[str, str],
    active_subs: list[dict],
    canceled_subs_30d: list[dict],
    new_subs_30d: list[dict],
    charges_30d: list[dict] | None,
    now: datetime | None = None,
) -> RevenueMetrics:
    """Derive the full RevenueMetrics from raw vendor records.

    Args:
        product_names: Product id -> display name (may be empty).
        active_subs: Currently active subscriptions (the base population).
        canceled_subs_30d: Subscriptions canceled, created within the window.
        new_subs_30d: Active subscriptions created within the window.
        charges_30d: Charges created within the window, or None when the
            charge listing was unavailable (revenue_30d then falls back to MRR).
        now: Reference time; defaults to the current UTC time.

    Returns:
        RevenueMetrics with every field populated.
    """
    now = now or datetime.now(timezone.utc)
    today = now.astimezone(timezone.utc).date()

    active_count = len(active_subs)
    churned_count = len(canceled_subs_30d)
    new_count = len(new_subs_30d)

    mrr = records.total_monthly_revenue(active_subs)
    churned_mrr = records.total_monthly_revenue(canceled_subs_30d)
    new_mrr = records.total_monthly_revenue(new_subs_30d)

    net_new_mrr = new_mrr - churned_mrr
    previous_mrr = mrr - net_new_mrr

    net_new_subscribers = new_count - churned_count
    previous_subscribers = active_count - net_new_subscribers

    churn = churn_rate(active_count, churned_count)
    arpu = mrr / Decimal(active_count) if active_count > 0 else _ZERO

    if charges_30d is None:
        revenue_30d = mrr
        chart = daily_revenue([], today)
    else:
        revenue_30d = succeeded_revenue(charges_30d)
        chart = daily_revenue(charges_30d, today)

    metrics = RevenueMetrics(
        mrr=mrr,
        arr=mrr * Decimal("12"),
        active_subscriptions=active_count,
        revenue_30d=revenue_30d,
        churn_rate=churn,
        new_mrr=new_mrr,
        churned_mrr=churned_mrr,
        net_new_mrr=net_new_mrr,
        new_subscribers_30d=new_count,
        churned_subscribers_30d=churned_count,
        revenue_growth_rate=growth_rate(net_new_mrr, previous_mrr, mrr),
        subscriber_growth_rate=growth_rate(
            Decimal(net_new_subscribers),
            Decimal(previous_subscribers),
            Decimal(active_count),
        ),
        arpu=arpu,
        ltv_estimate=ltv_estimate(arpu, churn),
        mrr_bridge=MrrBridge(
            new_mrr=new_mrr, churned_mrr=churned_mrr, net_new_mrr=net_new_mrr
        ),
        revenue_by_plan=revenue_by_plan(product_names, active_subs),
        daily_revenue=chart,
        # No historical subscriber series from a point-in-time fetch;
        # real history comes from the snapshot store.
        daily_subscribers=[active_count] * WINDOW_DAYS,
    )

    logger.debug(
        "revenue_metrics_derived",
        mrr=str(mrr),
        active_subscriptions=active_count,
        new_mrr=str(new_mrr),
        churned_mrr=str(churned_mrr),
        previous_mrr=str(previous_mrr),
        revenue_growth_rate=str(metrics.revenue_growth_rate),
        subscriber_growth_rate=str(metrics.subscriber_growth_rate),
    )
    return metrics
