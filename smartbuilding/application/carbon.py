import calendar
from dataclasses import dataclass
from datetime import timedelta

from django.db.models import Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from smartbuilding.application.queries import metric_totals, month_readings
from smartbuilding.models import METRICS, ConsumptionReading

TODAY = "today"
WEEK = "week"
MONTH = "month"
PERIODS = (TODAY, WEEK, MONTH)


@dataclass(frozen=True)
class CarbonBreakdown:
    water_kg: float
    electricity_kg: float
    gas_kg: float
    total_kg: float


def to_carbon(consumption, factors):
    kg = {metric: float(consumption.get(metric, 0)) * factors[metric] for metric in METRICS}
    return CarbonBreakdown(
        water_kg=round(kg["water"], 3),
        electricity_kg=round(kg["electricity"], 3),
        gas_kg=round(kg["gas"], 3),
        total_kg=round(sum(kg.values()), 3),
    )


def _period_filter(period, now):
    """Unknown periods fall back to today."""
    if period == WEEK:
        return {"timestamp__gte": now - timedelta(days=7)}
    if period == MONTH:
        return {"timestamp__gte": now - timedelta(days=30)}
    return {"timestamp__date": timezone.localdate(now)}


def unit_breakdown(unit, config, period=TODAY, now=None):
    now = now or timezone.now()
    readings = ConsumptionReading.objects.filter(unit=unit, **_period_filter(period, now))
    return to_carbon(metric_totals(readings), config.carbon_factors)


def building_breakdown(building, config, period=TODAY, now=None):
    now = now or timezone.now()
    readings = ConsumptionReading.objects.filter(
        unit__building=building, unit__is_active=True, **_period_filter(period, now)
    )
    return to_carbon(metric_totals(readings), config.carbon_factors)


def system_breakdown(config, period=TODAY, now=None):
    """Every reading in the store, across buildings and deactivated units."""
    now = now or timezone.now()
    readings = ConsumptionReading.objects.filter(**_period_filter(period, now))
    return to_carbon(metric_totals(readings), config.carbon_factors)


def forecast_month_kg(unit, config, today=None):
    """Average daily kg observed so far this month, times days in the month."""
    today = today or timezone.localdate()
    rows = (
        month_readings(today, unit=unit)
        .annotate(day=TruncDate("timestamp"))
        .values("day", "metric")
        .annotate(total=Sum("value"))
        .order_by("day")
    )

    daily = {}
    for row in rows:
        consumption = daily.setdefault(row["day"], {})
        consumption[row["metric"]] = float(row["total"] or 0)

    if not daily:
        return 0.0

    total_kg = sum(to_carbon(c, config.carbon_factors).total_kg for c in daily.values())
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    return round(total_kg / len(daily) * days_in_month, 2)
