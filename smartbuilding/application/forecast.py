"""
Month-end cost forecast from the day-to-date run rate.
"""

import calendar
from dataclasses import dataclass, field
from typing import Dict

from django.utils import timezone

from smartbuilding.application.queries import month_consumption
from smartbuilding.application.twin import get_state
from smartbuilding.domain.exceptions import PricingNotConfigured
from smartbuilding.models import METRICS, ConsumptionLimit

LOW = "low"
MEDIUM = "medium"
HIGH = "high"

MEDIUM_RATIO = 0.9
HIGH_RATIO = 1.1


@dataclass(frozen=True)
class Forecast:
    cost_so_far: float
    forecast_month: float
    budget: int
    risk: str
    consumption: Dict[str, float] = field(default_factory=dict)
    prices: Dict[str, float] = field(default_factory=dict)


def classify_risk(forecast, budget):
    if budget <= 0:
        return LOW
    ratio = forecast / budget
    if ratio >= HIGH_RATIO:
        return HIGH
    if ratio >= MEDIUM_RATIO:
        return MEDIUM
    return LOW


def unit_prices(unit, config, today):
    """
    Per-metric price: a positive price_per_unit on the unit's active limit
    wins over the configured base price.
    """
    prices = dict(config.base_prices)
    overrides = ConsumptionLimit.objects.filter(
        unit=unit, period_start__lte=today, period_end__gte=today, price_per_unit__gt=0
    ).values_list("metric", "price_per_unit")
    for metric, price in overrides:
        prices[metric] = float(price)

    for metric in METRICS:
        if prices.get(metric) is None:
            raise PricingNotConfigured(metric)
    return {metric: prices[metric] for metric in METRICS}


def forecast(unit, config, today=None):
    today = today or timezone.localdate()
    prices = unit_prices(unit, config, today)
    consumption = month_consumption(unit, today)

    cost_so_far = sum(consumption[metric] * prices[metric] for metric in METRICS)
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    projected = cost_so_far / max(1, today.day) * days_in_month

    budget = max(0, int(get_state(unit).monthly_budget))
    return Forecast(
        cost_so_far=round(cost_so_far, 2),
        forecast_month=round(projected, 2),
        budget=budget,
        risk=classify_risk(projected, budget),
        consumption=consumption,
        prices=prices,
    )
