"""Shared reading aggregations, keyed by metric."""

from django.db.models import Sum

from smartbuilding.models import METRICS, ConsumptionReading


def metric_totals(readings):
    """Sum a reading queryset per metric; metrics without readings are 0.0."""
    totals = {metric: 0.0 for metric in METRICS}
    rows = readings.values("metric").annotate(total=Sum("value"))
    for row in rows:
        if row["metric"] in totals:
            totals[row["metric"]] = float(row["total"] or 0)
    return totals


def month_readings(day, **filters):
    return ConsumptionReading.objects.filter(
        timestamp__year=day.year, timestamp__month=day.month, **filters
    )


def month_consumption(unit, day):
    return metric_totals(month_readings(day, unit=unit))
