"""
Application Use Case — Consumption Analysis

Scans recent readings for over-consumption and leak patterns, and credit
balances for a low aggregate, creating at most one alert per
(unit, alert type, calendar day).

Deduplication relies on the unique constraint on Alert; a conflicting insert
is rolled back to its savepoint and counted as "not created". This keeps two
concurrent analyzer runs from producing duplicates.
"""

import logging
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from smartbuilding.application.batch import run_for_active_units
from smartbuilding.models import METRICS, Alert, ConsumptionReading, EnergyCredit

logger = logging.getLogger(__name__)

WEEK_DAYS = 7
LEAK_WINDOW = timedelta(hours=6)
LEAK_SAMPLE_SIZE = 12
LEAK_MIN_SAMPLES = 6
LEAK_RISING_RATIO = 0.8
LOW_CREDIT_THRESHOLD = -50

ALERT_TEXT = {
    Alert.Type.OVER_CONSUMPTION: ("Over-consumption warning", "Your {metric} consumption is above normal."),
    Alert.Type.LEAK_SUSPECTED: ("Possible leak", "A {metric} leak may be present."),
    Alert.Type.LOW_CREDIT: ("Low credit", "Your credit balance is negative."),
}


def rising_fraction(values):
    """
    Fraction of adjacent pairs where the newer value exceeds the older one.
    `values` is ordered newest first.
    """
    if len(values) < 2:
        return 0.0
    increases = sum(1 for newer, older in zip(values, values[1:]) if newer > older)
    return increases / (len(values) - 1)


def check_over_consumption(unit, metric, config, now=None):
    now = now or timezone.now()
    today = timezone.localdate(now)

    readings = ConsumptionReading.objects.filter(unit=unit, metric=metric)
    today_total = readings.filter(timestamp__date=today).aggregate(total=Sum("value"))["total"] or 0

    daily = (
        readings
        .filter(timestamp__gte=now - timedelta(days=WEEK_DAYS), timestamp__date__lt=today)
        .annotate(day=TruncDate("timestamp"))
        .values("day")
        .annotate(total=Sum("value"))
        .order_by("day")
    )
    daily = [float(row["total"] or 0) for row in daily]
    if not daily:
        return False

    week_avg = sum(daily) / len(daily)
    if week_avg == 0:
        return False

    percent_increase = (float(today_total) - week_avg) / week_avg * 100
    return percent_increase > config.alert_threshold_percent


def check_possible_leak(unit, metric, now=None):
    # Magnitude is deliberately ignored: a rising run of tiny values counts too.
    now = now or timezone.now()
    values = list(
        ConsumptionReading.objects
        .filter(unit=unit, metric=metric, timestamp__gte=now - LEAK_WINDOW, timestamp__lte=now)
        .order_by("-timestamp", "-id")
        .values_list("value", flat=True)[:LEAK_SAMPLE_SIZE]
    )
    if len(values) < LEAK_MIN_SAMPLES:
        return False
    return rising_fraction(values) > LEAK_RISING_RATIO


def check_low_credit(unit):
    total = EnergyCredit.objects.filter(unit=unit).aggregate(total=Sum("balance"))["total"] or 0
    return total < LOW_CREDIT_THRESHOLD


def create_alert(unit, alert_type, severity, metric=None, now=None):
    """Returns True if a new alert row was written, False if one already exists today."""
    title, message = ALERT_TEXT.get(alert_type, ("Alert", "Please review your consumption."))
    try:
        with transaction.atomic():
            Alert.objects.create(
                unit=unit,
                alert_type=alert_type,
                severity=severity,
                title=title,
                message=message.format(metric=metric or "general"),
                created_on=timezone.localdate(now or timezone.now()),
            )
    except IntegrityError:
        logger.debug("Alert %s for unit=%s already raised today", alert_type, unit.pk)
        return False

    logger.info("Alert raised: unit=%s type=%s metric=%s", unit.pk, alert_type, metric)
    return True


def analyze_unit(unit, config, now=None):
    now = now or timezone.now()
    created = 0

    for metric in METRICS:
        if check_over_consumption(unit, metric, config, now=now):
            created += create_alert(unit, Alert.Type.OVER_CONSUMPTION, Alert.Severity.WARNING, metric, now)

        if check_possible_leak(unit, metric, now=now):
            created += create_alert(unit, Alert.Type.LEAK_SUSPECTED, Alert.Severity.CRITICAL, metric, now)

    if check_low_credit(unit):
        created += create_alert(unit, Alert.Type.LOW_CREDIT, Alert.Severity.WARNING, now=now)

    return created


def analyze_all(config, now=None):
    return run_for_active_units("analyze", lambda unit: analyze_unit(unit, config, now=now))


def mark_alerts_read(unit=None, now=None):
    alerts = Alert.objects.filter(is_read=False)
    if unit is not None:
        alerts = alerts.filter(unit=unit)
    return alerts.update(is_read=True, read_at=now or timezone.now())
