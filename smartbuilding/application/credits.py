"""
Application Use Case — Energy Credits and Dynamic Pricing

Credit balances are "monthly limit minus consumption this month", recomputed
wholesale once a day, then adjusted incrementally by ledger postings.

Core guarantees provided:

- Idempotent recomputation: calculate_unit_credits() overwrites balances, so
  re-running it with unchanged readings yields the same values.
- Atomic transfer: a ledger row and its balance adjustments commit together
  inside one transaction.atomic() block, or not at all.
- Row-level locking: select_for_update() on both balance rows, taken in
  unit-id order so two opposite transfers cannot deadlock.
- Race-condition safety: balances move through F() expressions, never through
  values read into Python.
- Prices are computed on every call from current balances; nothing is cached.
"""

import calendar
import logging
import math

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from smartbuilding.application.batch import run_for_active_units
from smartbuilding.application.queries import month_consumption
from smartbuilding.domain.exceptions import InvalidCreditRequest, NoActiveUnits, PricingNotConfigured
from smartbuilding.models import METRICS, ConsumptionLimit, CreditTransaction, EnergyCredit, Unit

logger = logging.getLogger(__name__)

REWARD_THRESHOLD = 50.0
REWARD_AMOUNT = 5.0


def active_limit(unit, metric, day):
    return (
        ConsumptionLimit.objects
        .filter(unit=unit, metric=metric, period_start__lte=day, period_end__gte=day)
        .order_by("-period_start")
        .first()
    )


def calculate_unit_credits(unit, today=None):
    """
    Recompute balance = limit - consumption for every metric with an active
    limit. Metrics without a limit are left untouched.
    """
    today = today or timezone.localdate()
    now = timezone.now()
    consumption = month_consumption(unit, today)

    balances = {}
    with transaction.atomic():
        for metric in METRICS:
            limit = active_limit(unit, metric, today)
            if limit is None:
                continue

            balance = float(limit.monthly_limit) - consumption[metric]
            # Lock an existing row before overwriting it.
            list(EnergyCredit.objects.select_for_update().filter(unit=unit, metric=metric))
            EnergyCredit.objects.update_or_create(
                unit=unit,
                metric=metric,
                defaults={"balance": balance, "last_calculated": now},
            )
            balances[metric] = balance

    return balances


def calculate_all_credits(today=None):
    return run_for_active_units(
        "calculate credits",
        lambda unit: len(calculate_unit_credits(unit, today=today)),
    )


def get_credits(unit):
    result = {metric: 0.0 for metric in METRICS}
    for metric, balance in EnergyCredit.objects.filter(unit=unit).values_list("metric", "balance"):
        if metric in result:
            result[metric] = float(balance)
    result["total_balance"] = sum(result[metric] for metric in METRICS)
    return result


def demand_level(metric):
    """Buyers (negative balance) over sellers (positive balance), clipped to [0, 1]."""
    credits = EnergyCredit.objects.filter(metric=metric)
    buyers = credits.filter(balance__lt=0).count()
    sellers = credits.filter(balance__gt=0).count()
    return min(1.0, buyers / max(1, sellers))


def credit_price(metric, config):
    base_price = config.base_price(metric)
    if base_price is None:
        raise PricingNotConfigured(metric)
    price = base_price * (1 + demand_level(metric) * config.demand_multiplier)
    return round(price, 2)


def _validate(from_unit_id, to_unit_id, metric, amount, transaction_type):
    if metric not in METRICS:
        raise InvalidCreditRequest(f"unknown metric {metric!r}")
    if transaction_type not in CreditTransaction.Type.values:
        raise InvalidCreditRequest(f"unknown transaction type {transaction_type!r}")
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        raise InvalidCreditRequest("amount must be a number")
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidCreditRequest("amount must be positive")
    if from_unit_id is not None and from_unit_id == to_unit_id:
        raise InvalidCreditRequest("cannot transfer credits to the same unit")
    return amount


def create_transaction(from_unit_id, to_unit_id, metric, amount, transaction_type, config, notes=""):
    """
    Post a ledger row and move `amount` from from_unit (if any) to to_unit.

    Raises InvalidCreditRequest, PricingNotConfigured or Unit.DoesNotExist;
    in every failure case nothing is written.
    """
    amount = _validate(from_unit_id, to_unit_id, metric, amount, transaction_type)
    unit_ids = sorted(uid for uid in (from_unit_id, to_unit_id) if uid is not None)

    with transaction.atomic():
        found = Unit.objects.filter(id__in=unit_ids).count()
        if found != len(unit_ids):
            raise Unit.DoesNotExist(f"Unit not found in {unit_ids}")

        for unit_id in unit_ids:
            EnergyCredit.objects.get_or_create(unit_id=unit_id, metric=metric)
        # Lock both balance rows in a stable order.
        list(
            EnergyCredit.objects
            .select_for_update()
            .filter(unit_id__in=unit_ids, metric=metric)
            .order_by("unit_id")
        )

        price = credit_price(metric, config)
        now = timezone.now()
        ledger = CreditTransaction.objects.create(
            from_unit_id=from_unit_id,
            to_unit_id=to_unit_id,
            metric=metric,
            amount=amount,
            price_per_credit=price,
            total_price=round(amount * price, 2),
            transaction_type=transaction_type,
            status=CreditTransaction.Status.COMPLETED,
            notes=notes,
            completed_at=now,
        )

        if from_unit_id is not None:
            EnergyCredit.objects.filter(unit_id=from_unit_id, metric=metric).update(
                balance=F("balance") - amount
            )
        EnergyCredit.objects.filter(unit_id=to_unit_id, metric=metric).update(
            balance=F("balance") + amount
        )

    logger.info(
        "Credit transaction %s: %s %s from=%s to=%s price=%s type=%s",
        ledger.id, amount, metric, from_unit_id, to_unit_id, price, transaction_type,
    )
    return ledger


def buy_credits(unit_id, metric, amount, config):
    return create_transaction(
        None, unit_id, metric, amount, CreditTransaction.Type.SYSTEM_PURCHASE, config
    )


def sell_credits(from_unit_id, to_unit_id, metric, amount, config):
    return create_transaction(
        from_unit_id, to_unit_id, metric, amount, CreditTransaction.Type.MANUAL_SELL, config
    )


def reward_low_consumers(config, threshold=REWARD_THRESHOLD, reward=REWARD_AMOUNT, today=None):
    """Grant `reward` credits for every balance at or above `threshold`."""
    if not Unit.objects.filter(is_active=True).exists():
        raise NoActiveUnits()

    calculate_all_credits(today=today)

    eligible = (
        EnergyCredit.objects
        .filter(balance__gte=threshold, unit__is_active=True, metric__in=METRICS)
        .order_by("unit_id", "metric")
        .values_list("unit_id", "metric")
    )
    granted = 0
    # All rewards or none: a metric without a price aborts the whole grant.
    with transaction.atomic():
        for unit_id, metric in list(eligible):
            create_transaction(
                None, unit_id, metric, reward, CreditTransaction.Type.SYSTEM_PURCHASE, config,
                notes="low consumption reward",
            )
            granted += 1

    logger.info("Rewarded %s balances (threshold=%s reward=%s)", granted, threshold, reward)
    return granted


def open_monthly_limits(config, today=None):
    """Create this month's limit rows from the default limits; existing rows are kept."""
    today = today or timezone.localdate()
    period_start = today.replace(day=1)
    period_end = today.replace(day=calendar.monthrange(today.year, today.month)[1])

    created = 0
    for unit in Unit.objects.filter(is_active=True):
        for metric in METRICS:
            _, was_created = ConsumptionLimit.objects.get_or_create(
                unit=unit,
                metric=metric,
                period_start=period_start,
                defaults={
                    "period_end": period_end,
                    "monthly_limit": config.default_limits[metric],
                },
            )
            created += int(was_created)
    return created
