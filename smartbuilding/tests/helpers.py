from datetime import datetime

from django.utils import timezone

from smartbuilding.application.settings_store import seed_default_settings
from smartbuilding.models import Building, ConsumptionLimit, ConsumptionReading, Unit

# Sunday 2026-03-15 12:00 UTC; hour 12 has a time-of-day factor of 1.0.
NOW = timezone.make_aware(datetime(2026, 3, 15, 12, 0))
TODAY = NOW.date()


class FixedRandom:
    """RNG stand-in: no noise, never spikes."""

    def __init__(self, uniform=0.0, spike=False):
        self._uniform = uniform
        self._spike = spike

    def uniform(self, a, b):
        return self._uniform

    def randint(self, a, b):
        return a if self._spike else b


def make_building(name="Central"):
    return Building.objects.create(name=name)


def make_unit(building=None, name="1A", floor=1, occupants=1, **kwargs):
    building = building or make_building()
    return Unit.objects.create(
        building=building, floor_number=floor, name=name, occupants_count=occupants, **kwargs
    )


def add_reading(unit, metric, value, timestamp):
    return ConsumptionReading.objects.create(unit=unit, metric=metric, value=value, timestamp=timestamp)


def add_limit(unit, metric, monthly_limit, price_per_unit=0, day=TODAY):
    return ConsumptionLimit.objects.create(
        unit=unit,
        metric=metric,
        monthly_limit=monthly_limit,
        price_per_unit=price_per_unit,
        period_start=day.replace(day=1),
        period_end=day.replace(day=28),
    )


def seed_settings():
    seed_default_settings()
