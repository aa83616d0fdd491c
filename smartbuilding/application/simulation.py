"""
Application Use Case — Consumption Simulation

Writes one synthetic reading per metric for a unit, conditioned on the unit's
twin state and occupant count. Twin state reads fall back to defaults; the
reading inserts propagate failures to the batch driver.
"""

import logging
import random

from django.utils import timezone

from smartbuilding.application.batch import run_for_active_units
from smartbuilding.application.twin import get_state
from smartbuilding.domain.simulation import MAX_OCCUPANTS, simulate_value
from smartbuilding.models import METRICS, ConsumptionReading

logger = logging.getLogger(__name__)


def _occupants(unit):
    try:
        return max(0, min(MAX_OCCUPANTS, int(unit.occupants_count)))
    except (TypeError, ValueError):
        return 1


def generate_for_unit(unit, config, now=None, rng=None):
    now = now or timezone.now()
    rng = rng or random
    hour = timezone.localtime(now).hour

    state = get_state(unit)
    occupants = _occupants(unit)

    readings = []
    for metric in METRICS:
        value = simulate_value(metric, hour, state, occupants, config.simulation_variance, rng)
        readings.append(ConsumptionReading.objects.create(
            unit=unit,
            metric=metric,
            value=value,
            simulated=True,
            timestamp=now,
        ))

    logger.debug(
        "Simulated unit=%s scenario=%s: %s",
        unit.pk, state.scenario, {r.metric: r.value for r in readings},
    )
    return readings


def simulate_all(config, now=None, rng=None):
    return run_for_active_units(
        "simulate",
        lambda unit: len(generate_for_unit(unit, config, now=now, rng=rng)),
    )


def simulate_building(building, config, now=None, rng=None):
    return run_for_active_units(
        "simulate building %s" % building.pk,
        lambda unit: len(generate_for_unit(unit, config, now=now, rng=rng)),
        units=building.units.filter(is_active=True).order_by("id"),
    )
