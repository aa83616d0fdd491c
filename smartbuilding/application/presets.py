"""
Admin simulation presets: bulk-update occupant counts and twin state for
every active unit in one transaction.
"""

import logging

from django.db import transaction
from django.db.models import F, Value
from django.db.models.functions import Greatest, Least

from smartbuilding.domain.exceptions import InvalidPreset, NoActiveUnits
from smartbuilding.models import TwinState, Unit

logger = logging.getLogger(__name__)

PRESETS = {
    "guest": (
        {"occupants_count": Least(F("occupants_count") + 2, Value(10))},
        {"scenario": "family", "eco_mode": False, "lights_on": True, "water_heater_on": True},
    ),
    "high": (
        {"occupants_count": Greatest(F("occupants_count"), Value(7))},
        {
            "scenario": "party", "season": "winter", "eco_mode": False, "lights_on": True,
            "ac_mode": "high", "heating_temp": 26, "water_heater_on": True,
            "cost_sensitivity": 20, "green_sensitivity": 20,
        },
    ),
    "low": (
        {"occupants_count": 1},
        {
            "scenario": "empty", "season": "spring", "eco_mode": True, "lights_on": False,
            "ac_mode": "off", "heating_temp": 18, "water_heater_on": False,
            "cost_sensitivity": 90, "green_sensitivity": 90,
        },
    ),
    "reset": (
        {"occupants_count": Least(Greatest(F("occupants_count"), Value(1)), Value(5))},
        {
            "scenario": "family", "season": "spring", "eco_mode": False, "lights_on": True,
            "ac_mode": "off", "heating_temp": 22, "water_heater_on": True,
            "cost_sensitivity": 50, "green_sensitivity": 50,
        },
    ),
}


def apply_preset(preset):
    """Returns the number of active units affected."""
    if preset not in PRESETS:
        raise InvalidPreset(preset)

    unit_fields, twin_fields = PRESETS[preset]
    with transaction.atomic():
        units = Unit.objects.filter(is_active=True)
        unit_ids = list(units.values_list("id", flat=True))
        if not unit_ids:
            raise NoActiveUnits()

        TwinState.objects.bulk_create(
            [TwinState(unit_id=unit_id) for unit_id in unit_ids], ignore_conflicts=True
        )
        units.update(**unit_fields)
        TwinState.objects.filter(unit_id__in=unit_ids).update(**twin_fields)

    logger.info("Simulation preset %s applied to %s units", preset, len(unit_ids))
    return len(unit_ids)
