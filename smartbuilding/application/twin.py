"""
Digital twin state: explicit get-or-create plus bounded setters.

Setters validate before persisting. Unknown enum values are ignored and the
setter returns False; numeric inputs are clamped to their allowed range.
"""

import logging

from django.db import DatabaseError, transaction
from django.db.models import Case, F, Value, When
from django.db.models.functions import Greatest, Least

from smartbuilding.domain import recommendations as rules
from smartbuilding.models import TwinState

logger = logging.getLogger(__name__)

TOGGLEABLE_DEVICES = ("lights_on", "water_heater_on")
AC_STEP_DOWN = {"high": "medium", "medium": "low", "low": "off", "off": "off"}


def _clamp(value, low, high):
    return max(low, min(high, value))


def _negated(field):
    return Case(When(**{field: True}, then=Value(False)), default=Value(True))


def default_state(unit):
    """Unsaved state carrying the documented defaults."""
    return TwinState(unit=unit)


def get_or_create_state(unit):
    state, _ = TwinState.objects.get_or_create(unit=unit)
    return state


def get_state(unit):
    """
    Read path used by the engines. Store failures fall back to the default
    state instead of propagating, so a simulation tick keeps going.
    """
    try:
        # Savepoint so a failed query does not abort the caller's transaction.
        with transaction.atomic():
            return get_or_create_state(unit)
    except DatabaseError:
        logger.warning("Twin state unavailable for unit=%s, using defaults", unit.pk, exc_info=True)
        return default_state(unit)


def _update(unit, **fields):
    get_or_create_state(unit)
    TwinState.objects.filter(unit=unit).update(**fields)
    return True


def set_scenario(unit, scenario):
    if scenario not in TwinState.Scenario.values:
        return False
    return _update(unit, scenario=scenario)


def set_season(unit, season):
    if season not in TwinState.Season.values:
        return False
    return _update(unit, season=season)


def set_ac_mode(unit, mode):
    if mode not in TwinState.AcMode.values:
        return False
    return _update(unit, ac_mode=mode)


def toggle_eco_mode(unit):
    return _update(unit, eco_mode=_negated("eco_mode"))


def toggle_device(unit, device):
    if device not in TOGGLEABLE_DEVICES:
        return False
    return _update(unit, **{device: _negated(device)})


def adjust_heating_temp(unit, delta):
    try:
        delta = int(delta)
    except (TypeError, ValueError):
        return False
    # Clamp in the UPDATE so concurrent adjustments cannot escape the range.
    return _update(
        unit,
        heating_temp=Least(
            Greatest(F("heating_temp") + delta, Value(TwinState.HEATING_MIN)),
            Value(TwinState.HEATING_MAX),
        ),
    )


def set_sensitivities(unit, cost, green):
    try:
        cost, green = int(cost), int(green)
    except (TypeError, ValueError):
        return False
    low, high = TwinState.SENSITIVITY_MIN, TwinState.SENSITIVITY_MAX
    return _update(
        unit,
        cost_sensitivity=_clamp(cost, low, high),
        green_sensitivity=_clamp(green, low, high),
    )


def set_monthly_budget(unit, budget):
    try:
        budget = int(budget)
    except (TypeError, ValueError):
        return False
    return _update(unit, monthly_budget=max(0, budget))


def apply_action(unit, action):
    """
    Execute a recommendation action code against the unit's twin state.
    Returns False for unknown codes.
    """
    with transaction.atomic():
        state = TwinState.objects.select_for_update().get(pk=get_or_create_state(unit).pk)

        if action == rules.APPLY_ECO:
            if not state.eco_mode:
                toggle_eco_mode(unit)
            return True
        if action == rules.HEAT_DOWN:
            return adjust_heating_temp(unit, -1)
        if action == rules.TOGGLE_LIGHTS:
            return toggle_device(unit, "lights_on")
        if action == rules.AC_DOWN:
            return set_ac_mode(unit, AC_STEP_DOWN.get(state.ac_mode, "off"))
        if action == rules.VIEW_FORECAST:
            return True

    logger.warning("Ignoring unknown action %r for unit=%s", action, unit.pk)
    return False
