"""
Multiplicative consumption model.

Each simulated reading is a per-metric baseline scaled by time of day, then
by scenario, season, occupancy and device factors, reduced by eco mode,
perturbed by symmetric noise and occasionally spiked. Values are in arbitrary
units per sampling interval (litres, kWh, m3).

`state` arguments are read by attribute only, so an unsaved TwinState with
its field defaults works as the default state.
"""

BASE_VALUES = {
    "water": 5.0,
    "electricity": 2.5,
    "gas": 0.8,
}

SCENARIO_FACTORS = {
    "empty": {"water": 0.15, "electricity": 0.25, "gas": 0.20},
    "travel": {"water": 0.10, "electricity": 0.20, "gas": 0.25},
    "party": {"water": 1.80, "electricity": 2.20, "gas": 1.30},
    "night": {"water": 0.40, "electricity": 0.55, "gas": 1.00},
    "family": {"water": 1.00, "electricity": 1.00, "gas": 1.00},
}

SEASON_FACTORS = {
    "winter": {"water": 1.00, "electricity": 1.05, "gas": 1.80},
    "summer": {"water": 1.10, "electricity": 1.35, "gas": 0.70},
    "autumn": {"water": 1.00, "electricity": 1.00, "gas": 1.20},
    "spring": {"water": 1.00, "electricity": 1.00, "gas": 1.00},
}

PER_EXTRA_OCCUPANT = {"water": 0.22, "electricity": 0.18, "gas": 0.12}
MAX_OCCUPANTS = 10

AC_LOAD = {"off": 0.0, "low": 0.10, "medium": 0.22, "high": 0.40}
AC_SEASON = {"summer": 1.0, "winter": 0.25}
AC_SEASON_OTHER = 0.55

HEATING_BASE_TEMP = 18
HEATING_STEP = 0.06
HEATING_SEASON = {"winter": 1.1, "autumn": 0.8, "summer": 0.2, "spring": 0.5}

LIGHTS_LOAD = 1.08
GAS_WATER_HEATER_LOAD = 1.06
WATER_WATER_HEATER_LOAD = 1.04

ECO_MIN = 0.10
ECO_MAX = 0.35

# One in N chance of a spike per reading.
SPIKE_CHANCE = {"party": 5, "empty": 25, "travel": 25}
SPIKE_CHANCE_DEFAULT = 12


def time_of_day_factor(hour):
    if 6 <= hour <= 9:
        return 1.5
    if 18 <= hour <= 22:
        return 1.8
    if 0 <= hour <= 5:
        return 0.3
    return 1.0


def base_value(metric, hour):
    return BASE_VALUES[metric] * time_of_day_factor(hour)


def scenario_factor(metric, scenario):
    return SCENARIO_FACTORS.get(scenario, SCENARIO_FACTORS["family"]).get(metric, 1.0)


def season_factor(metric, season):
    return SEASON_FACTORS.get(season, SEASON_FACTORS["spring"]).get(metric, 1.0)


def occupancy_factor(metric, occupants):
    occupants = max(0, min(MAX_OCCUPANTS, int(occupants)))
    if occupants <= 1:
        return 1.0
    return 1.0 + (occupants - 1) * PER_EXTRA_OCCUPANT.get(metric, 0.15)


def device_factor(metric, state):
    factor = 1.0

    if metric == "electricity":
        if state.lights_on:
            factor *= LIGHTS_LOAD
        ac_season = AC_SEASON.get(state.season, AC_SEASON_OTHER)
        factor *= 1.0 + AC_LOAD.get(state.ac_mode, 0.0) * ac_season

    elif metric == "gas":
        temp = max(16, min(28, int(state.heating_temp)))
        heat = max(0, temp - HEATING_BASE_TEMP) * HEATING_STEP
        factor *= 1.0 + heat * HEATING_SEASON.get(state.season, HEATING_SEASON["spring"])
        if state.water_heater_on:
            factor *= GAS_WATER_HEATER_LOAD

    elif metric == "water":
        if state.water_heater_on:
            factor *= WATER_WATER_HEATER_LOAD

    return factor


def eco_reduction(state):
    """Fraction removed by eco mode; 0 when eco mode is off."""
    if not state.eco_mode:
        return 0.0
    reduction = ECO_MIN + state.cost_sensitivity / 800 + state.green_sensitivity / 900
    return min(ECO_MAX, max(ECO_MIN, reduction))


def apply_noise(value, variance_percent, rng):
    value += rng.uniform(-1, 1) * value * (variance_percent / 100)
    return max(0.0, value)


def spike_chance(scenario):
    return SPIKE_CHANCE.get(scenario, SPIKE_CHANCE_DEFAULT)


def maybe_spike(value, scenario, rng):
    if rng.randint(1, spike_chance(scenario)) == 1:
        return value * (1.2 + rng.uniform(0, 0.6))
    return value


def deterministic_value(metric, hour, state, occupants):
    """Model output before eco reduction, noise and spikes."""
    value = base_value(metric, hour)
    value *= scenario_factor(metric, state.scenario)
    value *= season_factor(metric, state.season)
    value *= occupancy_factor(metric, occupants)
    value *= device_factor(metric, state)
    return value


def simulate_value(metric, hour, state, occupants, variance_percent, rng):
    value = deterministic_value(metric, hour, state, occupants)
    value *= 1 - eco_reduction(state)
    value = apply_noise(value, variance_percent, rng)
    value = maybe_spike(value, state.scenario, rng)
    return round(value, 3)
