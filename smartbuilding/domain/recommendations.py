"""
Rule evaluation for unit recommendations. No I/O; callers gather the inputs.
"""

from dataclasses import dataclass

MAX_RECOMMENDATIONS = 5
HIGH_HEATING_TEMP = 24

APPLY_ECO = "apply_eco"
HEAT_DOWN = "heat_down"
TOGGLE_LIGHTS = "toggle_lights"
AC_DOWN = "ac_down"
VIEW_FORECAST = "view_forecast"

ACTIONS = (APPLY_ECO, HEAT_DOWN, TOGGLE_LIGHTS, AC_DOWN, VIEW_FORECAST)


@dataclass(frozen=True)
class Recommendation:
    key: str
    title: str
    description: str
    action: str


def recommend(risk, carbon_today_kg, carbon_target_kg, state):
    items = []

    if risk != "low":
        items.append(Recommendation(
            key="risk_budget",
            title="Budget at risk",
            description=(
                "This month's bill is forecast to exceed your budget."
                if risk == "high"
                else "You are close to your monthly budget."
            ),
            action=APPLY_ECO,
        ))

    if carbon_today_kg > carbon_target_kg:
        items.append(Recommendation(
            key="carbon_over",
            title="Carbon above target",
            description="Today's carbon footprint is above the daily target.",
            action=HEAT_DOWN,
        ))

    if not state.eco_mode:
        items.append(Recommendation(
            key="eco_off",
            title="Eco mode is off",
            description="Eco mode lowers overall consumption.",
            action=APPLY_ECO,
        ))

    if state.lights_on:
        items.append(Recommendation(
            key="lights_on",
            title="Lights are on",
            description="Turning lights off when nobody is home saves electricity.",
            action=TOGGLE_LIGHTS,
        ))

    if state.ac_mode != "off":
        items.append(Recommendation(
            key="ac_on",
            title="Air conditioning is on",
            description="Lowering the AC level during peak hours reduces cost.",
            action=AC_DOWN,
        ))

    if state.heating_temp >= HIGH_HEATING_TEMP:
        items.append(Recommendation(
            key="heat_high",
            title="Heating temperature is high",
            description="One degree lower noticeably reduces gas use.",
            action=HEAT_DOWN,
        ))

    if not items:
        items.append(Recommendation(
            key="ok",
            title="All good",
            description="No immediate action needed.",
            action=VIEW_FORECAST,
        ))

    return items[:MAX_RECOMMENDATIONS]
