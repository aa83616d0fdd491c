from django.utils import timezone

from smartbuilding.application import carbon
from smartbuilding.application.forecast import forecast
from smartbuilding.application.twin import get_state
from smartbuilding.domain.recommendations import recommend


def unit_recommendations(unit, config, now=None):
    now = now or timezone.now()
    state = get_state(unit)
    unit_forecast = forecast(unit, config, today=timezone.localdate(now))
    today_kg = carbon.unit_breakdown(unit, config, carbon.TODAY, now=now).total_kg
    return recommend(unit_forecast.risk, today_kg, config.carbon_daily_target_kg, state)
