from datetime import timedelta

from django.test import SimpleTestCase, TestCase

from smartbuilding.application.recommendations import unit_recommendations
from smartbuilding.domain import recommendations as rules
from smartbuilding.domain.config import EngineConfig
from smartbuilding.models import TwinState

from .helpers import NOW, add_reading, make_unit


def _keys(items):
    return [item.key for item in items]


class RecommendRulesTest(SimpleTestCase):

    def test_quiet_state_gives_ok(self):
        state = TwinState(eco_mode=True, lights_on=False, ac_mode="off", heating_temp=20)

        items = rules.recommend("low", 1.0, 10.0, state)

        self.assertEqual(_keys(items), ["ok"])
        self.assertEqual(items[0].action, rules.VIEW_FORECAST)

    def test_rules_fire_in_order_and_are_capped(self):
        state = TwinState(eco_mode=False, lights_on=True, ac_mode="low", heating_temp=26)

        items = rules.recommend("high", 12.0, 10.0, state)

        self.assertEqual(
            _keys(items), ["risk_budget", "carbon_over", "eco_off", "lights_on", "ac_on"]
        )
        self.assertIn("exceed", items[0].description)

    def test_medium_risk_wording(self):
        state = TwinState(eco_mode=True, lights_on=False)

        items = rules.recommend("medium", 0, 10.0, state)

        self.assertEqual(_keys(items), ["risk_budget"])
        self.assertIn("close to", items[0].description)

    def test_heating_threshold(self):
        state = TwinState(eco_mode=True, lights_on=False, heating_temp=24)
        self.assertEqual(_keys(rules.recommend("low", 0, 10, state)), ["heat_high"])

        state = TwinState(eco_mode=True, lights_on=False, heating_temp=23)
        self.assertEqual(_keys(rules.recommend("low", 0, 10, state)), ["ok"])

    def test_every_action_is_known(self):
        state = TwinState(eco_mode=False, lights_on=True, ac_mode="high", heating_temp=28)
        for item in rules.recommend("high", 99, 1, state):
            self.assertIn(item.action, rules.ACTIONS)


class UnitRecommendationsTest(TestCase):

    def test_gathers_inputs_from_store(self):
        unit = make_unit()
        TwinState.objects.create(unit=unit, eco_mode=True, lights_on=False, monthly_budget=100)
        # 20 kg of gas today, above the 10 kg target, and far over budget
        add_reading(unit, "gas", 10, NOW - timedelta(hours=1))

        items = unit_recommendations(unit, EngineConfig.defaults(), now=NOW)

        self.assertEqual(_keys(items), ["risk_budget", "carbon_over"])
