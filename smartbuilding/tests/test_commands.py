from io import StringIO

from django.core.management import CommandError, call_command
from django.test import TestCase

from smartbuilding.application.settings_store import load_config, set_setting
from smartbuilding.domain.config import DEFAULT_SETTINGS
from smartbuilding.models import ConsumptionLimit, ConsumptionReading, SystemSetting, TwinState

from .helpers import make_building, make_unit


def _run(*args, **kwargs):
    out = StringIO()
    call_command(*args, stdout=out, **kwargs)
    return out.getvalue()


class SettingsCommandTest(TestCase):

    def test_seed_settings_keeps_existing_values(self):
        set_setting("simulation_variance", "0")

        output = _run("seed_settings")

        self.assertIn(f"Wrote {len(DEFAULT_SETTINGS) - 1} settings", output)
        self.assertEqual(SystemSetting.objects.get(key="simulation_variance").value, "0")
        self.assertEqual(load_config().simulation_variance, 0.0)

    def test_seed_settings_overwrite(self):
        set_setting("simulation_variance", "0")

        _run("seed_settings", overwrite=True)

        self.assertEqual(load_config().simulation_variance, 15.0)

    def test_auto_balance_flag_is_stored_but_not_loaded(self):
        _run("seed_settings")

        self.assertTrue(SystemSetting.objects.filter(key="auto_balance_enabled").exists())
        self.assertFalse(hasattr(load_config(), "auto_balance_enabled"))

    def test_unparseable_setting_falls_back_to_default(self):
        set_setting("alert_threshold_percent", "lots")

        self.assertEqual(load_config().alert_threshold_percent, 20.0)


class SchedulerCommandTest(TestCase):

    def setUp(self):
        call_command("seed_settings", stdout=StringIO())
        self.building = make_building()
        self.unit = make_unit(self.building)

    def test_simulate_units(self):
        make_unit(self.building, name="1B")

        output = _run("simulate_units")

        self.assertIn("Simulated 2 units (6 readings, 0 failed)", output)
        self.assertEqual(ConsumptionReading.objects.count(), 6)

    def test_simulate_single_building(self):
        make_unit(make_building("Annex"), name="9Z")

        _run("simulate_units", building=self.building.id)

        self.assertEqual(ConsumptionReading.objects.count(), 3)

    def test_analyze_units(self):
        output = _run("analyze_units")

        self.assertIn("Analyzed 1 units", output)

    def test_calculate_credits_with_open_limits(self):
        output = _run("calculate_credits", open_limits=True)

        self.assertIn("Opened 3 monthly limits", output)
        self.assertEqual(ConsumptionLimit.objects.filter(unit=self.unit).count(), 3)
        self.assertEqual(self.unit.credits.count(), 3)

    def test_apply_preset_without_tick(self):
        _run("apply_preset", "low", no_tick=True)

        self.assertEqual(TwinState.objects.get(unit=self.unit).scenario, "empty")
        self.assertFalse(ConsumptionReading.objects.exists())

    def test_apply_preset_runs_a_tick(self):
        output = _run("apply_preset", "high")

        self.assertIn("Simulated 1 units", output)
        self.assertEqual(ConsumptionReading.objects.count(), 3)

    def test_apply_preset_without_units(self):
        self.unit.is_active = False
        self.unit.save()

        with self.assertRaises(CommandError):
            _run("apply_preset", "reset")

    def test_reward_low_consumers(self):
        call_command("calculate_credits", open_limits=True, stdout=StringIO())

        output = _run("reward_low_consumers", threshold=50, reward=5)

        # fresh limits with no readings: all three balances qualify
        self.assertIn("Granted 3 rewards", output)
