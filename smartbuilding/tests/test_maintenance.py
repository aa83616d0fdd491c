from io import StringIO

from django.core.management import CommandError, call_command
from django.test import TestCase

from smartbuilding.application.analyzer import create_alert
from smartbuilding.application.maintenance import reset_activity_data
from smartbuilding.application.settings_store import seed_default_settings
from smartbuilding.application.updates import claim_update
from smartbuilding.domain.exceptions import ResetNotConfirmed
from smartbuilding.models import (
    Alert,
    Building,
    ConsumptionLimit,
    ConsumptionReading,
    CreditTransaction,
    EnergyCredit,
    SystemSetting,
    TwinState,
    Unit,
    UpdateOffset,
)

from .helpers import NOW, add_limit, add_reading, make_unit


class ResetActivityTest(TestCase):

    def setUp(self):
        seed_default_settings()
        self.unit = make_unit()
        TwinState.objects.create(unit=self.unit)
        add_reading(self.unit, "water", 10, NOW)
        add_limit(self.unit, "water", 150)
        EnergyCredit.objects.create(unit=self.unit, metric="water", balance=140)
        CreditTransaction.objects.create(
            to_unit=self.unit, metric="water", amount=1, price_per_credit=1500,
            total_price=1500, transaction_type=CreditTransaction.Type.SYSTEM_PURCHASE,
        )
        create_alert(self.unit, Alert.Type.LOW_CREDIT, Alert.Severity.WARNING, now=NOW)
        claim_update(42)

    def test_requires_confirmation(self):
        with self.assertRaises(ResetNotConfirmed):
            reset_activity_data()

        self.assertEqual(ConsumptionReading.objects.count(), 1)

    def test_clears_activity_and_keeps_structure(self):
        deleted = reset_activity_data(confirm=True)

        self.assertEqual(deleted["ConsumptionReading"], 1)
        for model in (ConsumptionReading, ConsumptionLimit, EnergyCredit, CreditTransaction, Alert, TwinState):
            self.assertFalse(model.objects.exists(), model.__name__)

        self.assertTrue(Building.objects.exists())
        self.assertTrue(Unit.objects.filter(pk=self.unit.pk).exists())
        self.assertTrue(SystemSetting.objects.exists())
        self.assertEqual(UpdateOffset.objects.get(worker="gateway").last_update_id, 0)

    def test_watermark_reset_accepts_old_update_ids_again(self):
        reset_activity_data(confirm=True)

        self.assertEqual(claim_update(1), 1)

    def test_command_needs_yes_flag(self):
        with self.assertRaises(CommandError):
            call_command("reset_activity", stdout=StringIO())
        self.assertTrue(ConsumptionReading.objects.exists())

        out = StringIO()
        call_command("reset_activity", yes=True, stdout=out)

        self.assertIn("Reset complete", out.getvalue())
        self.assertFalse(ConsumptionReading.objects.exists())
