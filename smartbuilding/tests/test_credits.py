from datetime import date, timedelta

from django.db.models import Sum
from django.test import TestCase

from smartbuilding.application.credits import (
    buy_credits,
    calculate_all_credits,
    calculate_unit_credits,
    create_transaction,
    credit_price,
    demand_level,
    get_credits,
    open_monthly_limits,
    reward_low_consumers,
    sell_credits,
)
from smartbuilding.domain.config import EngineConfig
from smartbuilding.domain.exceptions import InvalidCreditRequest, NoActiveUnits, PricingNotConfigured
from smartbuilding.models import ConsumptionLimit, CreditTransaction, EnergyCredit, Unit

from .helpers import NOW, TODAY, add_limit, add_reading, make_building, make_unit


def _balance(unit, metric):
    return EnergyCredit.objects.get(unit=unit, metric=metric).balance


class CalculateCreditsTest(TestCase):

    def setUp(self):
        self.unit = make_unit()

    def test_balance_is_limit_minus_month_consumption(self):
        add_limit(self.unit, "water", 150)
        add_reading(self.unit, "water", 100, NOW - timedelta(days=3))
        add_reading(self.unit, "water", 80, NOW - timedelta(hours=2))
        # previous month is not counted
        add_reading(self.unit, "water", 500, NOW - timedelta(days=20))

        balances = calculate_unit_credits(self.unit, today=TODAY)

        self.assertEqual(balances, {"water": -30.0})
        self.assertEqual(_balance(self.unit, "water"), -30.0)

    def test_recalculation_is_idempotent(self):
        add_limit(self.unit, "gas", 100)
        add_reading(self.unit, "gas", 40, NOW)

        calculate_unit_credits(self.unit, today=TODAY)
        calculate_unit_credits(self.unit, today=TODAY)

        self.assertEqual(EnergyCredit.objects.filter(unit=self.unit).count(), 1)
        self.assertEqual(_balance(self.unit, "gas"), 60.0)

    def test_metrics_without_limit_are_left_untouched(self):
        EnergyCredit.objects.create(unit=self.unit, metric="electricity", balance=12)
        add_limit(self.unit, "water", 10)

        calculate_unit_credits(self.unit, today=TODAY)

        self.assertEqual(_balance(self.unit, "electricity"), 12)
        self.assertEqual(_balance(self.unit, "water"), 10)

    def test_calculate_all_credits(self):
        other = make_unit(self.unit.building, name="1B")
        add_limit(self.unit, "water", 10)
        add_limit(other, "water", 20)
        add_limit(other, "gas", 20)

        result = calculate_all_credits(today=TODAY)

        self.assertEqual(result.processed, 2)
        self.assertEqual(result.created, 3)

    def test_get_credits_fills_missing_metrics(self):
        EnergyCredit.objects.create(unit=self.unit, metric="water", balance=-5)
        EnergyCredit.objects.create(unit=self.unit, metric="gas", balance=20)

        credits = get_credits(self.unit)

        self.assertEqual(credits["water"], -5)
        self.assertEqual(credits["electricity"], 0.0)
        self.assertEqual(credits["total_balance"], 15)


class PricingTest(TestCase):

    def setUp(self):
        self.config = EngineConfig.defaults()
        building = make_building()
        self.buyer_a = make_unit(building, name="A")
        self.buyer_b = make_unit(building, name="B")
        self.seller = make_unit(building, name="C")

    def test_price_at_full_demand(self):
        EnergyCredit.objects.create(unit=self.buyer_a, metric="water", balance=-10)
        EnergyCredit.objects.create(unit=self.buyer_b, metric="water", balance=-3)
        EnergyCredit.objects.create(unit=self.seller, metric="water", balance=25)

        self.assertEqual(demand_level("water"), 1.0)
        self.assertEqual(credit_price("water", self.config), 1800.0)

    def test_price_without_credits_is_base_price(self):
        self.assertEqual(demand_level("gas"), 0.0)
        self.assertEqual(credit_price("gas", self.config), 2000.0)

    def test_partial_demand(self):
        EnergyCredit.objects.create(unit=self.buyer_a, metric="electricity", balance=-1)
        EnergyCredit.objects.create(unit=self.buyer_b, metric="electricity", balance=5)
        EnergyCredit.objects.create(unit=self.seller, metric="electricity", balance=5)

        self.assertEqual(demand_level("electricity"), 0.5)
        self.assertEqual(credit_price("electricity", self.config), 2750.0)

    def test_missing_base_price_raises(self):
        config = EngineConfig.from_mapping({})

        with self.assertRaises(PricingNotConfigured) as ctx:
            credit_price("water", config)
        self.assertEqual(ctx.exception.metric, "water")


class CreditTransactionTest(TestCase):

    def setUp(self):
        self.config = EngineConfig.defaults()
        building = make_building()
        self.seller = make_unit(building, name="S")
        self.buyer = make_unit(building, name="B")
        EnergyCredit.objects.create(unit=self.seller, metric="water", balance=20)
        EnergyCredit.objects.create(unit=self.buyer, metric="water", balance=-10)

    def test_sell_moves_balance_and_conserves_total(self):
        before = EnergyCredit.objects.aggregate(total=Sum("balance"))["total"]

        ledger = sell_credits(self.seller.id, self.buyer.id, "water", 5, self.config)

        self.assertEqual(_balance(self.seller, "water"), 15)
        self.assertEqual(_balance(self.buyer, "water"), -5)
        self.assertEqual(EnergyCredit.objects.aggregate(total=Sum("balance"))["total"], before)

        self.assertEqual(ledger.status, CreditTransaction.Status.COMPLETED)
        self.assertEqual(ledger.transaction_type, CreditTransaction.Type.MANUAL_SELL)
        self.assertIsNotNone(ledger.completed_at)
        # one buyer, one seller -> full demand
        self.assertEqual(ledger.price_per_credit, 1800.0)
        self.assertEqual(ledger.total_price, 9000.0)

    def test_buy_creates_balance_row_and_credits_unit(self):
        newcomer = make_unit(self.seller.building, name="N")

        ledger = buy_credits(newcomer.id, "gas", 2.5, self.config)

        self.assertIsNone(ledger.from_unit_id)
        self.assertEqual(ledger.transaction_type, CreditTransaction.Type.SYSTEM_PURCHASE)
        self.assertEqual(_balance(newcomer, "gas"), 2.5)

    def test_invalid_requests_write_nothing(self):
        invalid = [
            (self.seller.id, self.buyer.id, "steam", 5, CreditTransaction.Type.MANUAL_SELL),
            (self.seller.id, self.buyer.id, "water", 0, CreditTransaction.Type.MANUAL_SELL),
            (self.seller.id, self.buyer.id, "water", -3, CreditTransaction.Type.MANUAL_SELL),
            (self.seller.id, self.buyer.id, "water", "abc", CreditTransaction.Type.MANUAL_SELL),
            (self.seller.id, self.buyer.id, "water", float("nan"), CreditTransaction.Type.MANUAL_SELL),
            (self.seller.id, self.seller.id, "water", 5, CreditTransaction.Type.MANUAL_SELL),
            (self.seller.id, self.buyer.id, "water", 5, "gift"),
        ]
        for args in invalid:
            with self.subTest(args=args), self.assertRaises(InvalidCreditRequest):
                create_transaction(*args, config=self.config)

        self.assertEqual(CreditTransaction.objects.count(), 0)
        self.assertEqual(_balance(self.seller, "water"), 20)

    def test_unknown_unit_writes_nothing(self):
        with self.assertRaises(Unit.DoesNotExist):
            sell_credits(self.seller.id, 99999, "water", 5, self.config)

        self.assertEqual(CreditTransaction.objects.count(), 0)
        self.assertEqual(_balance(self.seller, "water"), 20)

    def test_pricing_failure_rolls_back(self):
        config = EngineConfig.from_mapping({})

        with self.assertRaises(PricingNotConfigured):
            sell_credits(self.seller.id, self.buyer.id, "water", 5, config)

        self.assertEqual(CreditTransaction.objects.count(), 0)
        self.assertEqual(_balance(self.seller, "water"), 20)
        self.assertEqual(_balance(self.buyer, "water"), -10)


class AdminCreditOperationsTest(TestCase):

    def setUp(self):
        self.config = EngineConfig.defaults()

    def test_reward_requires_active_units(self):
        make_unit(is_active=False)

        with self.assertRaises(NoActiveUnits):
            reward_low_consumers(self.config, today=TODAY)

    def test_reward_low_consumers(self):
        building = make_building()
        saver = make_unit(building, name="S")
        spender = make_unit(building, name="P")
        add_limit(saver, "water", 150)
        add_limit(spender, "water", 150)
        add_reading(saver, "water", 20, NOW)
        add_reading(spender, "water", 140, NOW)

        granted = reward_low_consumers(self.config, threshold=50, reward=5, today=TODAY)

        self.assertEqual(granted, 1)
        self.assertEqual(_balance(saver, "water"), 135)
        self.assertEqual(_balance(spender, "water"), 10)
        ledger = CreditTransaction.objects.get()
        self.assertEqual(ledger.to_unit_id, saver.id)
        self.assertEqual(ledger.notes, "low consumption reward")

    def test_reward_is_all_or_nothing_when_a_price_is_missing(self):
        unit = make_unit()
        add_limit(unit, "water", 150)
        add_limit(unit, "gas", 100)
        config = EngineConfig.from_mapping({"base_price_gas": "2000", "base_price_electricity": "2500"})

        with self.assertRaises(PricingNotConfigured):
            reward_low_consumers(config, threshold=50, reward=5, today=TODAY)

        self.assertEqual(CreditTransaction.objects.count(), 0)
        self.assertEqual(_balance(unit, "gas"), 100)
        self.assertEqual(_balance(unit, "water"), 150)

    def test_open_monthly_limits_keeps_existing_rows(self):
        unit = make_unit()
        add_limit(unit, "water", 42)

        created = open_monthly_limits(self.config, today=TODAY)

        self.assertEqual(created, 2)
        water = ConsumptionLimit.objects.get(unit=unit, metric="water")
        self.assertEqual(water.monthly_limit, 42)
        gas = ConsumptionLimit.objects.get(unit=unit, metric="gas")
        self.assertEqual(gas.monthly_limit, 100)
        self.assertEqual(gas.period_start, date(2026, 3, 1))
        self.assertEqual(gas.period_end, date(2026, 3, 31))
