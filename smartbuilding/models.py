"""
Persistence Models — Smart Building Domain (Django ORM)

This module defines the relational store behind the consumption console:
buildings and units, the per-unit digital twin state, the append-only reading
and ledger tables, credit balances, alerts and the tunable settings table.

Key decisions:

- ConsumptionReading and CreditTransaction are append-only fact tables.
- EnergyCredit holds one signed balance per (unit, metric); it is the only
  row mutated by ledger postings, always through F() expressions.
- Alert deduplication is enforced by a UNIQUE constraint on
  (unit, alert_type, created_on), not by a pre-insert check.
- TwinState is a 1:1 extension of Unit, created explicitly through
  application.twin.get_or_create_state().
- UpdateOffset stores the "last processed" inbound update watermark per
  polling worker.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone


class Metric(models.TextChoices):
    WATER = "water", "Water"
    ELECTRICITY = "electricity", "Electricity"
    GAS = "gas", "Gas"


METRICS = [m.value for m in Metric]


class Building(models.Model):
    name = models.CharField(max_length=200)
    address = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class Unit(models.Model):
    """
    A billable occupancy (apartment) within a building.

    Units are soft-deactivated through is_active; readings keep referencing
    them after deactivation.
    """

    building = models.ForeignKey(Building, on_delete=models.CASCADE, related_name="units")
    floor_number = models.IntegerField()
    name = models.CharField(max_length=50)
    area_m2 = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    occupants_count = models.PositiveIntegerField(default=1)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="units",
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["building", "floor_number", "name"], name="unique_unit_per_floor"
            ),
        ]

    def __str__(self):
        return f"Unit {self.name} (floor {self.floor_number})"


class TwinState(models.Model):
    """
    Simulated behavioural parameters for a unit.

    Field defaults are the documented default state used whenever the row
    is missing or cannot be read.
    """

    class Scenario(models.TextChoices):
        EMPTY = "empty", "Empty"
        FAMILY = "family", "Family"
        PARTY = "party", "Party"
        NIGHT = "night", "Night"
        TRAVEL = "travel", "Travel"

    class Season(models.TextChoices):
        SPRING = "spring", "Spring"
        SUMMER = "summer", "Summer"
        AUTUMN = "autumn", "Autumn"
        WINTER = "winter", "Winter"

    class AcMode(models.TextChoices):
        OFF = "off", "Off"
        LOW = "low", "Low"
        MEDIUM = "medium", "Medium"
        HIGH = "high", "High"

    HEATING_MIN = 16
    HEATING_MAX = 28
    SENSITIVITY_MIN = 0
    SENSITIVITY_MAX = 100

    unit = models.OneToOneField(
        Unit, on_delete=models.CASCADE, primary_key=True, related_name="twin_state"
    )
    scenario = models.CharField(max_length=10, choices=Scenario.choices, default=Scenario.FAMILY)
    season = models.CharField(max_length=10, choices=Season.choices, default=Season.SPRING)
    eco_mode = models.BooleanField(default=False)
    lights_on = models.BooleanField(default=True)
    water_heater_on = models.BooleanField(default=True)
    ac_mode = models.CharField(max_length=10, choices=AcMode.choices, default=AcMode.OFF)
    heating_temp = models.IntegerField(default=22)
    cost_sensitivity = models.IntegerField(default=50)
    green_sensitivity = models.IntegerField(default=50)
    monthly_budget = models.PositiveBigIntegerField(default=1_500_000)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"TwinState unit={self.unit_id} {self.scenario}/{self.season}"


class ConsumptionReading(models.Model):
    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name="readings")
    metric = models.CharField(max_length=12, choices=Metric.choices)
    value = models.FloatField()
    simulated = models.BooleanField(default=True)
    timestamp = models.DateTimeField(db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["unit", "metric", "timestamp"], name="reading_unit_metric_ts_idx"),
        ]

    def __str__(self):
        return f"{self.metric}@{self.timestamp} = {self.value}"


class ConsumptionLimit(models.Model):
    """
    Monthly cap for a (unit, metric). price_per_unit, when positive,
    overrides the configured base price for that unit.
    """

    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name="limits")
    metric = models.CharField(max_length=12, choices=Metric.choices)
    monthly_limit = models.FloatField(default=0)
    price_per_unit = models.FloatField(default=0)
    period_start = models.DateField()
    period_end = models.DateField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["unit", "metric", "period_start"], name="unique_limit_per_period"
            ),
        ]
        indexes = [
            models.Index(fields=["period_start", "period_end"], name="limit_period_idx"),
        ]


class EnergyCredit(models.Model):
    """Signed credit balance per (unit, metric); negative means over limit."""

    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name="credits")
    metric = models.CharField(max_length=12, choices=Metric.choices)
    balance = models.FloatField(default=0)
    last_calculated = models.DateTimeField(null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["unit", "metric"], name="unique_credit_per_metric"),
        ]
        indexes = [
            models.Index(fields=["metric", "balance"], name="credit_metric_balance_idx"),
        ]

    def __str__(self):
        return f"Credit unit={self.unit_id} {self.metric} = {self.balance}"


class CreditTransaction(models.Model):
    """
    Append-only ledger row. Every completed row corresponds to exactly one
    debit of from_unit (when present) and one credit of to_unit.
    """

    class Type(models.TextChoices):
        AUTO_BALANCE = "auto_balance", "Auto balance"
        MANUAL_SELL = "manual_sell", "Manual sell"
        MANUAL_BUY = "manual_buy", "Manual buy"
        SYSTEM_PURCHASE = "system_purchase", "System purchase"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    from_unit = models.ForeignKey(
        Unit, null=True, blank=True, on_delete=models.SET_NULL, related_name="credits_sent"
    )
    to_unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name="credits_received")
    metric = models.CharField(max_length=12, choices=Metric.choices)
    amount = models.FloatField()
    price_per_credit = models.FloatField()
    total_price = models.FloatField()
    transaction_type = models.CharField(max_length=20, choices=Type.choices)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"Transaction {self.id} {self.metric} {self.amount} -> unit {self.to_unit_id}"


class Alert(models.Model):
    class Type(models.TextChoices):
        OVER_CONSUMPTION = "over_consumption", "Over consumption"
        LEAK_SUSPECTED = "leak_suspected", "Leak suspected"
        LOW_CREDIT = "low_credit", "Low credit"
        HIGH_COST = "high_cost", "High cost"
        SYSTEM_MESSAGE = "system_message", "System message"

    class Severity(models.TextChoices):
        INFO = "info", "Info"
        WARNING = "warning", "Warning"
        CRITICAL = "critical", "Critical"

    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name="alerts")
    alert_type = models.CharField(max_length=20, choices=Type.choices)
    severity = models.CharField(max_length=10, choices=Severity.choices, default=Severity.INFO)
    title = models.CharField(max_length=200)
    message = models.TextField()
    is_read = models.BooleanField(default=False)

    # Calendar day the alert belongs to; part of the dedup key.
    created_on = models.DateField(default=timezone.localdate)
    created_at = models.DateTimeField(auto_now_add=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["unit", "alert_type", "created_on"], name="unique_alert_per_day"
            ),
        ]
        indexes = [
            models.Index(fields=["unit", "is_read"], name="alert_unit_unread_idx"),
        ]

    def __str__(self):
        return f"Alert {self.alert_type} unit={self.unit_id} on {self.created_on}"


class SystemSetting(models.Model):
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.key}={self.value}"


class UpdateOffset(models.Model):
    """Highest inbound update id processed by a polling worker."""

    worker = models.CharField(max_length=100, unique=True)
    last_update_id = models.BigIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.worker} @ {self.last_update_id}"
