import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

METRIC_CHOICES = [("water", "Water"), ("electricity", "Electricity"), ("gas", "Gas")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Building",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("address", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="SystemSetting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=100, unique=True)),
                ("value", models.TextField()),
                ("description", models.TextField(blank=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="UpdateOffset",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("worker", models.CharField(max_length=100, unique=True)),
                ("last_update_id", models.BigIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="Unit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("floor_number", models.IntegerField()),
                ("name", models.CharField(max_length=50)),
                ("area_m2", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("occupants_count", models.PositiveIntegerField(default=1)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("building", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="units", to="smartbuilding.building")),
                ("owner", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="units", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("building", "floor_number", "name"), name="unique_unit_per_floor"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TwinState",
            fields=[
                ("unit", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name="twin_state", serialize=False, to="smartbuilding.unit")),
                ("scenario", models.CharField(choices=[("empty", "Empty"), ("family", "Family"), ("party", "Party"), ("night", "Night"), ("travel", "Travel")], default="family", max_length=10)),
                ("season", models.CharField(choices=[("spring", "Spring"), ("summer", "Summer"), ("autumn", "Autumn"), ("winter", "Winter")], default="spring", max_length=10)),
                ("eco_mode", models.BooleanField(default=False)),
                ("lights_on", models.BooleanField(default=True)),
                ("water_heater_on", models.BooleanField(default=True)),
                ("ac_mode", models.CharField(choices=[("off", "Off"), ("low", "Low"), ("medium", "Medium"), ("high", "High")], default="off", max_length=10)),
                ("heating_temp", models.IntegerField(default=22)),
                ("cost_sensitivity", models.IntegerField(default=50)),
                ("green_sensitivity", models.IntegerField(default=50)),
                ("monthly_budget", models.PositiveBigIntegerField(default=1500000)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="ConsumptionReading",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("metric", models.CharField(choices=METRIC_CHOICES, max_length=12)),
                ("value", models.FloatField()),
                ("simulated", models.BooleanField(default=True)),
                ("timestamp", models.DateTimeField(db_index=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="readings", to="smartbuilding.unit")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["unit", "metric", "timestamp"], name="reading_unit_metric_ts_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ConsumptionLimit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("metric", models.CharField(choices=METRIC_CHOICES, max_length=12)),
                ("monthly_limit", models.FloatField(default=0)),
                ("price_per_unit", models.FloatField(default=0)),
                ("period_start", models.DateField()),
                ("period_end", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="limits", to="smartbuilding.unit")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["period_start", "period_end"], name="limit_period_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("unit", "metric", "period_start"), name="unique_limit_per_period"),
                ],
            },
        ),
        migrations.CreateModel(
            name="EnergyCredit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("metric", models.CharField(choices=METRIC_CHOICES, max_length=12)),
                ("balance", models.FloatField(default=0)),
                ("last_calculated", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="credits", to="smartbuilding.unit")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["metric", "balance"], name="credit_metric_balance_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("unit", "metric"), name="unique_credit_per_metric"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CreditTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("metric", models.CharField(choices=METRIC_CHOICES, max_length=12)),
                ("amount", models.FloatField()),
                ("price_per_credit", models.FloatField()),
                ("total_price", models.FloatField()),
                ("transaction_type", models.CharField(choices=[("auto_balance", "Auto balance"), ("manual_sell", "Manual sell"), ("manual_buy", "Manual buy"), ("system_purchase", "System purchase")], max_length=20)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("completed", "Completed"), ("cancelled", "Cancelled")], default="pending", max_length=10)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("from_unit", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="credits_sent", to="smartbuilding.unit")),
                ("to_unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="credits_received", to="smartbuilding.unit")),
            ],
        ),
        migrations.CreateModel(
            name="Alert",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("alert_type", models.CharField(choices=[("over_consumption", "Over consumption"), ("leak_suspected", "Leak suspected"), ("low_credit", "Low credit"), ("high_cost", "High cost"), ("system_message", "System message")], max_length=20)),
                ("severity", models.CharField(choices=[("info", "Info"), ("warning", "Warning"), ("critical", "Critical")], default="info", max_length=10)),
                ("title", models.CharField(max_length=200)),
                ("message", models.TextField()),
                ("is_read", models.BooleanField(default=False)),
                ("created_on", models.DateField(default=django.utils.timezone.localdate)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("read_at", models.DateTimeField(blank=True, null=True)),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="alerts", to="smartbuilding.unit")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["unit", "is_read"], name="alert_unit_unread_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("unit", "alert_type", "created_on"), name="unique_alert_per_day"),
                ],
            },
        ),
    ]
