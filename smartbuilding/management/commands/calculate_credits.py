"""
Daily entry point: recompute this month's credit balances for every active
unit. Safe to re-run; balances are overwritten, not accumulated.
"""

from django.core.management.base import BaseCommand

from smartbuilding.application.credits import calculate_all_credits, open_monthly_limits
from smartbuilding.application.settings_store import load_config


class Command(BaseCommand):
    help = "Recalculate monthly credit balances for active units."

    def add_arguments(self, parser):
        parser.add_argument(
            "--open-limits",
            action="store_true",
            help="First create missing limit rows for this month from the default limits.",
        )

    def handle(self, *args, **opts):
        if opts.get("open_limits"):
            created = open_monthly_limits(load_config())
            self.stdout.write(f"Opened {created} monthly limits.")

        result = calculate_all_credits()
        self.stdout.write(self.style.SUCCESS(
            f"Calculated credits for {result.processed} units ({result.failed} failed)."
        ))
