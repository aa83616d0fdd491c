from django.core.management.base import BaseCommand, CommandError

from smartbuilding.application.maintenance import reset_activity_data
from smartbuilding.domain.exceptions import ResetNotConfirmed


class Command(BaseCommand):
    help = "Delete all readings, limits, credits, ledger rows, alerts and twin states."

    def add_arguments(self, parser):
        parser.add_argument("--yes", action="store_true", help="Confirm the reset.")

    def handle(self, *args, **opts):
        try:
            deleted = reset_activity_data(confirm=opts.get("yes", False))
        except ResetNotConfirmed as exc:
            raise CommandError(f"{exc}; pass --yes.")

        summary = ", ".join(f"{name}={count}" for name, count in deleted.items())
        self.stdout.write(self.style.SUCCESS(f"Reset complete: {summary}."))
