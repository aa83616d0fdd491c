"""
Scheduler entry point: write one simulated reading per metric for every
active unit. Intended to run every few minutes, followed by analyze_units.
"""

from django.core.management.base import BaseCommand

from smartbuilding.application.settings_store import load_config
from smartbuilding.application.simulation import simulate_all, simulate_building
from smartbuilding.models import Building


class Command(BaseCommand):
    help = "Generate simulated consumption readings for active units."

    def add_arguments(self, parser):
        parser.add_argument("--building", type=int, help="Only simulate units of this building id.")

    def handle(self, *args, **opts):
        config = load_config()

        if opts.get("building"):
            building = Building.objects.filter(id=opts["building"]).first()
            if building is None:
                self.stdout.write(self.style.WARNING(f"Building {opts['building']} not found."))
                return
            result = simulate_building(building, config)
        else:
            result = simulate_all(config)

        self.stdout.write(self.style.SUCCESS(
            f"Simulated {result.processed} units ({result.created} readings, {result.failed} failed)."
        ))
