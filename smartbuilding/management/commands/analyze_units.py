from django.core.management.base import BaseCommand

from smartbuilding.application.analyzer import analyze_all
from smartbuilding.application.settings_store import load_config


class Command(BaseCommand):
    help = "Analyze consumption of active units and raise alerts."

    def handle(self, *args, **opts):
        result = analyze_all(load_config())
        self.stdout.write(self.style.SUCCESS(
            f"Analyzed {result.processed} units: {result.created} alerts created, {result.failed} failed."
        ))
