from django.core.management.base import BaseCommand

from smartbuilding.application.settings_store import seed_default_settings


class Command(BaseCommand):
    help = "Insert the default system settings."

    def add_arguments(self, parser):
        parser.add_argument("--overwrite", action="store_true", help="Reset existing keys to their defaults.")

    def handle(self, *args, **opts):
        written = seed_default_settings(overwrite=opts.get("overwrite", False))
        self.stdout.write(self.style.SUCCESS(f"Wrote {written} settings."))
