from django.core.management.base import BaseCommand, CommandError

from smartbuilding.application.analyzer import analyze_all
from smartbuilding.application.presets import PRESETS, apply_preset
from smartbuilding.application.settings_store import load_config
from smartbuilding.application.simulation import simulate_all
from smartbuilding.domain.exceptions import InvalidPreset, NoActiveUnits


class Command(BaseCommand):
    help = "Apply a simulation preset to all active units, then run one simulation tick."

    def add_arguments(self, parser):
        parser.add_argument("preset", choices=sorted(PRESETS))
        parser.add_argument("--no-tick", action="store_true", help="Only update twin states.")

    def handle(self, *args, **opts):
        try:
            units = apply_preset(opts["preset"])
        except (InvalidPreset, NoActiveUnits) as exc:
            raise CommandError(str(exc))

        self.stdout.write(f"Preset {opts['preset']} applied to {units} units.")
        if opts.get("no_tick"):
            return

        config = load_config()
        simulated = simulate_all(config)
        analyzed = analyze_all(config)
        self.stdout.write(self.style.SUCCESS(
            f"Simulated {simulated.processed} units, {analyzed.created} new alerts."
        ))
