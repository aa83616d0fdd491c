from django.core.management.base import BaseCommand, CommandError

from smartbuilding.application.credits import REWARD_AMOUNT, REWARD_THRESHOLD, reward_low_consumers
from smartbuilding.application.settings_store import load_config
from smartbuilding.domain.exceptions import NoActiveUnits, PricingNotConfigured


class Command(BaseCommand):
    help = "Grant reward credits to every balance at or above a threshold."

    def add_arguments(self, parser):
        parser.add_argument("--threshold", type=float, default=REWARD_THRESHOLD)
        parser.add_argument("--reward", type=float, default=REWARD_AMOUNT)

    def handle(self, *args, **opts):
        try:
            granted = reward_low_consumers(
                load_config(), threshold=opts["threshold"], reward=opts["reward"]
            )
        except (NoActiveUnits, PricingNotConfigured) as exc:
            raise CommandError(str(exc))

        self.stdout.write(self.style.SUCCESS(f"Granted {granted} rewards."))
