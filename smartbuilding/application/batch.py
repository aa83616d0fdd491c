import logging
from dataclasses import dataclass

from django.db import transaction

from smartbuilding.models import Unit

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    processed: int = 0
    failed: int = 0
    created: int = 0


def run_for_active_units(label, handler, units=None):
    """
    Call handler(unit) for every active unit, one savepoint per unit.

    A failing unit is logged and counted; the batch carries on. handler may
    return an int which is accumulated into BatchResult.created.
    """
    if units is None:
        units = Unit.objects.filter(is_active=True).order_by("id")

    result = BatchResult()
    for unit in units:
        try:
            with transaction.atomic():
                created = handler(unit)
        except Exception:
            logger.exception("%s failed for unit=%s", label, unit.pk)
            result.failed += 1
            continue
        result.processed += 1
        result.created += int(created or 0)

    logger.info(
        "%s finished: processed=%s failed=%s created=%s",
        label, result.processed, result.failed, result.created,
    )
    return result
