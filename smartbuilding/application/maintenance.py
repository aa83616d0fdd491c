"""
Admin reset of accumulated activity.

Clears readings, limits, credit balances, the ledger, alerts, twin states and
update watermarks in one transaction. Buildings, units and settings are kept:
units are only ever soft-deactivated.
"""

import logging

from django.db import transaction

from smartbuilding.domain.exceptions import ResetNotConfirmed
from smartbuilding.models import (
    Alert,
    ConsumptionLimit,
    ConsumptionReading,
    CreditTransaction,
    EnergyCredit,
    TwinState,
    UpdateOffset,
)

logger = logging.getLogger(__name__)

RESET_MODELS = (
    ConsumptionReading,
    ConsumptionLimit,
    EnergyCredit,
    CreditTransaction,
    Alert,
    TwinState,
)


def reset_activity_data(confirm=False):
    """Returns deleted row counts keyed by model name."""
    if not confirm:
        raise ResetNotConfirmed()

    deleted = {}
    with transaction.atomic():
        for model in RESET_MODELS:
            count, _ = model.objects.all().delete()
            deleted[model.__name__] = count
        deleted["UpdateOffset"] = UpdateOffset.objects.update(last_update_id=0)

    logger.warning("Activity data reset: %s", deleted)
    return deleted
