"""
Exactly-once claim of inbound update ids.

Each polling worker owns one UpdateOffset row. The row lock serialises
claims for that worker, and the conditional UPDATE only advances the
watermark when the new id is strictly higher.
"""

import logging

from django.db import transaction

from smartbuilding.domain.exceptions import UpdateReplay
from smartbuilding.models import UpdateOffset

logger = logging.getLogger(__name__)

DEFAULT_WORKER = "gateway"


def claim_update(update_id, worker=DEFAULT_WORKER):
    update_id = int(update_id)
    with transaction.atomic():
        UpdateOffset.objects.get_or_create(worker=worker)
        offset = UpdateOffset.objects.select_for_update().get(worker=worker)

        advanced = UpdateOffset.objects.filter(
            worker=worker, last_update_id__lt=update_id
        ).update(last_update_id=update_id)

        if not advanced:
            logger.info("Update replay: worker=%s update_id=%s", worker, update_id)
            raise UpdateReplay(worker, update_id, offset.last_update_id)

    return update_id
