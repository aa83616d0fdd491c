import logging

from smartbuilding.domain.config import DEFAULT_SETTINGS, EngineConfig
from smartbuilding.models import SystemSetting

logger = logging.getLogger(__name__)


def load_config():
    """Read the settings table into an EngineConfig snapshot."""
    values = dict(SystemSetting.objects.values_list("key", "value"))
    return EngineConfig.from_mapping(values)


def set_setting(key, value, description=None):
    defaults = {"value": str(value)}
    if description is not None:
        defaults["description"] = description
    setting, created = SystemSetting.objects.update_or_create(key=key, defaults=defaults)
    logger.info("Setting %s: %s=%s", "created" if created else "updated", key, value)
    return setting


def seed_default_settings(overwrite=False):
    """Insert the default settings; existing keys are kept unless overwrite is set."""
    written = 0
    for key, value, description in DEFAULT_SETTINGS:
        if overwrite:
            set_setting(key, value, description)
            written += 1
            continue
        _, created = SystemSetting.objects.get_or_create(
            key=key, defaults={"value": value, "description": description}
        )
        written += int(created)
    return written
