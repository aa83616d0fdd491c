from django.apps import AppConfig


class SmartBuildingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "smartbuilding"
    verbose_name = "Smart Building"
