# lp_core/common/apps.py
from django.apps import AppConfig
from django.conf import settings


class CommonConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lp_core.common"

    def ready(self):
        from lp_core.common.logging import configure_logging

        configure_logging(
            level=getattr(settings, "LOG_LEVEL", "info"),
            json=bool(getattr(settings, "LOG_JSON", False)),
        )
