# lp_core/placement/apps.py
from django.apps import AppConfig


class PlacementAppConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lp_core.placement"
