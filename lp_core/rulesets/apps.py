# lp_core/rulesets/apps.py
from django.apps import AppConfig


class RulesetsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lp_core.rulesets"
