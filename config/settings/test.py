# config/settings/test.py
from .base import *  # noqa

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

LOG_LEVEL = "warning"
RULESETS_REJECT_OVERLAPPING_RANGES = False
