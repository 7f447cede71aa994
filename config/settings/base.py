# config/settings/base.py
from pathlib import Path
import os
from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent.parent.parent
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "unsafe-dev-key")
DEBUG = os.getenv("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [
    # Django
    "django.contrib.auth",
    "django.contrib.contenttypes",

    # Third-party
    "rest_framework",

    # Domain apps (modular monolith)
    "lp_core.common.apps.CommonConfig",
    "lp_core.rulesets.apps.RulesetsConfig",
    "lp_core.competitions.apps.CompetitionsConfig",
    "lp_core.placement.apps.PlacementAppConfig",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DB_NAME", "lp"),
        "USER": os.getenv("DB_USER", "lp"),
        "PASSWORD": os.getenv("DB_PASSWORD", "lp"),
        "HOST": os.getenv("DB_HOST", "127.0.0.1"),
        "PORT": os.getenv("DB_PORT", "5432"),
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Ho_Chi_Minh"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Logging (structlog, see lp_core.common.logging)
LOG_LEVEL = os.getenv("LOG_LEVEL", "info")
LOG_JSON = os.getenv("LOG_JSON", "0") == "1"

# Rule sets
# Reject overlapping participant buckets / same-phase branch ranges on write.
# Off by default: first-declared rule wins on overlap.
RULESETS_REJECT_OVERLAPPING_RANGES = os.getenv("RULESETS_REJECT_OVERLAPPING_RANGES", "0") == "1"

# Placement
PLACEMENT_DEFAULT_COST = int(os.getenv("PLACEMENT_DEFAULT_COST", "50000"))
