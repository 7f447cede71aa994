# config/settings/prod.py
from .base import *  # noqa

DEBUG = False
LOG_JSON = True
