# config/settings/local.py
from .base import *  # noqa

DEBUG = True
