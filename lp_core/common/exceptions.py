# lp_core/common/exceptions.py
from __future__ import annotations

from rest_framework import status
from rest_framework.exceptions import APIException


class ConflictError(APIException):
    """
    409 Conflict.
    Use when business rules block an action (e.g. deleting the active rule set).
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)
