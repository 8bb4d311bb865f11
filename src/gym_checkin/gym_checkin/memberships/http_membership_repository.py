from __future__ import annotations

import logging
from typing import Optional

from ..common.api_client import ApiClient
from ..core.exceptions import CheckInApiError
from .model import Membership

logger = logging.getLogger(__name__)


class HttpMembershipRepository:
    """Read-only access to memberships owned by the backend."""

    def __init__(self, api: ApiClient):
        self._api = api

    def get_active_membership(self, user_id: str) -> Optional[Membership]:
        status, body = self._api.get(f"memberships/user/{user_id}/active")
        if status == 404:
            return None
        if status >= 400:
            raise CheckInApiError(
                body.get("message") or f"Membership lookup failed ({status})",
                status_code=status,
                retryable=status >= 500,
                body=body,
            )
        data = body.get("membership", body.get("data", body))
        if not data:
            return None
        return Membership.from_api(data)

    def get_weekly_attendances(self, membership_id: str) -> int:
        try:
            status, body = self._api.get(f"attendance/weekly/{membership_id}")
        except CheckInApiError as e:
            logger.warning("Weekly attendance lookup failed for %s: %s", membership_id, e)
            return 0
        if status >= 400:
            logger.warning("Weekly attendance lookup for %s returned %s", membership_id, status)
            return 0
        try:
            return int(body.get("count", 0))
        except (TypeError, ValueError):
            logger.warning("Weekly attendance count for %s is not a number: %r", membership_id, body.get("count"))
            return 0
