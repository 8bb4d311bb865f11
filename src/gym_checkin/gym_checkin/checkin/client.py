from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Protocol

from ..common.api_client import ApiClient
from ..core.constants import ATTENDANCE_KIND, WEEKLY_LIMIT_CODE
from ..core.exceptions import CheckInApiError, QuotaRejectedError

logger = logging.getLogger(__name__)


class CheckInClient(Protocol):
    def register_visit(
        self,
        facility_id: str,
        subject_user_id: str,
        issued_at: Optional[datetime] = None,
    ) -> Optional[dict[str, Any]]:
        """Register one visit; returns the post-check-in membership JSON (if sent).

        Raises QuotaRejectedError or CheckInApiError.
        """
        raise NotImplementedError


def _is_quota_rejection(status: int, body: dict[str, Any]) -> bool:
    if body.get("code") == WEEKLY_LIMIT_CODE:
        return True
    return status == 409 and bool(body.get("membership"))


class HttpCheckInClient:
    """``POST attendance/register`` against the gym backend.

    Exactly one request per call; retries are a new scan.
    """

    def __init__(self, api: ApiClient):
        self._api = api

    def register_visit(
        self,
        facility_id: str,
        subject_user_id: str,
        issued_at: Optional[datetime] = None,
    ) -> Optional[dict[str, Any]]:
        qr_data: dict[str, Any] = {
            "type": ATTENDANCE_KIND,
            "gym_id": facility_id,
            "user_id": subject_user_id,
        }
        if issued_at is not None:
            qr_data["timestamp"] = issued_at.isoformat()

        status, body = self._api.post("attendance/register", {"qrData": qr_data, "userId": subject_user_id})
        message = body.get("message") or ""

        if 200 <= status < 300 and body.get("success", True):
            logger.info("Visit registered for user %s at facility %s", subject_user_id, facility_id)
            return body.get("membership")

        if _is_quota_rejection(status, body):
            raise QuotaRejectedError(
                message or "Weekly visit limit reached",
                status_code=status,
                membership=body.get("membership"),
                body=body,
            )

        if 200 <= status < 300:
            raise CheckInApiError(message or "Check-in was rejected", status_code=status, body=body)

        retryable = status >= 500 or status in (408, 409)
        raise CheckInApiError(
            message or f"Check-in failed with HTTP {status}",
            status_code=status,
            retryable=retryable,
            body=body,
        )
