from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import now_local
from ..core.exceptions import (
    CheckInApiError,
    DomainError,
    NotJsonPayloadError,
    PayloadError,
    QuotaRejectedError,
    ValidationError,
    WrongKindPayloadError,
)
from ..memberships.model import Membership
from ..memberships.notice import build_notice
from ..memberships.quota import MembershipQuotaEngine
from ..memberships.repository import MembershipRepository
from ..scanning.payload import AttendanceIntent, validate
from .client import CheckInClient
from .model import (
    Accepted,
    AlreadyAuthenticatedMismatch,
    CheckInOutcome,
    InvalidPayload,
    NetworkOrServerError,
    QuotaExceeded,
)

logger = logging.getLogger(__name__)


class CheckInCoordinator:
    """Turn a validated attendance intent into exactly one check-in call.

    Every failure is converted into a CheckInOutcome variant here; nothing
    raised by the client or the membership parsing escapes ``attempt``.
    """

    def __init__(
        self,
        client: CheckInClient,
        *,
        engine: Optional[MembershipQuotaEngine] = None,
        memberships: Optional[MembershipRepository] = None,
        quota_precheck: bool = False,
    ):
        self._client = client
        self._engine = engine or MembershipQuotaEngine()
        self._memberships = memberships
        self._quota_precheck = bool(quota_precheck)

    def attempt(
        self,
        intent: AttendanceIntent,
        signed_in_user_id: Optional[str],
        now: Optional[datetime] = None,
    ) -> CheckInOutcome:
        now = now or now_local()
        signed_in = str(signed_in_user_id) if signed_in_user_id is not None else None
        subject = signed_in or intent.subject_user_id
        if not subject:
            return InvalidPayload(reason="NO_SUBJECT", message="Sign in or scan a personal code to check in.")

        # Never check in on someone else's behalf from a shared device.
        if signed_in and intent.subject_user_id and signed_in != intent.subject_user_id:
            logger.warning("Scanned code belongs to user %s but user %s is signed in", intent.subject_user_id, signed_in)
            return AlreadyAuthenticatedMismatch(signed_in_user_id=signed_in, payload_user_id=intent.subject_user_id)

        if self._quota_precheck:
            pre_empted = self._precheck(subject, now)
            if pre_empted is not None:
                return pre_empted

        try:
            snapshot_data = self._client.register_visit(intent.facility_id, subject, intent.issued_at)
        except QuotaRejectedError as e:
            logger.info("Backend rejected visit for user %s: weekly quota exhausted", subject)
            snapshot = self._parse_snapshot(e.membership, subject)
            kwargs = {"message": str(e)} if str(e) else {}
            return QuotaExceeded(
                snapshot=snapshot,
                notice=build_notice(snapshot, now, self._engine) if snapshot else None,
                **kwargs,
            )
        except CheckInApiError as e:
            logger.warning("Check-in failed for user %s (status=%s, retryable=%s): %s", subject, e.status_code, e.retryable, e)
            return NetworkOrServerError(retryable=e.retryable, message=str(e), status_code=e.status_code)

        snapshot = self._parse_snapshot(snapshot_data, subject)

        notice = build_notice(snapshot, now, self._engine) if snapshot else None
        logger.info("Check-in accepted for user %s (notice=%s)", subject, notice.kind.value if notice else None)
        return Accepted(snapshot=snapshot, notice=notice)

    def process_raw(
        self,
        raw_text: str,
        signed_in_user_id: Optional[str],
        now: Optional[datetime] = None,
    ) -> CheckInOutcome:
        """Validate decoded QR text and attempt the check-in."""
        try:
            intent = validate(raw_text)
        except NotJsonPayloadError as e:
            logger.info("Rejected QR payload: %s", e)
            return InvalidPayload(reason="NOT_JSON")
        except WrongKindPayloadError as e:
            logger.info("Rejected QR payload: %s", e)
            return InvalidPayload(reason="WRONG_KIND")
        except PayloadError as e:
            logger.info("Rejected QR payload: %s", e)
            return InvalidPayload(reason="INVALID")
        return self.attempt(intent, signed_in_user_id, now)

    def _parse_snapshot(self, data: Optional[dict[str, Any]], subject: str) -> Optional[Membership]:
        if not data:
            return None
        try:
            return Membership.from_api(data)
        except ValidationError as e:
            logger.warning("Membership snapshot for user %s is unusable: %s", subject, e)
            return None

    def _precheck(self, subject: str, now: datetime) -> Optional[QuotaExceeded]:
        """Advisory: skip the call when the plan is visibly out of visits.

        Lookup failures fall through to the backend, which has the final say.
        """
        if self._memberships is None:
            return None
        try:
            membership = self._memberships.get_active_membership(subject)
        except DomainError as e:
            logger.warning("Quota pre-check skipped for user %s: %s", subject, e)
            return None
        if membership is None or not self._engine.is_capped_plan(membership):
            return None
        if self._engine.remaining_weekly_visits(membership) > 0:
            return None
        logger.info("Quota pre-check: user %s has no visits left this week", subject)
        return QuotaExceeded(
            snapshot=membership,
            notice=build_notice(membership, now, self._engine),
            pre_checked=True,
        )
