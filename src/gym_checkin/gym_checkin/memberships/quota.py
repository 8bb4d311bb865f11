from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import calendar_days_between
from ..core.constants import DEFAULT_EXPIRING_SOON_DAYS
from ..core.enums import MembershipStatus, NoticeKind
from .model import Membership

# remaining_weekly_visits() returns this for plans without a weekly cap.
UNLIMITED = None


@dataclass(frozen=True)
class MembershipQuotaEngine:
    """Pure quota and expiry rules over a membership snapshot.

    Nothing here mutates the membership or talks to the backend; status is
    taken as given and only the day count to expiry is recomputed.
    """

    expiring_soon_days: int = DEFAULT_EXPIRING_SOON_DAYS

    def days_until_expiry(self, membership: Membership, now: datetime) -> int:
        """Calendar days from ``now`` to ``end_date``; negative once expired."""
        return calendar_days_between(now, membership.end_date)

    def is_capped_plan(self, membership: Membership) -> bool:
        return membership.visits_allowed_per_week is not None

    def remaining_weekly_visits(self, membership: Membership) -> Optional[int]:
        if not self.is_capped_plan(membership):
            return UNLIMITED
        return int(membership.visits_allowed_per_week) - int(membership.visits_used_this_week or 0)

    def can_check_in_now(self, membership: Membership, now: datetime) -> bool:
        if membership.status != MembershipStatus.ACTIVE:
            return False
        if not self.is_capped_plan(membership):
            return True
        return self.remaining_weekly_visits(membership) > 0

    def classify_notice(self, membership: Membership, now: datetime) -> NoticeKind:
        # Expiry notices win over capacity notices.
        days = self.days_until_expiry(membership, now)
        if days <= 1:
            return NoticeKind.EXPIRING_TODAY_OR_TOMORROW
        if days <= self.expiring_soon_days:
            return NoticeKind.EXPIRING_SOON

        if self.is_capped_plan(membership):
            if self.remaining_weekly_visits(membership) > 0:
                return NoticeKind.CAPPED_PLAN_REMAINING
            return NoticeKind.CAPPED_PLAN_EXHAUSTED
        return NoticeKind.NORMAL
