from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import AlertType, NoticeKind
from .model import Membership
from .quota import MembershipQuotaEngine


@dataclass(frozen=True)
class Notice:
    """Notification contract handed to the presentation layer."""

    kind: NoticeKind
    title: str
    message: str
    alert: AlertType
    days_until_expiry: int
    remaining_visits: Optional[int]
    plan_label: str
    end_date: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "title": self.title,
            "message": self.message,
            "alert": self.alert.value,
            "days_until_expiry": self.days_until_expiry,
            "remaining_visits": self.remaining_visits,
            "plan_label": self.plan_label,
            "end_date": self.end_date,
        }


def _visits(n: int) -> str:
    return f"{n} visit" if n == 1 else f"{n} visits"


def build_notice(membership: Membership, now: datetime, engine: Optional[MembershipQuotaEngine] = None) -> Notice:
    engine = engine or MembershipQuotaEngine()
    kind = engine.classify_notice(membership, now)
    days = engine.days_until_expiry(membership, now)
    remaining = engine.remaining_weekly_visits(membership)
    allowed = membership.visits_allowed_per_week

    if kind == NoticeKind.EXPIRING_TODAY_OR_TOMORROW:
        if days == 1:
            title = "Your membership expires tomorrow!"
        elif days == 0:
            title = "Your membership expires today!"
        else:
            title = "Your membership has expired"
        message = "Remember to renew your membership to keep enjoying our services."
        alert = AlertType.WARNING
    elif kind == NoticeKind.EXPIRING_SOON:
        title = "Check-in registered"
        message = f"Your membership expires in {days} days."
        if remaining is not None and remaining > 0:
            message += f" You have {_visits(remaining)} left this week."
        alert = AlertType.WARNING
    elif kind == NoticeKind.CAPPED_PLAN_REMAINING:
        title = "Check-in registered"
        message = f"You have {_visits(remaining)} left this week on your {allowed}-times-per-week plan."
        alert = AlertType.INFO
    elif kind == NoticeKind.CAPPED_PLAN_EXHAUSTED:
        title = "Weekly limit reached"
        message = f"You have reached the limit of {_visits(allowed or 0)} per week for your plan."
        alert = AlertType.WARNING
    else:
        title = "Check-in successful"
        message = "Your attendance has been registered."
        alert = AlertType.SUCCESS

    return Notice(
        kind=kind,
        title=title,
        message=message,
        alert=alert,
        days_until_expiry=days,
        remaining_visits=remaining,
        plan_label=membership.plan_label,
        end_date=membership.end_date.strftime("%Y-%m-%d"),
    )
