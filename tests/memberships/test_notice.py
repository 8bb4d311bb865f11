from __future__ import annotations

from datetime import timedelta

from src.gym_checkin.gym_checkin.core.enums import AlertType, NoticeKind, PlanKind
from src.gym_checkin.gym_checkin.memberships.notice import build_notice


def test_tomorrow_expiry_warns_to_renew(make_membership, fixed_now):
    notice = build_notice(make_membership(end_date=fixed_now + timedelta(days=1)), fixed_now)

    assert notice.kind == NoticeKind.EXPIRING_TODAY_OR_TOMORROW
    assert notice.title == "Your membership expires tomorrow!"
    assert notice.alert == AlertType.WARNING


def test_remaining_visits_message_uses_singular(make_membership, fixed_now):
    notice = build_notice(make_membership(plan_kind=PlanKind.KICKBOXING_2, allowed=2, used=1), fixed_now)

    assert notice.kind == NoticeKind.CAPPED_PLAN_REMAINING
    assert "1 visit left this week" in notice.message
    assert notice.remaining_visits == 1
    assert notice.alert == AlertType.INFO


def test_exhausted_message_names_the_limit(make_membership, fixed_now):
    notice = build_notice(make_membership(plan_kind=PlanKind.KICKBOXING_3, allowed=3, used=3), fixed_now)

    assert notice.title == "Weekly limit reached"
    assert "3 visits per week" in notice.message


def test_normal_notice_serializes(make_membership, fixed_now):
    data = build_notice(make_membership(), fixed_now).to_dict()

    assert data["kind"] == "NORMAL"
    assert data["alert"] == "success"
    assert data["end_date"] == "2026-03-31"
    assert data["remaining_visits"] is None
