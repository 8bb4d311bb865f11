from __future__ import annotations

from datetime import datetime, timedelta

from src.gym_checkin.gym_checkin.core.enums import MembershipStatus, NoticeKind, PlanKind
from src.gym_checkin.gym_checkin.memberships.quota import UNLIMITED, MembershipQuotaEngine


def test_capped_plan_with_all_visits_used(make_membership, fixed_now):
    engine = MembershipQuotaEngine()
    m = make_membership(plan_kind=PlanKind.KICKBOXING_2, allowed=2, used=2)

    assert engine.can_check_in_now(m, fixed_now) is False
    assert engine.classify_notice(m, fixed_now) == NoticeKind.CAPPED_PLAN_EXHAUSTED


def test_uncapped_plan_expiring_tomorrow(make_membership, fixed_now):
    engine = MembershipQuotaEngine()
    m = make_membership(end_date=fixed_now + timedelta(days=1))

    assert engine.is_capped_plan(m) is False
    assert engine.classify_notice(m, fixed_now) == NoticeKind.EXPIRING_TODAY_OR_TOMORROW


def test_remaining_visits_never_increase_as_usage_grows(make_membership, fixed_now):
    engine = MembershipQuotaEngine()
    previous = None
    for used in range(0, 6):
        m = make_membership(plan_kind=PlanKind.KICKBOXING_3, allowed=3, used=used)
        remaining = engine.remaining_weekly_visits(m)
        if previous is not None:
            assert remaining <= previous
        if remaining <= 0:
            assert engine.can_check_in_now(m, fixed_now) is False
        previous = remaining


def test_zero_weekly_allowance_is_always_exhausted(make_membership, fixed_now):
    engine = MembershipQuotaEngine()
    m = make_membership(plan_kind=PlanKind.KICKBOXING_2, allowed=0, used=0)

    assert engine.is_capped_plan(m) is True
    assert engine.can_check_in_now(m, fixed_now) is False
    assert engine.classify_notice(m, fixed_now) == NoticeKind.CAPPED_PLAN_EXHAUSTED


def test_uncapped_plan_has_unlimited_visits(make_membership, fixed_now):
    engine = MembershipQuotaEngine()
    m = make_membership()

    assert engine.remaining_weekly_visits(m) is UNLIMITED
    assert engine.can_check_in_now(m, fixed_now) is True
    assert engine.classify_notice(m, fixed_now) == NoticeKind.NORMAL


def test_inactive_membership_cannot_check_in(make_membership, fixed_now):
    engine = MembershipQuotaEngine()

    assert engine.can_check_in_now(make_membership(status=MembershipStatus.EXPIRED), fixed_now) is False
    assert engine.can_check_in_now(make_membership(status=MembershipStatus.PENDING), fixed_now) is False


def test_expiry_notice_wins_over_exhausted_quota(make_membership, fixed_now):
    engine = MembershipQuotaEngine()
    for days in (-3, 0, 1):
        m = make_membership(plan_kind=PlanKind.KICKBOXING_2, allowed=2, used=2, end_date=fixed_now + timedelta(days=days))

        assert engine.classify_notice(m, fixed_now) == NoticeKind.EXPIRING_TODAY_OR_TOMORROW


def test_expiring_soon_window(make_membership, fixed_now):
    engine = MembershipQuotaEngine(expiring_soon_days=7)

    soon = make_membership(plan_kind=PlanKind.KICKBOXING_2, allowed=2, used=0, end_date=fixed_now + timedelta(days=7))
    later = make_membership(plan_kind=PlanKind.KICKBOXING_2, allowed=2, used=0, end_date=fixed_now + timedelta(days=8))

    assert engine.classify_notice(soon, fixed_now) == NoticeKind.EXPIRING_SOON
    assert engine.classify_notice(later, fixed_now) == NoticeKind.CAPPED_PLAN_REMAINING


def test_days_until_expiry_counts_calendar_days(make_membership):
    engine = MembershipQuotaEngine()
    m = make_membership(end_date=datetime(2026, 2, 3, 0, 1))

    assert engine.days_until_expiry(m, datetime(2026, 2, 2, 23, 59)) == 1
    assert engine.days_until_expiry(m, datetime(2026, 2, 3, 23, 0)) == 0
    assert engine.days_until_expiry(m, datetime(2026, 2, 5, 8, 0)) == -2
