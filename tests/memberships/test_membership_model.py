from __future__ import annotations

from datetime import datetime

import pytest

from src.gym_checkin.gym_checkin.core.enums import MembershipStatus, PlanKind
from src.gym_checkin.gym_checkin.core.exceptions import ValidationError
from src.gym_checkin.gym_checkin.memberships.model import Membership


def _api(**overrides):
    data = {
        "id": "9",
        "type": "MONTHLY",
        "start_date": "2026-02-01",
        "end_date": "2026-03-01",
        "status": "active",
        "price": 35000,
    }
    data.update(overrides)
    return data


def test_monthly_plan_is_uncapped():
    m = Membership.from_api(_api(days_per_week=3))

    assert m.plan_kind == PlanKind.MONTHLY
    assert m.status == MembershipStatus.ACTIVE
    assert m.visits_allowed_per_week is None
    assert m.end_date == datetime(2026, 3, 1)
    assert m.plan_label == "Monthly"


def test_kickboxing_plan_reads_weekly_counts():
    m = Membership.from_api(_api(type="KICKBOXING_3", days_per_week=3, current_week_attendances=1))

    assert m.plan_kind == PlanKind.KICKBOXING_3
    assert m.visits_allowed_per_week == 3
    assert m.visits_used_this_week == 1
    assert m.plan_label == "Kickboxing 3/week"


def test_kickboxing_cap_falls_back_to_type_name():
    m = Membership.from_api(_api(type="KICKBOXING_2"))

    assert m.visits_allowed_per_week == 2
    assert m.visits_used_this_week == 0


def test_unknown_plan_type_keeps_raw_label():
    m = Membership.from_api(_api(type="YOGA_PASS"))

    assert m.plan_kind == PlanKind.OTHER
    assert m.plan_label == "YOGA_PASS"


def test_utc_timestamps_are_accepted():
    m = Membership.from_api(_api(start_date="2026-02-01T00:00:00.000Z", end_date="2026-03-01T00:00:00.000Z"))

    assert m.end_date.tzinfo is None
    assert m.end_date > m.start_date


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError):
        Membership.from_api(_api(status="frozen"))


def test_end_before_start_is_rejected():
    with pytest.raises(ValidationError):
        Membership.from_api(_api(start_date="2026-03-01", end_date="2026-02-01"))


def test_missing_dates_are_rejected():
    with pytest.raises(ValidationError):
        Membership.from_api(_api(end_date=None))
