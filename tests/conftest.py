from __future__ import annotations

from datetime import datetime
from typing import Optional

import pytest

from src.gym_checkin.gym_checkin.core.enums import MembershipStatus, PlanKind
from src.gym_checkin.gym_checkin.memberships.model import Membership


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 18, 30, 0)


@pytest.fixture
def make_membership():
    def _make(
        *,
        plan_kind: PlanKind = PlanKind.MONTHLY,
        status: MembershipStatus = MembershipStatus.ACTIVE,
        end_date: Optional[datetime] = None,
        allowed: Optional[int] = None,
        used: Optional[int] = None,
    ) -> Membership:
        return Membership(
            membership_id="m-1",
            plan_type=plan_kind.value,
            plan_kind=plan_kind,
            start_date=datetime(2026, 1, 1),
            end_date=end_date or datetime(2026, 3, 31),
            status=status,
            visits_allowed_per_week=allowed,
            visits_used_this_week=used,
        )

    return _make


class FakeResponse:
    def __init__(self, status_code: int, body=None):
        self.status_code = status_code
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeSession:
    """Stands in for requests.Session; replies are queued per (method, path suffix)."""

    def __init__(self, replies: Optional[dict] = None):
        self.replies = dict(replies or {})
        self.calls: list[dict] = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "headers": headers, "timeout": timeout})
        for (m, suffix), reply in self.replies.items():
            if m == method and url.endswith(suffix):
                if isinstance(reply, Exception):
                    raise reply
                return reply
        return FakeResponse(404, {"message": "not found"})


@pytest.fixture
def fake_session_cls():
    return FakeSession


@pytest.fixture
def fake_response_cls():
    return FakeResponse
