from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import parse_iso_instant, to_local_naive
from ..common.validators import require_non_empty
from ..core.enums import MembershipStatus, PlanKind
from ..core.exceptions import ValidationError

_PLAN_LABELS = {
    PlanKind.MONTHLY: "Monthly",
    PlanKind.QUARTERLY: "Quarterly",
    PlanKind.ANNUAL: "Annual",
    PlanKind.KICKBOXING_2: "Kickboxing 2/week",
    PlanKind.KICKBOXING_3: "Kickboxing 3/week",
}

_WEEKLY_CAP_IN_TYPE = re.compile(r"KICKBOXING[_-]?(\d+)")


@dataclass(frozen=True)
class Membership:
    """Thực thể miền (domain): gói tập của hội viên (read-only snapshot từ backend)."""

    membership_id: str
    plan_type: str
    plan_kind: PlanKind
    start_date: datetime
    end_date: datetime
    status: MembershipStatus
    visits_allowed_per_week: Optional[int] = None
    visits_used_this_week: Optional[int] = None
    price: Optional[float] = None

    @property
    def plan_label(self) -> str:
        return _PLAN_LABELS.get(self.plan_kind, self.plan_type)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Membership":
        """Build a snapshot from the backend JSON shape."""
        if not isinstance(data, dict):
            raise ValidationError("Membership payload must be an object")

        plan_type = require_non_empty(data.get("type"), "Membership type").upper()
        try:
            plan_kind = PlanKind(plan_type)
        except ValueError:
            plan_kind = PlanKind.OTHER

        try:
            status = MembershipStatus(str(data.get("status", "")).lower())
        except ValueError:
            raise ValidationError(f"Unknown membership status: {data.get('status')!r}")

        try:
            start_date = parse_iso_instant(data.get("start_date"))
            end_date = parse_iso_instant(data.get("end_date"))
        except ValueError:
            raise ValidationError("Membership dates must be ISO-8601")
        if start_date is None or end_date is None:
            raise ValidationError("Membership dates are required")
        start_date, end_date = to_local_naive(start_date), to_local_naive(end_date)
        if end_date < start_date:
            raise ValidationError("Membership end_date is before start_date")

        allowed: Optional[int] = None
        used: Optional[int] = None
        cap_match = _WEEKLY_CAP_IN_TYPE.search(plan_type)
        if cap_match:
            days = data.get("days_per_week")
            try:
                allowed = int(days) if days is not None else int(cap_match.group(1))
                used = int(data.get("current_week_attendances") or 0)
            except (TypeError, ValueError):
                raise ValidationError("Weekly visit counts must be whole numbers")

        price = data.get("price")
        return cls(
            membership_id=str(data.get("id", "")),
            plan_type=plan_type,
            plan_kind=plan_kind,
            start_date=start_date,
            end_date=end_date,
            status=status,
            visits_allowed_per_week=allowed,
            visits_used_this_week=used,
            price=float(price) if price is not None else None,
        )
