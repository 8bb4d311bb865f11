from __future__ import annotations

from typing import Optional, Protocol

from .model import Membership


class MembershipRepository(Protocol):
    def get_active_membership(self, user_id: str) -> Optional[Membership]:
        raise NotImplementedError

    def get_weekly_attendances(self, membership_id: str) -> int:
        raise NotImplementedError
