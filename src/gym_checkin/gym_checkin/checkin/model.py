from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from ..core.enums import OutcomeKind
from ..memberships.model import Membership
from ..memberships.notice import Notice


@dataclass(frozen=True)
class Accepted:
    snapshot: Optional[Membership]
    notice: Optional[Notice]
    kind: OutcomeKind = OutcomeKind.ACCEPTED

    @property
    def message(self) -> str:
        return self.notice.message if self.notice else "Your attendance has been registered."


@dataclass(frozen=True)
class QuotaExceeded:
    snapshot: Optional[Membership]
    notice: Optional[Notice]
    message: str = "You have used all of your visits for this week."
    pre_checked: bool = False
    kind: OutcomeKind = OutcomeKind.QUOTA_EXCEEDED


@dataclass(frozen=True)
class InvalidPayload:
    reason: str
    message: str = "This code is not a valid attendance code."
    kind: OutcomeKind = OutcomeKind.INVALID_PAYLOAD


@dataclass(frozen=True)
class NetworkOrServerError:
    retryable: bool
    message: str
    status_code: Optional[int] = None
    kind: OutcomeKind = OutcomeKind.NETWORK_OR_SERVER_ERROR


@dataclass(frozen=True)
class AlreadyAuthenticatedMismatch:
    signed_in_user_id: str
    payload_user_id: str
    message: str = "The signed-in member does not match the scanned code."
    kind: OutcomeKind = OutcomeKind.ALREADY_AUTHENTICATED_MISMATCH


CheckInOutcome = Union[Accepted, QuotaExceeded, InvalidPayload, NetworkOrServerError, AlreadyAuthenticatedMismatch]


def outcome_to_dict(outcome: CheckInOutcome) -> dict[str, Any]:
    """Flatten an outcome into the JSON shape the UI consumes."""
    data: dict[str, Any] = {
        "success": isinstance(outcome, Accepted),
        "outcome": outcome.kind.value,
        "message": outcome.message,
    }
    notice = getattr(outcome, "notice", None)
    data["notice"] = notice.to_dict() if notice else None
    if isinstance(outcome, NetworkOrServerError):
        data["retryable"] = outcome.retryable
    if isinstance(outcome, InvalidPayload):
        data["reason"] = outcome.reason
    return data
