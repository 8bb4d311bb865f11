from __future__ import annotations

from enum import Enum


class MembershipStatus(str, Enum):
    """Trạng thái gói tập do backend tính sẵn."""

    ACTIVE = "active"
    EXPIRED = "expired"
    PENDING = "pending"


class PlanKind(str, Enum):
    """Loại gói tập; chỉ các gói kickboxing bị giới hạn số buổi/tuần."""

    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUAL = "ANNUAL"
    CUSTOM = "CUSTOM"
    MULTISPORT = "MULTISPORT"
    KICKBOXING_2 = "KICKBOXING_2"
    KICKBOXING_3 = "KICKBOXING_3"
    OTHER = "OTHER"


class ScanStatus(str, Enum):
    IDLE = "IDLE"
    REQUESTING = "REQUESTING"
    ACTIVE = "ACTIVE"
    DETECTED = "DETECTED"
    STOPPED = "STOPPED"
    FAILED = "FAILED"


class NoticeKind(str, Enum):
    """Loại thông báo hiển thị sau khi check-in."""

    EXPIRING_TODAY_OR_TOMORROW = "EXPIRING_TODAY_OR_TOMORROW"
    EXPIRING_SOON = "EXPIRING_SOON"
    CAPPED_PLAN_REMAINING = "CAPPED_PLAN_REMAINING"
    CAPPED_PLAN_EXHAUSTED = "CAPPED_PLAN_EXHAUSTED"
    NORMAL = "NORMAL"


class AlertType(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"


class OutcomeKind(str, Enum):
    ACCEPTED = "ACCEPTED"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    NETWORK_OR_SERVER_ERROR = "NETWORK_OR_SERVER_ERROR"
    ALREADY_AUTHENTICATED_MISMATCH = "ALREADY_AUTHENTICATED_MISMATCH"
