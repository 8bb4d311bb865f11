from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class PayloadError(ValidationError):
    """Raised when a scanned QR payload is not a valid attendance code."""


class NotJsonPayloadError(PayloadError):
    """The scanned text carries no parseable JSON document."""


class WrongKindPayloadError(PayloadError):
    """The JSON document is not tagged as a gym attendance intent."""


class CameraError(DomainError):
    """Raised when the camera stream cannot be opened."""


class CameraPermissionDeniedError(CameraError):
    pass


class NoCameraDeviceError(CameraError):
    pass


class CameraReadError(CameraError):
    """The stream stopped delivering frames (device unplugged, driver crash)."""


class CheckInApiError(DomainError):
    """Transport or server failure while talking to the check-in backend."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        retryable: bool = False,
        body: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable
        self.body = body or {}


class CheckInTimeoutError(CheckInApiError):
    def __init__(self, message: str = "Check-in request timed out"):
        super().__init__(message, retryable=True)


class QuotaRejectedError(CheckInApiError):
    """The backend refused the visit because the weekly quota is used up.

    ``membership`` holds the raw snapshot the backend sent back, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        membership: Optional[dict[str, Any]] = None,
        body: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, status_code=status_code, retryable=False, body=body)
        self.membership = membership
