"""Parsing and validation of scanned attendance QR payloads.

Two wire forms are accepted:

* a URL whose query string carries ``data=<percent-encoded JSON>``
* the JSON document itself as the QR text

The JSON document looks like
``{"type": "gym_attendance", "gym_id": "1", "user_id": "42", "timestamp": "2026-10-18"}``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from urllib.parse import parse_qs, unquote, urlsplit

from ..common.datetime_utils import parse_iso_instant
from ..common.validators import optional_text
from ..core.constants import ATTENDANCE_KIND, QR_DATA_PARAM
from ..core.exceptions import NotJsonPayloadError, PayloadError, WrongKindPayloadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceIntent:
    """Thực thể miền (domain): ý định điểm danh đọc được từ mã QR."""

    facility_id: str
    issued_at: Optional[datetime] = None
    subject_user_id: Optional[str] = None
    kind: str = ATTENDANCE_KIND


def _loads_object(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def _query_document(raw: str) -> Optional[str]:
    """Return the JSON text carried in a URL query string, if any."""
    if "?" not in raw:
        return None
    query = urlsplit(raw).query or raw.split("?", 1)[1]
    params = parse_qs(query, keep_blank_values=True)
    if QR_DATA_PARAM in params:
        return params[QR_DATA_PARAM][0]
    if len(params) == 1:
        return next(iter(params.values()))[0]
    return None


def extract_document(raw_text: str) -> dict[str, Any]:
    """Step 1 of validation: turn raw QR text into a JSON object."""
    raw = (raw_text or "").strip()
    if not raw:
        raise NotJsonPayloadError("Empty QR payload")

    # Raw JSON first; ids may contain "?", "&" or "=".
    document = _loads_object(raw)
    if not isinstance(document, dict):
        carried = _query_document(raw)
        if carried is not None:
            document = _loads_object(carried)
            if document is None:
                # Some generators percent-encode twice.
                document = _loads_object(unquote(carried))

    if not isinstance(document, dict):
        raise NotJsonPayloadError("QR payload does not contain a JSON object")
    return document


def validate(raw_text: str) -> AttendanceIntent:
    """Validate decoded QR text and build an AttendanceIntent.

    Raises NotJsonPayloadError, WrongKindPayloadError or PayloadError.
    """
    document = extract_document(raw_text)

    kind = document.get("type")
    if kind != ATTENDANCE_KIND:
        raise WrongKindPayloadError(f"Unexpected QR payload type: {kind!r}")

    facility_id = optional_text(document.get("gym_id"))
    if facility_id is None:
        raise PayloadError("QR payload has no gym_id")

    try:
        issued_at = parse_iso_instant(document.get("timestamp"))
    except ValueError as e:
        raise PayloadError("QR payload timestamp is not ISO-8601") from e

    intent = AttendanceIntent(
        facility_id=facility_id,
        issued_at=issued_at,
        subject_user_id=optional_text(document.get("user_id")),
    )
    logger.debug("Validated attendance intent for facility %s", intent.facility_id)
    return intent
