from __future__ import annotations

import io
import json
from datetime import datetime
from typing import Any, BinaryIO, Optional
from urllib.parse import quote

import qrcode
from PIL import Image
from pyzbar.pyzbar import ZBarSymbol
from pyzbar.pyzbar import decode as pyzbar_decode

from ..core.constants import ATTENDANCE_KIND, QR_DATA_PARAM
from .payload import AttendanceIntent


def format_issued_at(issued_at: datetime, *, date_only: bool = False) -> str:
    if date_only:
        return issued_at.strftime("%Y-%m-%d")
    return issued_at.isoformat()


def build_attendance_payload(intent: AttendanceIntent, *, date_only: bool = False) -> dict[str, Any]:
    payload: dict[str, Any] = {"type": ATTENDANCE_KIND, "gym_id": intent.facility_id}
    if intent.subject_user_id is not None:
        payload["user_id"] = intent.subject_user_id
    if intent.issued_at is not None:
        payload["timestamp"] = format_issued_at(intent.issued_at, date_only=date_only)
    return payload


def encode_as_json(intent: AttendanceIntent, *, date_only: bool = False) -> str:
    return json.dumps(build_attendance_payload(intent, date_only=date_only), separators=(",", ":"))


def encode_as_url(intent: AttendanceIntent, base_url: str, *, date_only: bool = False) -> str:
    encoded = quote(encode_as_json(intent, date_only=date_only), safe="")
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}{QR_DATA_PARAM}={encoded}"


def facility_intent(facility_id: str, *, now: datetime) -> AttendanceIntent:
    """Printed gym entrance code: facility only, date granularity."""
    return AttendanceIntent(facility_id=str(facility_id), issued_at=datetime.combine(now.date(), datetime.min.time()))


def personal_intent(facility_id: str, user_id: str, *, now: datetime) -> AttendanceIntent:
    """Code shown on a member's phone: carries the member id and the full timestamp."""
    return AttendanceIntent(facility_id=str(facility_id), issued_at=now, subject_user_id=str(user_id))


def render_qr_png(text: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(text)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_image_file(stream: BinaryIO) -> Optional[str]:
    """Decode the first QR code in an uploaded still image."""
    img = Image.open(stream).convert("RGB")
    decoded = pyzbar_decode(img, symbols=[ZBarSymbol.QRCODE])
    if not decoded:
        return None
    return decoded[0].data.decode("utf-8").strip()
