from __future__ import annotations

import json
from datetime import date, datetime, timedelta, timezone
from urllib.parse import quote

import pytest

from src.gym_checkin.gym_checkin.core.exceptions import (
    NotJsonPayloadError,
    PayloadError,
    WrongKindPayloadError,
)
from src.gym_checkin.gym_checkin.scanning.payload import AttendanceIntent, validate
from src.gym_checkin.gym_checkin.scanning.qr_codes import encode_as_json, encode_as_url


def _url(document: dict) -> str:
    return "https://olimpo.test/api/attendance/check-in?data=" + quote(json.dumps(document), safe="")


def test_url_payload_with_user_yields_intent():
    today = date.today().isoformat()
    raw = _url({"type": "gym_attendance", "gym_id": "1", "user_id": "42", "timestamp": today})

    intent = validate(raw)

    assert intent.facility_id == "1"
    assert intent.subject_user_id == "42"
    assert intent.issued_at == datetime.combine(date.today(), datetime.min.time())


def test_other_type_is_wrong_kind():
    with pytest.raises(WrongKindPayloadError):
        validate('{"type":"other_thing"}')


def test_missing_type_is_wrong_kind():
    with pytest.raises(WrongKindPayloadError):
        validate('{"gym_id": "1"}')


def test_plain_text_is_not_json():
    with pytest.raises(NotJsonPayloadError):
        validate("OFFICE_CHECKIN_SYSTEM")


def test_empty_text_is_not_json():
    with pytest.raises(NotJsonPayloadError):
        validate("   ")


def test_json_array_is_not_an_object():
    with pytest.raises(NotJsonPayloadError):
        validate('[{"type": "gym_attendance"}]')


def test_url_with_garbage_data_param_is_not_json():
    with pytest.raises(NotJsonPayloadError):
        validate("https://olimpo.test/asistencia?data=hello")


def test_raw_json_without_user_is_facility_bound():
    intent = validate('{"type":"gym_attendance","gym_id":"3","timestamp":"2026-02-02T08:15:00.000Z"}')

    assert intent.facility_id == "3"
    assert intent.subject_user_id is None
    assert intent.issued_at is not None
    assert intent.issued_at.hour == 8


def test_numeric_ids_become_strings():
    intent = validate('{"type":"gym_attendance","gym_id":1,"user_id":42}')

    assert intent.facility_id == "1"
    assert intent.subject_user_id == "42"
    assert intent.issued_at is None


def test_double_encoded_url_is_accepted():
    once = quote(json.dumps({"type": "gym_attendance", "gym_id": "1"}), safe="")
    raw = "https://olimpo.test/asistencia?data=" + quote(once, safe="")

    assert validate(raw).facility_id == "1"


def test_missing_gym_id_is_rejected():
    with pytest.raises(PayloadError):
        validate('{"type":"gym_attendance","user_id":"42"}')


def test_bad_timestamp_is_rejected():
    with pytest.raises(PayloadError):
        validate('{"type":"gym_attendance","gym_id":"1","timestamp":"yesterday"}')


def test_raw_json_with_url_characters_in_ids():
    raw = json.dumps({"type": "gym_attendance", "gym_id": "sede?norte&x=1", "user_id": "42?a=b"})

    intent = validate(raw)

    assert intent.facility_id == "sede?norte&x=1"
    assert intent.subject_user_id == "42?a=b"


def test_raw_json_with_embedded_data_param_is_read_as_json():
    raw = json.dumps({"type": "gym_attendance", "gym_id": "x?data=oops"})

    assert validate(raw).facility_id == "x?data=oops"


UTC_MINUS_5 = timezone(timedelta(hours=-5))

ROUND_TRIP_CASES = [
    (AttendanceIntent(facility_id="7", issued_at=datetime(2026, 2, 2, 9, 45, 12), subject_user_id="abc-1"), False),
    (AttendanceIntent(facility_id="7", issued_at=datetime(2026, 2, 2, 9, 45, 12)), False),
    (AttendanceIntent(facility_id="sede?norte", issued_at=datetime(2026, 2, 2, 9, 0), subject_user_id="a&b=c"), False),
    (AttendanceIntent(facility_id="1+1", issued_at=datetime(2026, 2, 2, 9, 0), subject_user_id="100%"), False),
    (AttendanceIntent(facility_id="sede norte", issued_at=datetime(2026, 2, 2, 9, 0), subject_user_id="josé ñandú"), False),
    (AttendanceIntent(facility_id="3", issued_at=datetime(2026, 2, 2, 14, 0, tzinfo=timezone.utc), subject_user_id="9"), False),
    (AttendanceIntent(facility_id="3", issued_at=datetime(2026, 2, 2, 9, 30, tzinfo=UTC_MINUS_5)), False),
    (AttendanceIntent(facility_id="1", issued_at=datetime(2026, 2, 2)), True),
    (AttendanceIntent(facility_id="1", issued_at=datetime(2026, 2, 2), subject_user_id="42"), True),
    (AttendanceIntent(facility_id="1", issued_at=None, subject_user_id="42"), False),
]


@pytest.mark.parametrize("as_url", [False, True], ids=["json", "url"])
@pytest.mark.parametrize("intent, date_only", ROUND_TRIP_CASES)
def test_encoded_intent_validates_back(intent, date_only, as_url):
    if as_url:
        raw = encode_as_url(intent, "https://olimpo.test/api/attendance/check-in", date_only=date_only)
    else:
        raw = encode_as_json(intent, date_only=date_only)

    decoded = validate(raw)

    assert decoded.facility_id == intent.facility_id
    assert decoded.issued_at == intent.issued_at
    assert decoded.subject_user_id == intent.subject_user_id
