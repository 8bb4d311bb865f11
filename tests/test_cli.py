from __future__ import annotations

import json

import pytest

from src.gym_checkin.gym_checkin.cli import main
from src.gym_checkin.gym_checkin.scanning.payload import validate


@pytest.fixture(autouse=True)
def testing_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")


def test_make_qr_then_decode_facility_code(tmp_path, capsys):
    out = tmp_path / "gym.png"

    assert main(["make-qr", "--facility", "3", "--json", "--out", str(out)]) == 0
    printed = capsys.readouterr().out.strip()
    assert json.loads(printed)["gym_id"] == "3"
    assert "user_id" not in json.loads(printed)

    assert main(["decode", str(out)]) == 0
    decoded = capsys.readouterr().out.strip()
    intent = validate(decoded)
    assert intent.facility_id == "3"
    assert intent.subject_user_id is None


def test_make_qr_personal_url(tmp_path, capsys):
    out = tmp_path / "me.png"

    assert main(["make-qr", "--user", "42", "--out", str(out)]) == 0
    text = capsys.readouterr().out.strip()

    assert text.startswith("http://backend.test/api/attendance/check-in?data=")
    intent = validate(text)
    assert intent.facility_id == "1"
    assert intent.subject_user_id == "42"


def test_decode_image_without_code(tmp_path, capsys):
    from PIL import Image

    blank = tmp_path / "blank.png"
    Image.new("RGB", (64, 64), "white").save(blank)

    assert main(["decode", str(blank)]) == 1
