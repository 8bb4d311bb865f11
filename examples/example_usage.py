"""Ví dụ: dùng service layer (không qua Flask hay camera).

Validate a scanned code and print the check-in outcome. Point API_BASE_URL and
API_TOKEN at a running backend first.
"""

import json

from config import load_settings

from src.gym_checkin.gym_checkin.checkin.model import outcome_to_dict
from src.gym_checkin.gym_checkin.container import build_container

SCANNED = '{"type":"gym_attendance","gym_id":"1","timestamp":"2026-02-02"}'


def main():
    settings = load_settings()
    container = build_container(settings)
    outcome = container.coordinator.process_raw(SCANNED, container.identity.current_user_id())
    print(json.dumps(outcome_to_dict(outcome), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
