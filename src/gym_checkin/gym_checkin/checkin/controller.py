from __future__ import annotations

import io
import logging
from dataclasses import replace
from typing import Optional

from flask import Flask, jsonify, request, send_file, session

from .model import (
    Accepted,
    AlreadyAuthenticatedMismatch,
    CheckInOutcome,
    InvalidPayload,
    NetworkOrServerError,
    QuotaExceeded,
    outcome_to_dict,
)
from ..common.datetime_utils import now_local
from ..container import Container
from ..core.exceptions import CheckInApiError, ValidationError
from ..memberships.notice import build_notice
from ..scanning.loop import ScanSession
from ..scanning.qr_codes import decode_image_file, encode_as_url, facility_intent, personal_intent, render_qr_png

logger = logging.getLogger(__name__)


def _status_code(outcome: CheckInOutcome) -> int:
    if isinstance(outcome, Accepted):
        return 200
    if isinstance(outcome, QuotaExceeded):
        return 409
    if isinstance(outcome, InvalidPayload):
        return 400
    if isinstance(outcome, AlreadyAuthenticatedMismatch):
        return 403
    if isinstance(outcome, NetworkOrServerError) and outcome.retryable:
        return 503
    return 502


def _session_to_dict(scan: Optional[ScanSession]) -> dict:
    if scan is None:
        return {"status": "IDLE", "session_id": None, "outcome": None}
    return {
        "session_id": scan.session_id,
        "status": scan.status.value,
        "polls": scan.polls,
        "error": scan.error,
        "error_code": scan.error_code,
        "outcome": outcome_to_dict(scan.outcome) if scan.outcome else None,
    }


def register(app: Flask, container: Container) -> None:
    def session_user_id() -> Optional[str]:
        user_id = session.get("user_id")
        return str(user_id) if user_id is not None else None

    def current_user_id() -> Optional[str]:
        return session_user_id() or container.identity.current_user_id()

    def _respond(outcome: CheckInOutcome):
        return jsonify(outcome_to_dict(outcome)), _status_code(outcome)

    @app.route("/api/checkin/qr", methods=["POST"], endpoint="api_checkin_qr")
    def api_checkin_qr():
        """Check in with QR text already decoded by a browser-side scanner."""
        data = request.get_json(silent=True) or {}
        qr_code = str(data.get("qr_code", "")).strip()
        if not qr_code:
            return jsonify({"success": False, "message": "QR code must not be empty"}), 400

        try:
            outcome = container.coordinator.process_raw(qr_code, current_user_id(), now_local())
        except Exception:
            logger.exception("QR check-in failed")
            return jsonify({"success": False, "message": "System error while checking in"}), 500
        return _respond(outcome)

    @app.route("/api/checkin/qr/image", methods=["POST"], endpoint="api_checkin_qr_image")
    def api_checkin_qr_image():
        """Accept an uploaded photo, decode the QR code and check in."""
        if "image" not in request.files:
            return jsonify({"success": False, "message": "Missing image file"}), 400

        try:
            scanned_code = decode_image_file(request.files["image"].stream)
        except (OSError, ValueError):
            return jsonify({"success": False, "message": "The uploaded file is not a readable image"}), 400
        if not scanned_code:
            return jsonify({"success": False, "message": "No QR code found in the image"}), 400

        try:
            outcome = container.coordinator.process_raw(scanned_code, current_user_id(), now_local())
        except Exception:
            logger.exception("QR image check-in failed")
            return jsonify({"success": False, "message": "System error while checking in"}), 500
        return _respond(outcome)

    @app.route("/api/scan/start", methods=["POST"], endpoint="api_scan_start")
    def api_scan_start():
        # The camera poll runs outside this request, so pin the session user now.
        scan = container.scan_loop.start(signed_in_user_id=session_user_id())
        return jsonify(_session_to_dict(scan)), 200

    @app.route("/api/scan/stop", methods=["POST"], endpoint="api_scan_stop")
    def api_scan_stop():
        container.scan_loop.stop()
        return jsonify(_session_to_dict(container.scan_loop.session)), 200

    @app.route("/api/scan/status", methods=["GET"], endpoint="api_scan_status")
    def api_scan_status():
        return jsonify(_session_to_dict(container.scan_loop.session)), 200

    @app.route("/api/membership/notice", methods=["GET"], endpoint="api_membership_notice")
    def api_membership_notice():
        """Current member's plan summary (days to expiry, visits left this week)."""
        user_id = current_user_id()
        if not user_id:
            return jsonify({"success": False, "message": "Please sign in"}), 401

        try:
            membership = container.memberships_repo.get_active_membership(user_id)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 502
        except CheckInApiError as e:
            return jsonify({"success": False, "message": str(e)}), 503 if e.retryable else 502
        if membership is None:
            return jsonify({"success": False, "message": "No active membership"}), 404

        if container.quota_engine.is_capped_plan(membership):
            used = container.memberships_repo.get_weekly_attendances(membership.membership_id)
            membership = replace(membership, visits_used_this_week=used)

        notice = build_notice(membership, now_local(), container.quota_engine)
        return jsonify({"success": True, "notice": notice.to_dict()}), 200

    def _png(text: str):
        buf = io.BytesIO(render_qr_png(text))
        return send_file(buf, mimetype="image/png")

    @app.route("/qr/facility.png", endpoint="qr_facility_image")
    def qr_facility_image():
        """Printable entrance code for this gym."""
        facility_id = request.args.get("gym_id") or container.facility_id
        intent = facility_intent(facility_id, now=now_local())
        return _png(encode_as_url(intent, container.qr_link_base_url, date_only=True))

    @app.route("/qr/me.png", endpoint="qr_personal_image")
    def qr_personal_image():
        """Personal code shown on the member's phone."""
        user_id = current_user_id()
        if not user_id:
            return jsonify({"success": False, "message": "Please sign in"}), 401
        intent = personal_intent(container.facility_id, user_id, now=now_local())
        return _png(encode_as_url(intent, container.qr_link_base_url))
