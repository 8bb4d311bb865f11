"""Command line entry point.

    gym-checkin scan [--user ID] [--timeout SECONDS]
    gym-checkin decode IMAGE
    gym-checkin make-qr [--facility ID] [--user ID] [--json] --out FILE
    gym-checkin serve [--host HOST] [--port PORT]
"""
from __future__ import annotations

import argparse
import json
import sys
import threading
from typing import Optional, Sequence

from config import load_settings

from .checkin.model import outcome_to_dict
from .common.datetime_utils import now_local
from .container import build_container
from .core.enums import ScanStatus
from .identity.provider import StaticIdentityProvider
from .main import configure_logging, create_app
from .scanning.qr_codes import (
    decode_image_file,
    encode_as_json,
    encode_as_url,
    facility_intent,
    personal_intent,
    render_qr_png,
)


def _cmd_scan(args, settings) -> int:
    identity = StaticIdentityProvider(args.user) if args.user else None
    container = build_container(settings, identity=identity)
    loop = container.scan_loop
    done = threading.Event()
    result: dict = {}

    def on_status(scan, status):
        if status == ScanStatus.FAILED:
            result["error"] = scan.error
            done.set()

    def on_outcome(scan, outcome):
        result["outcome"] = outcome_to_dict(outcome)
        done.set()

    loop.on_status(on_status)
    loop.on_outcome(on_outcome)

    print("Point the camera at the gym QR code (Ctrl-C to stop)...")
    loop.start()
    try:
        finished = done.wait(timeout=args.timeout)
    except KeyboardInterrupt:
        finished = False
    finally:
        loop.stop()

    if "error" in result:
        print(f"Camera error: {result['error']}", file=sys.stderr)
        return 2
    if not finished or "outcome" not in result:
        print("Scan stopped without a result.")
        return 1
    print(json.dumps(result["outcome"], indent=2, ensure_ascii=False))
    return 0 if result["outcome"]["success"] else 1


def _cmd_decode(args, settings) -> int:
    with open(args.image, "rb") as fh:
        text = decode_image_file(fh)
    if text is None:
        print("No QR code found", file=sys.stderr)
        return 1
    print(text)
    return 0


def _cmd_make_qr(args, settings) -> int:
    facility_id = args.facility or getattr(settings, "FACILITY_ID", "1")
    now = now_local()
    if args.user:
        intent = personal_intent(facility_id, args.user, now=now)
    else:
        intent = facility_intent(facility_id, now=now)
    # Printed entrance codes carry the date only.
    date_only = not args.user

    if args.json:
        text = encode_as_json(intent, date_only=date_only)
    else:
        text = encode_as_url(intent, getattr(settings, "QR_LINK_BASE_URL"), date_only=date_only)

    with open(args.out, "wb") as fh:
        fh.write(render_qr_png(text))
    print(text)
    return 0


def _cmd_serve(args, settings) -> int:
    app = create_app(settings)
    app.run(host=args.host, port=args.port, debug=app.config["DEBUG"], use_reloader=False)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gym-checkin", description="Gym QR attendance check-in")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="scan a QR code with the webcam and check in")
    scan.add_argument("--user", help="member id to check in as (defaults to the API token's user)")
    scan.add_argument("--timeout", type=float, default=None, help="give up after this many seconds")
    scan.set_defaults(func=_cmd_scan)

    decode = sub.add_parser("decode", help="print the QR text found in an image")
    decode.add_argument("image")
    decode.set_defaults(func=_cmd_decode)

    make_qr = sub.add_parser("make-qr", help="render an attendance QR code to PNG")
    make_qr.add_argument("--facility", help="gym id (defaults to FACILITY_ID)")
    make_qr.add_argument("--user", help="member id for a personal code")
    make_qr.add_argument("--json", action="store_true", help="encode raw JSON instead of a URL")
    make_qr.add_argument("--out", required=True)
    make_qr.set_defaults(func=_cmd_make_qr)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=5000)
    serve.set_defaults(func=_cmd_serve)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(settings)
    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
