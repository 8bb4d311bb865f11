from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import requests

from .camera.opencv_source import CameraConfig, OpenCVFrameSource
from .checkin.client import HttpCheckInClient
from .checkin.service import CheckInCoordinator
from .common.api_client import ApiClient
from .core.constants import (
    DEFAULT_API_TIMEOUT_SECONDS,
    DEFAULT_CAMERA_HEIGHT,
    DEFAULT_CAMERA_WIDTH,
    DEFAULT_EXPIRING_SOON_DAYS,
    DEFAULT_FACILITY_ID,
    DEFAULT_SCAN_FPS,
)
from .identity.provider import ApiIdentityProvider, IdentityProvider
from .memberships.http_membership_repository import HttpMembershipRepository
from .memberships.quota import MembershipQuotaEngine
from .scanning.decoder import PyzbarQRDecoder
from .scanning.loop import ScanLoop
from .scanning.scheduler import ThreadDispatcher, IntervalFrameScheduler


@dataclass(frozen=True)
class Container:
    api: ApiClient

    checkin_client: HttpCheckInClient
    memberships_repo: HttpMembershipRepository
    identity: IdentityProvider

    quota_engine: MembershipQuotaEngine
    coordinator: CheckInCoordinator
    scan_loop: ScanLoop

    facility_id: str
    qr_link_base_url: str


def build_container(
    settings: Any,
    *,
    identity: Optional[IdentityProvider] = None,
    session: Optional[requests.Session] = None,
) -> Container:
    api_base_url = str(getattr(settings, "API_BASE_URL")).rstrip("/")
    api = ApiClient(
        api_base_url,
        timeout=float(getattr(settings, "API_TIMEOUT_SECONDS", DEFAULT_API_TIMEOUT_SECONDS)),
        token=getattr(settings, "API_TOKEN", None),
        session=session,
    )

    checkin_client = HttpCheckInClient(api)
    memberships_repo = HttpMembershipRepository(api)
    identity = identity or ApiIdentityProvider(api)

    quota_engine = MembershipQuotaEngine(
        expiring_soon_days=int(getattr(settings, "EXPIRING_SOON_DAYS", DEFAULT_EXPIRING_SOON_DAYS))
    )
    coordinator = CheckInCoordinator(
        checkin_client,
        engine=quota_engine,
        memberships=memberships_repo,
        quota_precheck=bool(getattr(settings, "QUOTA_PRECHECK", False)),
    )

    source = OpenCVFrameSource(
        CameraConfig(
            device_id=int(getattr(settings, "CAMERA_DEVICE", 0)),
            width=int(getattr(settings, "CAMERA_WIDTH", DEFAULT_CAMERA_WIDTH)),
            height=int(getattr(settings, "CAMERA_HEIGHT", DEFAULT_CAMERA_HEIGHT)),
        )
    )
    scan_loop = ScanLoop(
        source,
        PyzbarQRDecoder(),
        coordinator,
        identity,
        IntervalFrameScheduler(int(getattr(settings, "SCAN_FPS", DEFAULT_SCAN_FPS))),
        ThreadDispatcher(),
    )

    return Container(
        api=api,
        checkin_client=checkin_client,
        memberships_repo=memberships_repo,
        identity=identity,
        quota_engine=quota_engine,
        coordinator=coordinator,
        scan_loop=scan_loop,
        facility_id=str(getattr(settings, "FACILITY_ID", DEFAULT_FACILITY_ID)),
        qr_link_base_url=str(getattr(settings, "QR_LINK_BASE_URL", f"{api_base_url}/attendance/check-in")),
    )
