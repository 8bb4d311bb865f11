"""Camera scan loop.

States::

    IDLE -> REQUESTING -> ACTIVE -> DETECTED
                 |           |
                 v           v
               FAILED     STOPPED  (stop is accepted from any state)

Polling is cooperative: each poll requests the next frame only after its
own decode finished, and checks for cancellation before doing so.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from itertools import count
from typing import Callable, Optional

from ..camera.source import FrameSource, StreamHandle
from ..checkin.model import CheckInOutcome, NetworkOrServerError
from ..checkin.service import CheckInCoordinator
from ..common.datetime_utils import now_local
from ..common.validators import optional_text
from ..core.enums import ScanStatus
from ..core.exceptions import CameraError, CameraPermissionDeniedError
from ..identity.provider import IdentityProvider
from .decoder import QRDecoder
from .scheduler import Dispatcher, FrameScheduler

logger = logging.getLogger(__name__)

_session_ids = count(1)


@dataclass
class ScanSession:
    session_id: int = field(default_factory=lambda: next(_session_ids))
    status: ScanStatus = ScanStatus.IDLE
    handle: Optional[StreamHandle] = None
    cancelled: bool = False
    attempt_in_flight: bool = False
    polls: int = 0
    error: Optional[str] = None
    error_code: Optional[str] = None
    raw_text: Optional[str] = None
    signed_in_user_id: Optional[str] = None
    outcome: Optional[CheckInOutcome] = None


StatusListener = Callable[[ScanSession, ScanStatus], None]
OutcomeListener = Callable[[ScanSession, CheckInOutcome], None]


def _discard(listeners: list, listener) -> None:
    if listener in listeners:
        listeners.remove(listener)


class ScanLoop:
    """Owns at most one scan session and the camera handle that goes with it."""

    def __init__(
        self,
        source: FrameSource,
        decoder: QRDecoder,
        coordinator: CheckInCoordinator,
        identity: IdentityProvider,
        scheduler: FrameScheduler,
        dispatcher: Dispatcher,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._source = source
        self._decoder = decoder
        self._coordinator = coordinator
        self._identity = identity
        self._scheduler = scheduler
        self._dispatcher = dispatcher
        self._clock = clock
        self._lock = threading.RLock()
        # Held from open() until the handle is owned or released.
        self._open_lock = threading.RLock()
        self._session: Optional[ScanSession] = None
        self._status_listeners: list[StatusListener] = []
        self._outcome_listeners: list[OutcomeListener] = []

    @property
    def session(self) -> Optional[ScanSession]:
        return self._session

    def on_status(self, listener: StatusListener) -> Callable[[], None]:
        self._status_listeners.append(listener)
        return lambda: _discard(self._status_listeners, listener)

    def on_outcome(self, listener: OutcomeListener) -> Callable[[], None]:
        self._outcome_listeners.append(listener)
        return lambda: _discard(self._outcome_listeners, listener)

    def _set_status(self, session: ScanSession, status: ScanStatus) -> None:
        if session.status == status:
            return
        logger.info("Scan session %s: %s -> %s", session.session_id, session.status.value, status.value)
        session.status = status
        for listener in list(self._status_listeners):
            listener(session, status)

    def _release(self, session: ScanSession) -> None:
        handle = session.handle
        session.handle = None
        if handle is not None:
            self._source.close(handle)

    def start(self, signed_in_user_id: Optional[str] = None) -> ScanSession:
        """Open the camera and begin polling.

        ``signed_in_user_id`` pins the member for this session; without it the
        identity provider is asked when a code is detected.
        """
        # One open() at a time: a stopped session still opening keeps the
        # camera until its late handle is released below.
        with self._open_lock:
            with self._lock:
                current = self._session
                if current is not None and not current.cancelled and (
                    current.status in (ScanStatus.REQUESTING, ScanStatus.ACTIVE) or current.attempt_in_flight
                ):
                    return current
                session = ScanSession(signed_in_user_id=optional_text(signed_in_user_id))
                self._session = session
                self._set_status(session, ScanStatus.REQUESTING)

            try:
                handle = self._source.open()
            except CameraError as e:
                code = "PERMISSION_DENIED" if isinstance(e, CameraPermissionDeniedError) else "NO_DEVICE"
                logger.warning("Camera unavailable for scan session %s: %s", session.session_id, e)
                self._fail_open(session, str(e), code)
                return session
            except Exception as e:
                logger.exception("Camera open failed for scan session %s", session.session_id)
                self._fail_open(session, str(e), "OPEN_FAILED")
                return session

            with self._lock:
                session.handle = handle
                if session.cancelled:
                    # stop() arrived while the camera was opening.
                    self._release(session)
                    return session
                self._set_status(session, ScanStatus.ACTIVE)
                self._scheduler.request_frame(lambda: self._poll(session))
            return session

    def _fail_open(self, session: ScanSession, error: str, code: str) -> None:
        with self._lock:
            session.error = error
            session.error_code = code
            if not session.cancelled:
                self._set_status(session, ScanStatus.FAILED)

    def stop(self) -> None:
        with self._lock:
            session = self._session
            if session is None:
                return
            session.cancelled = True
            self._release(session)
            self._set_status(session, ScanStatus.STOPPED)

    def _poll(self, session: ScanSession) -> None:
        with self._lock:
            if session.cancelled or session.status != ScanStatus.ACTIVE or session.handle is None:
                return
            try:
                frame = self._source.next_frame(session.handle)
            except Exception as e:
                logger.error("Camera read failed in scan session %s: %s", session.session_id, e)
                session.error = str(e)
                session.error_code = "READ_FAILED"
                self._release(session)
                self._set_status(session, ScanStatus.FAILED)
                return

            raw_text = self._decoder.decode(frame)
            if raw_text is None:
                session.polls += 1
                logger.debug("Scan session %s: no code in frame %d", session.session_id, session.polls)
                self._scheduler.request_frame(lambda: self._poll(session))
                return

            session.raw_text = raw_text
            self._release(session)
            self._set_status(session, ScanStatus.DETECTED)
            session.attempt_in_flight = True

        logger.info("Scan session %s: code detected, dispatching check-in", session.session_id)
        self._dispatcher.submit(lambda: self._attempt(session, raw_text), lambda outcome: self._finish(session, outcome))

    def _attempt(self, session: ScanSession, raw_text: str) -> CheckInOutcome:
        try:
            user_id = session.signed_in_user_id or self._identity.current_user_id()
            return self._coordinator.process_raw(raw_text, user_id, self._clock())
        except Exception as e:
            logger.exception("Unexpected error while checking in")
            return NetworkOrServerError(retryable=True, message=f"Unexpected error while checking in: {e}")

    def _finish(self, session: ScanSession, outcome: CheckInOutcome) -> None:
        with self._lock:
            session.attempt_in_flight = False
            if session.cancelled:
                logger.info("Scan session %s was stopped; discarding %s", session.session_id, outcome.kind.value)
                return
            session.outcome = outcome
            for listener in list(self._outcome_listeners):
                listener(session, outcome)
