from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from ..core.exceptions import CheckInApiError, CheckInTimeoutError

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin wrapper over a ``requests.Session`` for the gym backend.

    Every call carries the bearer token (when one exists) and a bounded
    timeout. Transport failures are raised as CheckInApiError; HTTP error
    statuses are returned to the caller, which knows what they mean.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout)
        self._token = token
        self._session = session or requests.Session()

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def request(self, method: str, path: str, *, json: Any = None) -> tuple[int, dict[str, Any]]:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = self._session.request(
                method,
                url,
                json=json,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as e:
            raise CheckInTimeoutError(f"{method} {path} timed out after {self._timeout:g}s") from e
        except requests.exceptions.RequestException as e:
            raise CheckInApiError(f"Could not reach the server: {e}", retryable=True) from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}
        return response.status_code, body

    def get(self, path: str) -> tuple[int, dict[str, Any]]:
        return self.request("GET", path)

    def post(self, path: str, json: Any) -> tuple[int, dict[str, Any]]:
        return self.request("POST", path, json=json)
