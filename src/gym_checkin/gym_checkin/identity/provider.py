from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ..common.api_client import ApiClient
from ..common.validators import optional_text
from ..core.exceptions import CheckInApiError

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    def current_user_id(self) -> Optional[str]:
        """Signed-in member id, or None for the anonymous (personal-code) flow."""
        raise NotImplementedError


@dataclass
class StaticIdentityProvider:
    user_id: Optional[str] = None

    def current_user_id(self) -> Optional[str]:
        return optional_text(self.user_id)


class ApiIdentityProvider:
    """Resolve the signed-in member from the backend's ``auth/me``.

    A missing or rejected token means "nobody is signed in".
    """

    def __init__(self, api: ApiClient):
        self._api = api

    def current_user_id(self) -> Optional[str]:
        if not self._api.has_token:
            return None
        try:
            status, body = self._api.get("auth/me")
        except CheckInApiError as e:
            logger.warning("Could not resolve the signed-in user: %s", e)
            return None
        if status == 401:
            self._api.set_token(None)
            return None
        if status >= 400:
            return None
        user = body.get("user") or (body.get("data") or {}).get("user") or {}
        return optional_text(user.get("id"))
