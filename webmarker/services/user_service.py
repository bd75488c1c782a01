"""Login against the backend and hand the token to the transport."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from webmarker.domain.exceptions import NetworkFailure, NotFound

if TYPE_CHECKING:
    from webmarker.domain.models import LoginUserDto
    from webmarker.services.protocols import BackendTransport
    from webmarker.store.action_creators import ActionCreators

logger = logging.getLogger(__name__)

_TOKEN_KEYS = ("jwt", "token", "access_token", "accessToken")


def _extract_token(data: Any) -> str:
    if isinstance(data, str):
        return data.strip()
    if isinstance(data, dict):
        for key in _TOKEN_KEYS:
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return ""


class UserService:
    base_url = "/users"

    def __init__(self, client: BackendTransport, actions: ActionCreators) -> None:
        self.client = client
        self.actions = actions

    async def login(self, credentials: LoginUserDto) -> str:
        """Exchange credentials for a token.

        The token is opaque here: it is attached to later requests and
        otherwise only tested for truthiness.

        Returns:
            The token, or an empty string when the login failed.
        """
        try:
            data = await self.client.post(
                f"{self.base_url}/login", credentials.model_dump(), operation="login"
            )
        except (NetworkFailure, NotFound) as exc:
            logger.warning(
                "user_login_failed",
                extra={"status_code": getattr(exc, "status_code", None), "error": str(exc)},
            )
            return ""

        token = _extract_token(data)
        if token:
            self.client.set_token(token)
            logger.info("user_logged_in")
        else:
            logger.warning("user_login_empty_token")
        return token

    def logout(self) -> None:
        """Forget the token and drop everything loaded for the previous user."""
        self.client.set_token(None)
        self.actions.reset_state()

    def is_logged_in(self) -> bool:
        return bool(self.client.token)
