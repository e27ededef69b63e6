"""OAuth2 client-credentials tokens for the OpenSky API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
import math
from typing import Callable, Optional

import httpx

from planewatch.config import OPENSKY_TOKEN_URL

logger = logging.getLogger("planewatch.auth")

TOKEN_SAFETY_MARGIN = timedelta(seconds=60)


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class TokenState:
    """A bearer token and the instant it stops being used.

    ``expires_at`` already has the safety margin subtracted.
    """

    access_token: str
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at


class AuthTokenManager:
    """Acquire and cache a client-credentials token.

    Without a client id and secret every call returns None. Concurrent callers
    share one in-flight token request.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        client_id: str = "",
        client_secret: str = "",
        token_url: str | None = None,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.http_client = http_client
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url or OPENSKY_TOKEN_URL
        self.clock = clock
        self._state: TokenState | None = None
        self._refresh: asyncio.Task | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id) and bool(self.client_secret)

    def cached_token(self) -> Optional[str]:
        """The current token if it is still usable, without any network call."""

        if self._state is not None and self._state.is_valid(self.clock()):
            return self._state.access_token
        return None

    async def get_token(self) -> Optional[str]:
        if not self.is_configured:
            return None

        token = self.cached_token()
        if token is not None:
            return token

        if self._refresh is None or self._refresh.done():
            self._refresh = asyncio.create_task(self._request_token())
        # shield so one cancelled caller does not cancel the shared request
        return await asyncio.shield(self._refresh)

    async def _request_token(self) -> Optional[str]:
        data = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        try:
            response = await self.http_client.post(self.token_url, data=data)
        except httpx.RequestError as exc:
            logger.warning("Token request failed: %s", exc)
            return None

        if not response.is_success:
            logger.warning("Token endpoint returned HTTP %s", response.status_code)
            return None

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Failed to parse token response: %s", exc)
            return None

        token = payload.get("access_token") if isinstance(payload, dict) else None
        expires_in = payload.get("expires_in") if isinstance(payload, dict) else None
        if (
            not isinstance(token, str)
            or isinstance(expires_in, bool)
            or not isinstance(expires_in, (int, float))
            or not math.isfinite(expires_in)
        ):
            logger.warning("Token response is missing access_token or expires_in")
            return None

        try:
            expires_at = self.clock() + timedelta(seconds=expires_in) - TOKEN_SAFETY_MARGIN
        except (OverflowError, ValueError) as exc:
            logger.warning("Token expires_in %r is out of range: %s", expires_in, exc)
            return None
        self._state = TokenState(access_token=token, expires_at=expires_at)
        logger.info("Obtained OpenSky access token valid until %s", expires_at.isoformat())
        return token


__all__ = ["AuthTokenManager", "TOKEN_SAFETY_MARGIN", "TokenState"]
