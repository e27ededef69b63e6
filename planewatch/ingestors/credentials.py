"""Authorization applied to OpenSky data requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RequestCredentials:
    """Bearer token if present, otherwise HTTP Basic if configured, otherwise none."""

    bearer_token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def scheme(self) -> str:
        if self.bearer_token:
            return "bearer"
        if self.username and self.password:
            return "basic"
        return "anonymous"

    def headers(self) -> dict[str, str]:
        if self.bearer_token:
            return {"Authorization": f"Bearer {self.bearer_token}"}
        return {}

    def auth(self) -> Optional[tuple[str, str]]:
        if not self.bearer_token and self.username and self.password:
            return (self.username, self.password)
        return None


ANONYMOUS = RequestCredentials()

__all__ = ["ANONYMOUS", "RequestCredentials"]
