"""User-editable display and OpenSky authentication settings."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DisplaySettings(BaseModel):
    """Persisted display flags and upstream credentials."""

    show_callsign: bool = True
    show_route: bool = True
    show_altitude: bool = True
    show_speed: bool = True
    show_distance: bool = True
    show_aircraft_type: bool = True
    show_flight_history: bool = True

    opensky_username: str = ""
    opensky_password: str = ""
    client_id: str = ""
    client_secret: str = ""
    use_basic_auth: bool = False
    use_bearer_token: bool = False

    model_config = ConfigDict(extra="ignore")

    @property
    def is_authenticated(self) -> bool:
        return self.use_basic_auth or self.use_bearer_token

    @property
    def has_basic_credentials(self) -> bool:
        return self.use_basic_auth and bool(self.opensky_username) and bool(self.opensky_password)

    def auth_key(self) -> tuple[bool, bool]:
        """Fields whose change must restart the poll timers."""

        return (self.use_basic_auth, self.use_bearer_token)

    def credentials_key(self) -> tuple[str, str]:
        return (self.client_id, self.client_secret)


class DisplaySettingsUpdate(BaseModel):
    """Partial settings update; omitted fields keep their stored value."""

    show_callsign: Optional[bool] = None
    show_route: Optional[bool] = None
    show_altitude: Optional[bool] = None
    show_speed: Optional[bool] = None
    show_distance: Optional[bool] = None
    show_aircraft_type: Optional[bool] = None
    show_flight_history: Optional[bool] = None

    opensky_username: Optional[str] = None
    opensky_password: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    use_basic_auth: Optional[bool] = None
    use_bearer_token: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")

    def apply(self, current: DisplaySettings) -> DisplaySettings:
        return current.model_copy(update=self.model_dump(exclude_unset=True))


class DisplaySettingsView(BaseModel):
    """Settings as returned over the API, with secrets masked."""

    show_callsign: bool
    show_route: bool
    show_altitude: bool
    show_speed: bool
    show_distance: bool
    show_aircraft_type: bool
    show_flight_history: bool
    opensky_username: str
    client_id: str
    use_basic_auth: bool
    use_bearer_token: bool
    has_password: bool = Field(..., description="Whether a basic-auth password is stored")
    has_client_secret: bool = Field(..., description="Whether a client secret is stored")

    @classmethod
    def from_settings(cls, value: DisplaySettings) -> "DisplaySettingsView":
        return cls(
            **value.model_dump(exclude={"opensky_password", "client_secret"}),
            has_password=bool(value.opensky_password),
            has_client_secret=bool(value.client_secret),
        )


__all__ = ["DisplaySettings", "DisplaySettingsUpdate", "DisplaySettingsView"]
