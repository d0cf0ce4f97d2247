"""Construction-time configuration for the reservation engine and dispatcher."""

import enum
from dataclasses import dataclass


class AuthorizationMode(str, enum.Enum):
    """Which kind of credential a booking request must carry."""

    DIRECT = "direct"  # raw applicant id
    TOKEN = "token"  # property-scoped access token


class ReleasePolicy(str, enum.Enum):
    """How many prior bookings of the same applicant/property are freed on rebooking."""

    RELEASE_ONE = "release_one"
    RELEASE_ALL = "release_all"


@dataclass(frozen=True)
class ReservationConfig:
    """Policies the engine and resolver are parameterised with."""

    authorization_mode: AuthorizationMode = AuthorizationMode.TOKEN
    release_policy: ReleasePolicy = ReleasePolicy.RELEASE_ALL
    allow_token_reuse: bool = True
    timezone: str = "Europe/Prague"
    time_format: str = "%d/%m/%Y %H:%M"


@dataclass(frozen=True)
class SmtpConfig:
    """SMTP transport endpoint and credentials."""

    host: str
    port: int = 587
    user: str = ""
    password: str = ""
    sender: str = ""
    starttls: bool = True
    timeout: float = 10.0
