"""Domain models for the Chatter SOAP client."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Credentials:
    """Login identity, also used as the session cache key."""

    username: str
    password: str = field(repr=False)
    login_server_url: str


@dataclass(frozen=True)
class Session:
    """Result of a successful login."""

    session_id: str = field(repr=False)
    instance_url: str
    user_id: str


@dataclass(frozen=True)
class SaveResult:
    """Outcome of a create or delete call."""

    success: bool
    id: str | None = None
    status_code: str | None = None
    message: str | None = None
