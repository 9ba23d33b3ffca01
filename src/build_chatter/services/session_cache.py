"""Session cache shared by Chatter clients."""

import threading
from dataclasses import dataclass
from typing import Protocol

from build_chatter.domain.models import Credentials, Session


class SessionCache(Protocol):
    """Keyed store of logged-in sessions."""

    def get(self, credentials: Credentials) -> Session | None:
        """Return the cached session for the credentials, if present."""

    def put(self, credentials: Credentials, session: Session) -> None:
        """Store a session, replacing any existing entry."""

    def revoke(self, credentials: Credentials) -> None:
        """Drop the cached session for the credentials, if present."""


@dataclass
class InMemorySessionCache(SessionCache):
    """Thread-safe in-memory session cache without expiry."""

    _entries: dict[Credentials, Session]
    _lock: threading.Lock

    def __init__(self) -> None:
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, credentials: Credentials) -> Session | None:
        """Return the cached session, if any."""
        with self._lock:
            return self._entries.get(credentials)

    def put(self, credentials: Credentials, session: Session) -> None:
        """Store a session; last write wins."""
        with self._lock:
            self._entries[credentials] = session

    def revoke(self, credentials: Credentials) -> None:
        """Remove the cached session."""
        with self._lock:
            self._entries.pop(credentials, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
