"""Dependency container wiring for the Chatter client."""

from collections.abc import Callable
from dataclasses import dataclass

import httpx

from build_chatter.adapters.soap_transport import HttpxSoapTransport
from build_chatter.app_logging import configure_logging
from build_chatter.config import Settings, parse_login_server_url
from build_chatter.domain.models import Credentials
from build_chatter.services.chatter import ChatterClient
from build_chatter.services.session_cache import InMemorySessionCache, SessionCache


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_cache: SessionCache
    transport: HttpxSoapTransport
    chatter_client: ChatterClient
    close_resources: Callable[[], None]


def build_container(
    settings: Settings | None = None,
    http_client: httpx.Client | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    configure_logging()
    resolved_settings = settings or Settings()
    session_cache = InMemorySessionCache()
    transport = HttpxSoapTransport(
        http_client=http_client
        or httpx.Client(timeout=resolved_settings.http_timeout_seconds)
    )
    credentials = Credentials(
        username=resolved_settings.chatter_username,
        password=resolved_settings.chatter_password,
        login_server_url=parse_login_server_url(
            resolved_settings.chatter_login_server_url
        ),
    )
    chatter_client = ChatterClient(
        credentials=credentials,
        transport=transport,
        session_cache=session_cache,
    )

    def close_resources() -> None:
        transport.close()

    return AppContainer(
        settings=resolved_settings,
        session_cache=session_cache,
        transport=transport,
        chatter_client=chatter_client,
        close_resources=close_resources,
    )
