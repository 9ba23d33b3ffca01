"""Chatter client for posting build results over the SOAP partner API."""

import logging
from dataclasses import dataclass

import httpx

from build_chatter.adapters.soap_envelopes import (
    build_delete_request,
    build_feed_post_request,
    build_login_request,
)
from build_chatter.adapters.soap_parsers import LoginResponseParser, SaveResultParser
from build_chatter.adapters.soap_transport import HttpxSoapTransport, SoapTransport
from build_chatter.config import parse_login_server_url
from build_chatter.domain.errors import (
    MalformedResponseError,
    SaveResultError,
    SoapFaultError,
)
from build_chatter.domain.models import Credentials, Session
from build_chatter.services.session_cache import SessionCache

LOGIN_PATH = "/services/Soap/u/21.0"
MAX_BODY_LENGTH = 1000
_TRUNCATED_BODY_LENGTH = 998
_ELLIPSIS = "…"

_logger = logging.getLogger(__name__)


def compose_post_body(title: str, test_health: str | None = None) -> str:
    """Build the feed post body, truncated to fit the Body field."""
    body = title if test_health is None else f"{title}\n{test_health}"
    if len(body) > MAX_BODY_LENGTH:
        body = body[:_TRUNCATED_BODY_LENGTH] + _ELLIPSIS
    return body


@dataclass
class ChatterClient:
    """Handles the few Chatter API calls needed to report builds.

    Sessions come from the shared cache and are passed explicitly through
    each call, so one client can serve concurrent callers.
    """

    credentials: Credentials
    transport: SoapTransport
    session_cache: SessionCache

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        username: str,
        password: str,
        login_server_url: str,
        session_cache: SessionCache,
        timeout_seconds: float = 30.0,
    ) -> "ChatterClient":
        """Create a client with an httpx-backed SOAP transport."""
        credentials = Credentials(
            username=username,
            password=password,
            login_server_url=parse_login_server_url(login_server_url),
        )
        return cls(
            credentials=credentials,
            transport=HttpxSoapTransport.create(timeout_seconds),
            session_cache=session_cache,
        )

    @property
    def login_url(self) -> str:
        return str(httpx.URL(self.credentials.login_server_url).join(LOGIN_PATH))

    def establish_session(self) -> Session:
        """Return the cached session, logging in if there isn't one."""
        session = self.session_cache.get(self.credentials)
        if session is None:
            session = self.perform_login()
        return session

    def perform_login(self) -> Session:
        """Log in, bypassing the cache, and cache the new session."""
        _logger.info(
            "Chatter login: username=%s url=%s",
            self.credentials.username,
            self.login_url,
        )
        session = self.transport.call(
            self.login_url,
            build_login_request(self.credentials),
            LoginResponseParser(),
        )
        self.session_cache.put(self.credentials, session)
        _logger.info(
            "Chatter login succeeded: username=%s instance=%s",
            self.credentials.username,
            session.instance_url,
        )
        return session

    def post_build(
        self,
        record_id: str | None,
        title: str,
        results_url: str,
        test_health: str | None = None,
    ) -> str:
        """Post a build result to a record's feed and return the post id.

        When record_id is empty the post goes to the logged-in user's feed.
        """
        body = compose_post_body(title, test_health)
        return self._post_build(
            record_id, title, results_url, body, retry_on_invalid_session=True
        )

    def _post_build(  # noqa: PLR0913
        self,
        record_id: str | None,
        title: str,
        results_url: str,
        body: str,
        *,
        retry_on_invalid_session: bool,
    ) -> str:
        session = self.establish_session()
        parent_id = record_id or session.user_id
        try:
            return self.create_feed_post(session, parent_id, title, results_url, body)
        except SoapFaultError as exc:
            # a cached session may have expired since it was stored
            if retry_on_invalid_session and exc.is_invalid_session:
                _logger.warning(
                    "Chatter session rejected, logging in again: username=%s fault=%s",
                    self.credentials.username,
                    exc.fault_code,
                )
                self.session_cache.revoke(self.credentials)
                return self._post_build(
                    record_id,
                    title,
                    results_url,
                    body,
                    retry_on_invalid_session=False,
                )
            raise

    def create_feed_post(  # noqa: PLR0913
        self, session: Session, parent_id: str, title: str, link_url: str, body: str
    ) -> str:
        """Create a FeedPost and return its id."""
        result = self.transport.call(
            session.instance_url,
            build_feed_post_request(
                session.session_id, parent_id, title, link_url, body
            ),
            SaveResultParser(),
        )
        if not result.success:
            raise SaveResultError(result)
        if not result.id:
            raise MalformedResponseError(
                "createResponse reported success without an id"
            )
        return result.id

    def delete(self, record_id: str) -> None:
        """Delete a record, such as an earlier feed post."""
        session = self.establish_session()
        # DeleteResult has the same shape as SaveResult
        result = self.transport.call(
            session.instance_url,
            build_delete_request(session.session_id, record_id),
            SaveResultParser(),
        )
        if not result.success:
            raise SaveResultError(result)
