"""SOAP over HTTP transport."""

import logging
from dataclasses import dataclass
from typing import Protocol, TypeVar

import httpx

from build_chatter.adapters.soap_envelopes import SoapRequest
from build_chatter.adapters.soap_parsers import (
    ResponseParser,
    XmlEventReader,
    read_envelope,
)
from build_chatter.domain.errors import TransportError

# 500 is how SOAP faults are delivered.
_SOAP_STATUS_CODES = frozenset({200, 500})

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class SoapTransport(Protocol):
    """Interface for issuing SOAP requests."""

    def call(self, url: str, request: SoapRequest, parser: ResponseParser[T]) -> T:
        """POST a SOAP request and parse the response body."""


@dataclass
class HttpxSoapTransport(SoapTransport):
    """SOAP transport backed by an httpx client."""

    http_client: httpx.Client

    @classmethod
    def create(cls, timeout_seconds: float = 30.0) -> "HttpxSoapTransport":
        """Create a transport with a managed httpx session."""
        return cls(http_client=httpx.Client(timeout=timeout_seconds))

    def call(self, url: str, request: SoapRequest, parser: ResponseParser[T]) -> T:
        """POST the envelope and stream the response through the parser."""
        headers = {"SOAPAction": '""', "Content-Type": request.content_type}
        with self.http_client.stream(
            "POST", url, content=request.body, headers=headers
        ) as response:
            _logger.debug("SOAP request: url=%s status=%s", url, response.status_code)
            if response.status_code not in _SOAP_STATUS_CODES:
                raise TransportError(url, response.status_code)
            reader = XmlEventReader(response.iter_bytes())
            return read_envelope(reader, parser)

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.http_client.close()
