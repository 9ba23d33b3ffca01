"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest
from lxml import etree

from build_chatter.adapters.soap_envelopes import SoapRequest
from build_chatter.adapters.soap_parsers import ResponseParser
from build_chatter.adapters.soap_transport import SoapTransport
from build_chatter.config import Settings
from build_chatter.domain.models import Credentials, SaveResult, Session
from build_chatter.services.chatter import ChatterClient
from build_chatter.services.session_cache import InMemorySessionCache

SOAP_NS = "http://schemas.xmlsoap.org/soap/envelope/"
PARTNER_NS = "urn:partner.soap.sforce.com"
LOGIN_URL = "https://login.example.com/services/Soap/u/21.0"
INSTANCE_URL = "https://na1.example.com/services/Soap/u/21.0/00D000000000001"


def soap_envelope(body: str, header: str = "") -> bytes:
    """Wrap body XML in a SOAP response envelope."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<soapenv:Envelope xmlns:soapenv="{SOAP_NS}" xmlns="{PARTNER_NS}">'
        f"{header}<soapenv:Body>{body}</soapenv:Body></soapenv:Envelope>"
    ).encode()


def login_response(
    session_id: str = "SESSION-1",
    server_url: str = INSTANCE_URL,
    user_id: str = "005000000000001",
) -> bytes:
    return soap_envelope(
        "<loginResponse><result>"
        "<metadataServerUrl>https://na1.example.com/services/Soap/m/21.0"
        "</metadataServerUrl>"
        "<passwordExpired>false</passwordExpired>"
        f"<serverUrl>{server_url}</serverUrl>"
        f"<sessionId>{session_id}</sessionId>"
        f"<userId>{user_id}</userId>"
        "</result></loginResponse>"
    )


def save_response(
    operation: str = "create",
    success: str | None = "true",
    record_id: str | None = "0D5000000000001",
    status_code: str | None = None,
    message: str | None = None,
) -> bytes:
    fields = ""
    if status_code is not None or message is not None:
        fields += "<errors>"
        if message is not None:
            fields += f"<message>{message}</message>"
        if status_code is not None:
            fields += f"<statusCode>{status_code}</statusCode>"
        fields += "</errors>"
    if record_id is not None:
        fields += f"<id>{record_id}</id>"
    if success is not None:
        fields += f"<success>{success}</success>"
    return soap_envelope(
        f"<{operation}Response><result>{fields}</result></{operation}Response>"
    )


def fault_response(fault_code: str, fault_string: str) -> bytes:
    return soap_envelope(
        "<soapenv:Fault>"
        f"<faultcode>{fault_code}</faultcode>"
        f"<faultstring>{fault_string}</faultstring>"
        "</soapenv:Fault>"
    )


def request_operation(request: SoapRequest) -> str:
    """Return the local name of the request Body's first child."""
    root = etree.fromstring(request.body)
    body = root.find(f"{{{SOAP_NS}}}Body")
    return etree.QName(body[0]).localname


def request_field(request: SoapRequest, local_name: str) -> str | None:
    """Return the text of the first payload element with the local name."""
    root = etree.fromstring(request.body)
    for element in root.iter():
        qname = etree.QName(element)
        if qname.namespace != SOAP_NS and qname.localname == local_name:
            return element.text
    return None


@dataclass
class RecordedCall:
    url: str
    request: SoapRequest
    parser: ResponseParser

    @property
    def operation(self) -> str:
        return request_operation(self.request)


@dataclass
class FakeSoapTransport(SoapTransport):
    """Fake transport that replays queued results and records calls."""

    responses: list[object] = field(default_factory=list)
    calls: list[RecordedCall] = field(default_factory=list)

    def call(self, url, request, parser):  # type: ignore[no-untyped-def]
        self.calls.append(RecordedCall(url=url, request=request, parser=parser))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def operations(self) -> list[str]:
        return [call.operation for call in self.calls]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        chatter_username="builder@example.com",
        chatter_password="s3cret",
        chatter_login_server_url="https://login.example.com",
    )


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        username="builder@example.com",
        password="s3cret",
        login_server_url="https://login.example.com",
    )


@pytest.fixture
def session() -> Session:
    return Session(
        session_id="SESSION-1",
        instance_url=INSTANCE_URL,
        user_id="005000000000001",
    )


@pytest.fixture
def session_cache() -> InMemorySessionCache:
    return InMemorySessionCache()


@pytest.fixture
def transport() -> FakeSoapTransport:
    return FakeSoapTransport()


@pytest.fixture
def client(
    credentials: Credentials,
    transport: FakeSoapTransport,
    session_cache: InMemorySessionCache,
) -> ChatterClient:
    return ChatterClient(
        credentials=credentials,
        transport=transport,
        session_cache=session_cache,
    )


def saved(record_id: str = "0D5000000000001") -> SaveResult:
    return SaveResult(success=True, id=record_id)
