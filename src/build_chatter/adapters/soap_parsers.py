"""Streaming parsers for SOAP responses.

Responses are read with a forward-only pull reader over lxml parser events.
Elements are cleared once they have been passed, so a response is never held
as a full tree. Parsers make a single linear pass: fields may appear in any
order, unknown elements are skipped, and nothing is looked up twice.
"""

from collections.abc import Iterable, Iterator
from typing import Protocol, TypeVar

from lxml import etree

from build_chatter.adapters.soap_envelopes import PARTNER_NS, SOAP_NS
from build_chatter.domain.errors import MalformedResponseError, SoapFaultError
from build_chatter.domain.models import SaveResult, Session

START_DOCUMENT = "start-document"
START_ELEMENT = "start"
END_ELEMENT = "end"
END_DOCUMENT = "end-document"

_SAVE_RESULT_FIELDS = frozenset({"id", "statusCode", "message", "success"})
_LOGIN_FIELDS = frozenset({"sessionId", "serverUrl", "userId"})
_FAULT_FIELDS = frozenset({"faultcode", "faultstring"})

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


def _pull_events(
    chunks: Iterable[bytes],
) -> Iterator[tuple[str, etree._Element]]:
    parser = etree.XMLPullParser(
        events=(START_ELEMENT, END_ELEMENT),
        resolve_entities=False,
        no_network=True,
    )
    for chunk in chunks:
        parser.feed(chunk)
        yield from parser.read_events()
    parser.close()
    yield from parser.read_events()


class XmlEventReader:
    """Forward-only cursor over start/end element events."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._events = _pull_events(chunks)
        self._passed: etree._Element | None = None
        self.event = START_DOCUMENT
        self.element: etree._Element | None = None

    def next(self) -> str:
        """Advance to the next event and return its type."""
        self._release_passed()
        if self.event == END_DOCUMENT:
            return self.event
        try:
            event, element = next(self._events)
        except StopIteration:
            self.event, self.element = END_DOCUMENT, None
            return self.event
        except etree.XMLSyntaxError as exc:
            raise MalformedResponseError(
                f"response is not well formed: {exc}"
            ) from exc
        self.event, self.element = event, element
        if event == END_ELEMENT:
            self._passed = element
        return event

    def next_tag(self) -> str:
        """Advance to the next start or end element."""
        if self.next() == END_DOCUMENT:
            raise MalformedResponseError("unexpected end of document")
        return self.event

    @property
    def local_name(self) -> str:
        if self.element is None:
            return ""
        return etree.QName(self.element).localname

    @property
    def namespace(self) -> str | None:
        if self.element is None:
            return None
        return etree.QName(self.element).namespace

    def require_start(self, namespace: str, local_name: str | None = None) -> None:
        """Fail unless positioned at the start of the named element."""
        if (
            self.event != START_ELEMENT
            or self.namespace != namespace
            or (local_name is not None and self.local_name != local_name)
        ):
            expected = f"{{{namespace}}}{local_name or '*'}"
            raise MalformedResponseError(
                f"expected start of {expected} but found {self.event} "
                f"{{{self.namespace}}}{self.local_name}"
            )

    def element_text(self) -> str:
        """Read the text of a text-only element, leaving the reader at its end."""
        if self.event != START_ELEMENT:
            raise MalformedResponseError("element text requested outside an element")
        element, name = self.element, self.local_name
        if self.next_tag() == START_ELEMENT:
            raise MalformedResponseError(f"expected text only in element {name!r}")
        return element.text or ""

    def skip_element(self) -> None:
        """Skip the current element and all of its children."""
        depth = 1
        while depth:
            if self.next_tag() == START_ELEMENT:
                depth += 1
            else:
                depth -= 1

    def drain(self) -> None:
        """Consume the rest of the document."""
        while self.next() != END_DOCUMENT:
            pass

    def _release_passed(self) -> None:
        element, self._passed = self._passed, None
        if element is None:
            return
        element.clear(keep_tail=True)
        parent = element.getparent()
        if parent is not None:
            while element.getprevious() is not None:
                del parent[0]


class ResponseParser(Protocol[T_co]):
    """Parses the first child of a SOAP Body into a typed result."""

    def parse(self, reader: XmlEventReader) -> T_co:
        """Parse a response; the reader is at the first child of Body."""


def _scan_fields(reader: XmlEventReader, names: frozenset[str]) -> dict[str, str]:
    """Collect the text of named elements until the end of the document."""
    values: dict[str, str] = {}
    while reader.next() != END_DOCUMENT:
        if reader.event == START_ELEMENT and reader.local_name in names:
            name = reader.local_name
            values[name] = reader.element_text()
    return values


def parse_success(value: str | None) -> bool:
    """Interpret an xsd:boolean success flag."""
    if value is None:
        return False
    return value == "1" or value.lower() == "true"


class SaveResultParser(ResponseParser[SaveResult]):
    """Parses createResponse and deleteResponse bodies."""

    def parse(self, reader: XmlEventReader) -> SaveResult:
        reader.require_start(PARTNER_NS)
        if not reader.local_name.endswith("Response"):
            raise MalformedResponseError(
                f"expected element named *Response but was {reader.local_name}"
            )
        reader.next_tag()
        reader.require_start(PARTNER_NS, "result")
        values = _scan_fields(reader, _SAVE_RESULT_FIELDS)
        return SaveResult(
            success=parse_success(values.get("success")),
            id=values.get("id"),
            status_code=values.get("statusCode"),
            message=values.get("message"),
        )


class LoginResponseParser(ResponseParser[Session]):
    """Parses a loginResponse into a Session."""

    def parse(self, reader: XmlEventReader) -> Session:
        reader.require_start(PARTNER_NS, "loginResponse")
        values = _scan_fields(reader, _LOGIN_FIELDS)
        session_id = values.get("sessionId")
        if not session_id:
            raise MalformedResponseError("loginResponse did not contain a sessionId")
        return Session(
            session_id=session_id,
            instance_url=values.get("serverUrl", ""),
            user_id=values.get("userId", ""),
        )


def read_fault(reader: XmlEventReader) -> SoapFaultError:
    """Read a soap Fault and turn it into an exception."""
    values = _scan_fields(reader, _FAULT_FIELDS)
    return SoapFaultError(values.get("faultcode"), values.get("faultstring"))


def read_envelope(reader: XmlEventReader, parser: ResponseParser[T]) -> T:
    """Walk the envelope wrapper and hand the Body's first child to a parser."""
    if reader.event != START_DOCUMENT:
        raise MalformedResponseError("reader is not at the start of the document")
    reader.next_tag()
    reader.require_start(SOAP_NS, "Envelope")
    reader.next_tag()
    if reader.event == START_ELEMENT and reader.namespace == SOAP_NS and (
        reader.local_name == "Header"
    ):
        reader.skip_element()
        reader.next_tag()
    reader.require_start(SOAP_NS, "Body")
    reader.next_tag()
    if reader.event != START_ELEMENT:
        raise MalformedResponseError("SOAP Body is empty")
    if reader.local_name == "Fault":
        raise read_fault(reader)
    result = parser.parse(reader)
    reader.drain()
    return result
