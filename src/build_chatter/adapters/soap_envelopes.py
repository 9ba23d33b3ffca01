"""SOAP request envelopes for the Salesforce partner API."""

from dataclasses import dataclass

from lxml import etree

from build_chatter.domain.models import Credentials

SOAP_NS = "http://schemas.xmlsoap.org/soap/envelope/"
PARTNER_NS = "urn:partner.soap.sforce.com"
SOBJECT_NS = "urn:sobject.partner.soap.sforce.com"
CONTENT_TYPE = "text/xml; charset=utf-8"

_NSMAP = {"soapenv": SOAP_NS, "urn": PARTNER_NS, "sobj": SOBJECT_NS}


@dataclass(frozen=True)
class SoapRequest:
    """Serialized SOAP request body."""

    body: bytes
    content_type: str = CONTENT_TYPE


def _qname(namespace: str, local_name: str) -> str:
    return f"{{{namespace}}}{local_name}"


def _text_child(
    parent: etree._Element, namespace: str, local_name: str, text: str
) -> etree._Element:
    child = etree.SubElement(parent, _qname(namespace, local_name))
    child.text = text
    return child


def _envelope(session_id: str | None) -> tuple[etree._Element, etree._Element]:
    """Create an envelope and return it with its Body element."""
    envelope = etree.Element(_qname(SOAP_NS, "Envelope"), nsmap=_NSMAP)
    if session_id is not None:
        header = etree.SubElement(envelope, _qname(SOAP_NS, "Header"))
        session_header = etree.SubElement(header, _qname(PARTNER_NS, "SessionHeader"))
        _text_child(session_header, PARTNER_NS, "sessionId", session_id)
    body = etree.SubElement(envelope, _qname(SOAP_NS, "Body"))
    return envelope, body


def _serialize(envelope: etree._Element) -> SoapRequest:
    return SoapRequest(
        body=etree.tostring(envelope, xml_declaration=True, encoding="UTF-8")
    )


def build_login_request(credentials: Credentials) -> SoapRequest:
    """Build a login request; no session header is sent."""
    envelope, body = _envelope(session_id=None)
    login = etree.SubElement(body, _qname(PARTNER_NS, "login"))
    _text_child(login, PARTNER_NS, "username", credentials.username)
    _text_child(login, PARTNER_NS, "password", credentials.password)
    return _serialize(envelope)


def build_feed_post_request(
    session_id: str, parent_id: str, title: str, link_url: str, body_text: str
) -> SoapRequest:
    """Build a create() request for a single FeedPost."""
    envelope, body = _envelope(session_id)
    create = etree.SubElement(body, _qname(PARTNER_NS, "create"))
    sobject = etree.SubElement(create, _qname(PARTNER_NS, "sObjects"))
    _text_child(sobject, SOBJECT_NS, "type", "FeedPost")
    _text_child(sobject, SOBJECT_NS, "ParentId", parent_id)
    _text_child(sobject, SOBJECT_NS, "Title", title)
    _text_child(sobject, SOBJECT_NS, "LinkUrl", link_url)
    _text_child(sobject, SOBJECT_NS, "Body", body_text)
    return _serialize(envelope)


def build_delete_request(session_id: str, record_id: str) -> SoapRequest:
    """Build a delete() request for one record id."""
    envelope, body = _envelope(session_id)
    delete = etree.SubElement(body, _qname(PARTNER_NS, "delete"))
    _text_child(delete, PARTNER_NS, "ids", record_id)
    return _serialize(envelope)
