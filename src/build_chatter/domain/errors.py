"""Typed failures raised by the Chatter client."""

from build_chatter.domain.models import SaveResult

INVALID_SESSION = "INVALID_SESSION"


class ChatterError(Exception):
    """Base class for Chatter client failures."""


class TransportError(ChatterError):
    """The server answered with an HTTP status that cannot carry a SOAP message."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(
            f"request to {url} returned unexpected HTTP status code of "
            f"{status_code}, check configuration."
        )
        self.url = url
        self.status_code = status_code


class MalformedResponseError(ChatterError):
    """The response body does not have the expected SOAP shape."""


class SoapFaultError(ChatterError):
    def __init__(self, fault_code: str | None, fault_string: str | None) -> None:
        super().__init__(f"{fault_code}: {fault_string}")
        self.fault_code = fault_code or ""
        self.fault_string = fault_string or ""

    @property
    def is_invalid_session(self) -> bool:
        """Whether the fault reports an expired or revoked session."""
        return self.fault_code.upper() == INVALID_SESSION


class SaveResultError(ChatterError):
    """A save or delete call was rejected by the server."""

    def __init__(self, result: SaveResult) -> None:
        super().__init__(f"{result.status_code}: {result.message}")
        self.result = result

    @property
    def status_code(self) -> str | None:
        return self.result.status_code

    @property
    def message(self) -> str | None:
        return self.result.message

    @property
    def id(self) -> str | None:
        return self.result.id
