"""Exceptions raised by the choreo gateway client."""
from typing import Optional


class GatewayError(Exception):
    """Base class for every failure of a remote choreo call."""

    def __init__(self, message: str, choreo: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.choreo = choreo


class GatewayCredentialError(GatewayError):
    """The gateway or the underlying service rejected the credentials."""


class GatewayObjectNotAccessibleError(GatewayError):
    """The requested choreo or resource does not exist or is not reachable."""


class GatewayHTTPError(GatewayError):
    """The gateway answered with an unexpected HTTP status."""

    def __init__(self, message: str, status_code: int, choreo: Optional[str] = None):
        super().__init__(message, choreo=choreo)
        self.status_code = status_code


class GatewayTransportError(GatewayError):
    """Network failure or timeout while talking to the gateway."""


class ChoreoExecutionError(GatewayError):
    """The choreo ran but reported an execution error."""


class MalformedResponseError(GatewayError):
    """A response could not be parsed into the expected structure."""
