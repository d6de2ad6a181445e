"""Domain exceptions for the lichessdash library."""


class DashboardError(Exception):
    """Base class for all lichessdash library exceptions."""


class NotFoundError(DashboardError):
    """Raised when a named entity (e.g. a user) does not exist upstream."""


class UpstreamUnavailableError(DashboardError):
    """Raised when the upstream service cannot be reached.

    Covers request timeouts and connection failures (DNS errors, refused
    connections).  The provider raises this only after the retry policy has
    been exhausted.

    Attributes:
        kind: Either ``"timeout"`` or ``"connection"``.
    """

    TIMEOUT = "timeout"
    CONNECTION = "connection"

    _CODES = {TIMEOUT: "TIMEOUT", CONNECTION: "CONNECTION_ERROR"}

    def __init__(self, message: str, kind: str = CONNECTION):
        super().__init__(message)
        self.kind = kind

    @property
    def code(self) -> str:
        """Machine-readable error code sent to dashboard clients."""
        return self._CODES.get(self.kind, "CONNECTION_ERROR")


class UpstreamError(DashboardError):
    """Raised on any other upstream failure or a malformed payload."""


class ValidationError(DashboardError):
    """Raised when caller input is missing or invalid."""
