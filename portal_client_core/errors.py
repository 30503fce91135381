"""Client error types for portal backend interactions.

Owned by the Portal Client Core team.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ValidationDetail


class ErrorCode(IntEnum):
    """Closed set of error codes carried by the ApiResponse envelope.

    NETWORK never appears on the wire; the gateway assigns it when the
    transport could not reach the backend.
    """

    ERROR_CODE_UNSPECIFIED = 0
    INTERNAL = 1
    NETWORK = 2
    VALIDATION = 3
    UNAUTHORIZED = 4
    INVALID_CREDENTIALS = 5
    EMAIL_NOT_VERIFIED = 6
    USERNAME_TAKEN = 7
    EMAIL_TAKEN = 8
    INVALID_TOKEN = 9


class ErrorKind(Enum):
    """Coarse classification callers branch on."""

    NETWORK = "network"
    INTERNAL = "internal"
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    REJECTED = "rejected"


_KIND_BY_CODE: dict[ErrorCode, ErrorKind] = {
    ErrorCode.NETWORK: ErrorKind.NETWORK,
    ErrorCode.INTERNAL: ErrorKind.INTERNAL,
    ErrorCode.VALIDATION: ErrorKind.VALIDATION,
    ErrorCode.UNAUTHORIZED: ErrorKind.UNAUTHORIZED,
    ErrorCode.INVALID_CREDENTIALS: ErrorKind.UNAUTHORIZED,
    ErrorCode.EMAIL_NOT_VERIFIED: ErrorKind.UNAUTHORIZED,
    ErrorCode.USERNAME_TAKEN: ErrorKind.CONFLICT,
    ErrorCode.EMAIL_TAKEN: ErrorKind.CONFLICT,
    ErrorCode.INVALID_TOKEN: ErrorKind.REJECTED,
    ErrorCode.ERROR_CODE_UNSPECIFIED: ErrorKind.REJECTED,
}


def classify_error_code(code: ErrorCode) -> ErrorKind:
    """Return the error kind for a response error code."""
    return _KIND_BY_CODE[code]


class PortalClientError(Exception):
    """Base error for portal client failures."""


class PortalTransportError(PortalClientError):
    """The request never produced an HTTP response."""


class PortalTimeout(PortalTransportError):
    """Timeout while communicating with the backend."""


class PortalConnectionError(PortalTransportError):
    """Network connection to the backend failed."""


class WireDecodeError(PortalClientError):
    """Bytes did not match the expected protobuf schema."""


class ConfigError(PortalClientError):
    """Invalid client configuration."""


class GatewayError(PortalClientError):
    """Typed failure of a gateway call.

    Attributes:
        message: Locale-translated, user-presentable message.
        http_status: HTTP status of the response (0 when none was received).
        error_code: Decoded or client-assigned error code.
        validation_detail: Every rejected field with its error codes, when
            the backend rejected the request on validation grounds.
    """

    def __init__(
        self,
        message: str,
        *,
        http_status: int,
        error_code: ErrorCode,
        validation_detail: ValidationDetail | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.error_code = error_code
        self.validation_detail = validation_detail

    @property
    def kind(self) -> ErrorKind:
        """Classification of error_code."""
        return classify_error_code(self.error_code)

    def __repr__(self) -> str:
        return (
            f"GatewayError({self.message!r}, http_status={self.http_status}, "
            f"error_code={self.error_code.name})"
        )
