"""Transport layer for the portal client.

This package contains all network IO.

Components:
- http: binary-body HTTP requests over a shared aiohttp ClientSession
"""

from .http import (
    PROTOBUF_CONTENT_TYPE,
    PortalHttpTransport,
    TransportResponse,
    create_client_session,
)

__all__ = [
    "PROTOBUF_CONTENT_TYPE",
    "PortalHttpTransport",
    "TransportResponse",
    "create_client_session",
]
