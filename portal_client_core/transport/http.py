"""HTTP transport for portal API endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

import aiohttp
from aiohttp.abc import AbstractCookieJar

from ..errors import PortalConnectionError, PortalTimeout

_LOGGER = logging.getLogger(__name__)

PROTOBUF_CONTENT_TYPE: Final = "application/x-protobuf"

_BINARY_HEADERS: Final[dict[str, str]] = {
    "Content-Type": PROTOBUF_CONTENT_TYPE,
    "Accept": PROTOBUF_CONTENT_TYPE,
}


@dataclass(frozen=True)
class TransportResponse:
    """Raw HTTP result of one request."""

    status: int
    body: bytes
    content_type: str | None = None


def create_client_session(
    *, cookie_jar: AbstractCookieJar | None = None
) -> aiohttp.ClientSession:
    """Create a ClientSession whose cookie jar carries the session cookie.

    The jar is created with ``unsafe=True`` so cookies set by backends
    addressed by IP (``127.0.0.1`` during development) are kept.
    """
    if cookie_jar is None:
        cookie_jar = aiohttp.CookieJar(unsafe=True)
    return aiohttp.ClientSession(cookie_jar=cookie_jar)


class PortalHttpTransport:
    """HTTP client wrapper issuing one binary request per call.

    Credentials travel as cookies held by the ClientSession's cookie jar; the
    backend sets them on login and refresh and clears them on logout.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        *,
        timeout: float | None = 30.0,
    ) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def send(
        self,
        method: str,
        path: str,
        body: bytes | None = None,
    ) -> TransportResponse:
        """Send one request and return the raw response.

        Any HTTP status is returned to the caller; only failures to obtain a
        response raise.

        Raises:
            PortalTimeout: If the request timed out.
            PortalConnectionError: If the connection failed (refused, DNS).
        """
        url = self._url(path)
        _LOGGER.debug(
            "%s %s (%d bytes)", method, url, len(body) if body is not None else 0
        )
        try:
            async with self._session.request(
                method,
                url,
                data=body,
                headers=dict(_BINARY_HEADERS),
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                payload = await resp.read()
                return TransportResponse(
                    status=resp.status,
                    body=payload,
                    content_type=resp.headers.get("Content-Type"),
                )
        except TimeoutError as err:
            raise PortalTimeout(f"{method} {path} timed out") from err
        except aiohttp.ClientError as err:
            raise PortalConnectionError(f"{method} {path} failed: {err}") from err
