"""Request/response orchestration for portal API calls.

Every call goes through the same pipeline: encode the request, send it,
decode the ApiResponse envelope, classify it, and either return the envelope
or raise GatewayError. The decoded ``code`` field is the only success signal;
HTTP status is kept for diagnostics because the backend may answer 200 with a
business error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from google.protobuf.message import Message

from .codec import (
    decode_response,
    encode_message,
    error_code_from_response,
    get_payload_type,
    success_code_from_response,
    validation_detail_from_message,
)
from .errors import ErrorCode, GatewayError, PortalTransportError, WireDecodeError
from .models import ResponseCode
from .result import Err, Ok, settle
from .transport import PortalHttpTransport
from .translator import DEFAULT_LOCALE, CodeNameTranslator, Translator

_LOGGER = logging.getLogger(__name__)

MISSING_PAYLOAD_MESSAGE = "missing expected payload"


@dataclass(frozen=True)
class Endpoint:
    """A fixed backend operation.

    Attributes:
        path: Path relative to the API base URL.
        method: HTTP verb; GET for read-only checks, POST otherwise.
    """

    path: str
    method: str = "POST"

    def __str__(self) -> str:
        return f"{self.method} {self.path}"


class ApiGateway:
    """Single-attempt protobuf calls with structured failures.

    Usage:
        gateway = ApiGateway(transport, translator=translator, locale="de")
        response = await gateway.call(LOGIN, build_login_request("alice", "pw"))
    """

    def __init__(
        self,
        transport: PortalHttpTransport,
        *,
        translator: Translator | None = None,
        locale: str = DEFAULT_LOCALE,
    ) -> None:
        self._transport = transport
        self._translator = translator or CodeNameTranslator()
        self._locale = locale

    @property
    def locale(self) -> str:
        return self._locale

    @locale.setter
    def locale(self, value: str) -> None:
        self._locale = value

    @property
    def translator(self) -> Translator:
        return self._translator

    async def call(
        self,
        endpoint: Endpoint,
        request: Message | None = None,
        *,
        expect: str | None = None,
    ) -> Any:
        """Perform one request and return the SUCCESS envelope.

        Args:
            endpoint: Target endpoint.
            request: Request message; None sends no body for GET and an
                empty body otherwise.
            expect: Payload variant the envelope must carry; any variant is
                accepted when None.

        Returns:
            Decoded ApiResponse with code SUCCESS and a payload variant.

        Raises:
            GatewayError: NETWORK when no response was received, INTERNAL on
                undecodable or malformed envelopes, otherwise the decoded
                business error code.
        """
        if request is not None:
            body: bytes | None = encode_message(request)
        elif endpoint.method == "GET":
            body = None
        else:
            body = b""

        try:
            raw = await self._transport.send(endpoint.method, endpoint.path, body)
        except PortalTransportError as err:
            _LOGGER.warning("%s unreachable: %s", endpoint, err)
            raise GatewayError(
                self._translate(ErrorCode.NETWORK.name),
                http_status=0,
                error_code=ErrorCode.NETWORK,
            ) from err

        try:
            response = decode_response(raw.body)
        except WireDecodeError as err:
            _LOGGER.warning(
                "%s returned undecodable body (HTTP %d, %d bytes)",
                endpoint,
                raw.status,
                len(raw.body),
            )
            raise GatewayError(
                self._translate(ErrorCode.INTERNAL.name),
                http_status=raw.status,
                error_code=ErrorCode.INTERNAL,
            ) from err

        if response.code == ResponseCode.SUCCESS:
            payload_type = get_payload_type(response)
            if payload_type is None or (expect is not None and payload_type != expect):
                _LOGGER.warning(
                    "%s returned SUCCESS without %s payload (got %s)",
                    endpoint,
                    expect or "any",
                    payload_type,
                )
                raise GatewayError(
                    MISSING_PAYLOAD_MESSAGE,
                    http_status=raw.status,
                    error_code=ErrorCode.INTERNAL,
                )
            _LOGGER.debug("%s succeeded (HTTP %d)", endpoint, raw.status)
            return response

        if response.code == ResponseCode.ERROR:
            raise self._business_error(endpoint, response, raw.status)

        _LOGGER.warning(
            "%s returned unexpected response code %d (HTTP %d)",
            endpoint,
            response.code,
            raw.status,
        )
        raise GatewayError(
            self._translate(ErrorCode.INTERNAL.name),
            http_status=raw.status,
            error_code=ErrorCode.INTERNAL,
        )

    async def call_result(
        self,
        endpoint: Endpoint,
        request: Message | None = None,
        *,
        expect: str | None = None,
    ) -> Ok[Any] | Err:
        """Like call(), but return Ok(envelope) or Err instead of raising."""
        return await settle(self.call(endpoint, request, expect=expect))

    def translate_success(self, response: Any) -> str:
        """Return the localized message for a SUCCESS envelope's detail code."""
        return self._translate(success_code_from_response(response).name)

    def _business_error(
        self, endpoint: Endpoint, response: Any, status: int
    ) -> GatewayError:
        error_code = error_code_from_response(response)
        detail = None
        if response.HasField("validation"):
            detail = validation_detail_from_message(response.validation)

        if detail is not None and error_code is ErrorCode.VALIDATION:
            message = self._translator.translate_validation(detail, self._locale)
        else:
            message = self._translate(error_code.name)

        _LOGGER.debug(
            "%s rejected: %s (HTTP %d)", endpoint, error_code.name, status
        )
        return GatewayError(
            message,
            http_status=status,
            error_code=error_code,
            validation_detail=detail if error_code is ErrorCode.VALIDATION else None,
        )

    def _translate(self, code: str) -> str:
        return self._translator.translate(code, self._locale)
