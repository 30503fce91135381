"""Test ApiGateway envelope classification and error translation."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from portal_client_core import proto
from portal_client_core.codec import (
    PAYLOAD_COUNTER,
    PAYLOAD_LOGIN,
    build_error_response,
    build_login_request,
    build_success_response,
    encode_message,
)
from portal_client_core.errors import (
    ErrorCode,
    ErrorKind,
    GatewayError,
    PortalConnectionError,
    PortalTimeout,
)
from portal_client_core.gateway import MISSING_PAYLOAD_MESSAGE, ApiGateway, Endpoint
from portal_client_core.models import (
    FieldError,
    FieldType,
    ResponseCode,
    SuccessCode,
    ValidationDetail,
    ValidationErrorCode,
)
from portal_client_core.result import Err, Ok
from portal_client_core.translator import CatalogTranslator
from portal_client_core.transport import PortalHttpTransport, TransportResponse

from .conftest import make_login_data

LOGIN = Endpoint("/login", "POST")
CHECK = Endpoint("/auth/check", "GET")


@pytest.fixture
def transport() -> AsyncMock:
    return AsyncMock(spec=PortalHttpTransport)


@pytest.fixture
async def translator() -> CatalogTranslator:
    catalog = CatalogTranslator()
    await catalog.initialize()
    return catalog


def _reply(transport: AsyncMock, message, status: int = 200) -> None:
    transport.send.return_value = TransportResponse(
        status=status, body=encode_message(message)
    )


class TestSuccess:
    """Test SUCCESS envelopes."""

    async def test_returns_envelope_with_payload(self, transport: AsyncMock) -> None:
        """Test a SUCCESS login envelope is returned as decoded."""
        gateway = ApiGateway(transport)
        _reply(transport, build_success_response(make_login_data()))

        response = await gateway.call(
            LOGIN, build_login_request("alice", "pw"), expect=PAYLOAD_LOGIN
        )

        assert response.data.login_response.username == "alice"
        method, path, body = transport.send.call_args.args
        assert (method, path) == ("POST", "/login")
        decoded = proto.LoginRequest.FromString(body)
        assert decoded.username == "alice"

    async def test_get_without_request_sends_no_body(
        self, transport: AsyncMock
    ) -> None:
        gateway = ApiGateway(transport)
        _reply(transport, build_success_response(make_login_data()))

        await gateway.call(CHECK)

        assert transport.send.call_args.args == ("GET", "/auth/check", None)

    async def test_post_without_request_sends_empty_body(
        self, transport: AsyncMock
    ) -> None:
        gateway = ApiGateway(transport)
        _reply(transport, build_success_response())

        await gateway.call(Endpoint("/logout"))

        assert transport.send.call_args.args == ("POST", "/logout", b"")

    async def test_success_status_is_ignored(self, transport: AsyncMock) -> None:
        """Test the decoded code, not HTTP status, decides success."""
        gateway = ApiGateway(transport)
        _reply(transport, build_success_response(), status=500)

        response = await gateway.call(Endpoint("/logout"))

        assert response.code == ResponseCode.SUCCESS

    async def test_success_without_payload_is_internal(
        self, transport: AsyncMock
    ) -> None:
        """Test SUCCESS with no data is a protocol violation."""
        gateway = ApiGateway(transport)
        _reply(transport, proto.ApiResponse(code=int(ResponseCode.SUCCESS)))

        with pytest.raises(GatewayError) as exc_info:
            await gateway.call(LOGIN)

        assert exc_info.value.error_code is ErrorCode.INTERNAL
        assert exc_info.value.message == MISSING_PAYLOAD_MESSAGE

    async def test_wrong_payload_variant_is_internal(
        self, transport: AsyncMock
    ) -> None:
        """Test a counter payload where login data was expected fails."""
        gateway = ApiGateway(transport)
        _reply(transport, build_success_response(proto.CounterData(value=1)))

        with pytest.raises(GatewayError) as exc_info:
            await gateway.call(LOGIN, expect=PAYLOAD_LOGIN)

        assert exc_info.value.error_code is ErrorCode.INTERNAL
        assert exc_info.value.http_status == 200

    async def test_translate_success(
        self, transport: AsyncMock, translator: CatalogTranslator
    ) -> None:
        gateway = ApiGateway(transport, translator=translator)
        response = build_success_response(
            success_code=SuccessCode.SUCCESS_LOGGED_OUT
        )

        assert gateway.translate_success(response) == "You have been logged out."


class TestErrors:
    """Test failures are classified and translated."""

    async def test_business_error_is_translated(
        self, transport: AsyncMock, translator: CatalogTranslator
    ) -> None:
        """Test INVALID_CREDENTIALS yields the localized message."""
        gateway = ApiGateway(transport, translator=translator)
        _reply(
            transport, build_error_response(ErrorCode.INVALID_CREDENTIALS), status=401
        )

        with pytest.raises(GatewayError) as exc_info:
            await gateway.call(LOGIN, expect=PAYLOAD_LOGIN)

        err = exc_info.value
        assert err.error_code is ErrorCode.INVALID_CREDENTIALS
        assert err.http_status == 401
        assert err.kind is ErrorKind.UNAUTHORIZED
        assert err.message == "Invalid username or password."
        assert err.validation_detail is None

    async def test_locale_switch(
        self, transport: AsyncMock, translator: CatalogTranslator
    ) -> None:
        """Test the gateway locale selects the catalog."""
        gateway = ApiGateway(transport, translator=translator, locale="en")
        gateway.locale = "de"
        _reply(transport, build_error_response(ErrorCode.USERNAME_TAKEN), status=409)

        with pytest.raises(GatewayError) as exc_info:
            await gateway.call(Endpoint("/register"))

        assert exc_info.value.message == translator.translate("USERNAME_TAKEN", "de")
        assert exc_info.value.kind is ErrorKind.CONFLICT

    async def test_validation_error_lists_every_field(
        self, transport: AsyncMock, translator: CatalogTranslator
    ) -> None:
        """Test multi-field validation failures are all reported."""
        gateway = ApiGateway(transport, translator=translator)
        detail = ValidationDetail(
            field_errors=(
                FieldError(FieldType.USERNAME, (ValidationErrorCode.TOO_SHORT,)),
                FieldError(FieldType.PASSWORD, (ValidationErrorCode.TOO_FEW_DIGITS,)),
            )
        )
        _reply(
            transport,
            build_error_response(ErrorCode.VALIDATION, validation_detail=detail),
            status=400,
        )

        with pytest.raises(GatewayError) as exc_info:
            await gateway.call(Endpoint("/register"))

        err = exc_info.value
        assert err.kind is ErrorKind.VALIDATION
        assert err.validation_detail == detail
        assert err.message == (
            "Username must be at least 3 characters, "
            "Password needs at least 1 digit(s)"
        )

    async def test_code_names_without_catalog(self, transport: AsyncMock) -> None:
        """Test the default translator reports code names."""
        gateway = ApiGateway(transport)
        _reply(transport, build_error_response(ErrorCode.INVALID_TOKEN), status=400)

        with pytest.raises(GatewayError, match="INVALID_TOKEN"):
            await gateway.call(Endpoint("/verify-email"))

    @pytest.mark.parametrize(
        "failure", [PortalTimeout("slow"), PortalConnectionError("refused")]
    )
    async def test_transport_failure_is_network(
        self, transport: AsyncMock, translator: CatalogTranslator, failure
    ) -> None:
        """Test no response at all yields NETWORK with status 0."""
        gateway = ApiGateway(transport, translator=translator)
        transport.send.side_effect = failure

        with pytest.raises(GatewayError) as exc_info:
            await gateway.call(LOGIN)

        err = exc_info.value
        assert err.error_code is ErrorCode.NETWORK
        assert err.http_status == 0
        assert err.message == (
            "Cannot connect to the server. Please ensure the backend is running."
        )
        assert err.__cause__ is failure

    async def test_undecodable_body_is_internal(self, transport: AsyncMock) -> None:
        """Test garbage bytes (e.g. an HTML proxy page) are INTERNAL."""
        gateway = ApiGateway(transport)
        transport.send.return_value = TransportResponse(status=502, body=b"\x08")

        with pytest.raises(GatewayError) as exc_info:
            await gateway.call(LOGIN)

        assert exc_info.value.error_code is ErrorCode.INTERNAL
        assert exc_info.value.http_status == 502

    async def test_unspecified_response_code_is_internal(
        self, transport: AsyncMock
    ) -> None:
        gateway = ApiGateway(transport)
        _reply(transport, proto.ApiResponse())

        with pytest.raises(GatewayError) as exc_info:
            await gateway.call(LOGIN)

        assert exc_info.value.error_code is ErrorCode.INTERNAL


class TestCallResult:
    """Test the tagged-result form."""

    async def test_ok(self, transport: AsyncMock) -> None:
        gateway = ApiGateway(transport)
        _reply(transport, build_success_response(proto.CounterData(value=3)))

        outcome = await gateway.call_result(
            Endpoint("/counter/get", "GET"), expect=PAYLOAD_COUNTER
        )

        assert isinstance(outcome, Ok)
        assert outcome.is_ok
        assert outcome.value.data.counter_data.value == 3

    async def test_err(self, transport: AsyncMock) -> None:
        gateway = ApiGateway(transport)
        _reply(transport, build_error_response(ErrorCode.UNAUTHORIZED), status=401)

        outcome = await gateway.call_result(Endpoint("/counter/get", "GET"))

        assert isinstance(outcome, Err)
        assert not outcome.is_ok
        assert outcome.kind is ErrorKind.UNAUTHORIZED
        assert outcome.error.http_status == 401
