"""Test protobuf envelope encoding and decoding."""

from __future__ import annotations

import pytest

from portal_client_core import proto
from portal_client_core.codec import (
    PAYLOAD_COUNTER,
    PAYLOAD_EMPTY,
    PAYLOAD_LOGIN,
    build_error_response,
    build_login_request,
    build_success_response,
    decode_message,
    decode_response,
    encode_message,
    error_code_from_response,
    get_payload_type,
    success_code_from_response,
    validation_detail_from_message,
)
from portal_client_core.errors import ErrorCode, WireDecodeError
from portal_client_core.models import (
    FieldError,
    FieldType,
    ResponseCode,
    SuccessCode,
    UserRole,
    ValidationDetail,
    ValidationErrorCode,
)

from .conftest import make_login_data


class TestEncodeDecode:
    """Test message serialization."""

    def test_login_request_round_trip(self) -> None:
        """Test a request survives encode and decode unchanged."""
        request = build_login_request("alice", "s3cret!")

        decoded = decode_message(encode_message(request), proto.LoginRequest)

        assert decoded.username == "alice"
        assert decoded.password == "s3cret!"

    def test_login_envelope_round_trip(self) -> None:
        """Test a SUCCESS envelope with login data decodes to the same fields."""
        data = make_login_data(role=UserRole.ADMIN)
        response = decode_response(encode_message(build_success_response(data)))

        assert response.code == ResponseCode.SUCCESS
        assert get_payload_type(response) == PAYLOAD_LOGIN
        login = response.data.login_response
        assert login.username == "alice"
        assert login.email == "alice@example.com"
        assert login.session_created_at == 1000
        assert login.session_expires_at == 2000
        assert login.role == UserRole.ADMIN

    def test_empty_bytes_decode_to_default_envelope(self) -> None:
        """Test zero bytes are a valid, all-default message."""
        response = decode_response(b"")

        assert response.code == ResponseCode.RESPONSE_CODE_UNSPECIFIED
        assert get_payload_type(response) is None

    @pytest.mark.parametrize(
        "data",
        [
            b"\x08",  # field 1 varint, value missing
            b"\x08\xff\xff\xff\xff\xff\xff\xff\xff\xff\xff\x01",  # varint too long
            b"\x22\x05\x0a",  # length-delimited field truncated
            b"\x0f",  # invalid wire type
        ],
    )
    def test_malformed_bytes_raise(self, data: bytes) -> None:
        """Test malformed input raises WireDecodeError, never a partial message."""
        with pytest.raises(WireDecodeError):
            decode_response(data)

    def test_non_bytes_rejected(self) -> None:
        """Test decoding a str raises WireDecodeError."""
        with pytest.raises(WireDecodeError):
            decode_response("not bytes")  # type: ignore[arg-type]


class TestEnvelopeBuilders:
    """Test envelope builders used by fakes and tests."""

    def test_success_defaults_to_empty_payload(self) -> None:
        """Test SUCCESS envelopes always carry a payload variant."""
        response = build_success_response()

        assert get_payload_type(response) == PAYLOAD_EMPTY
        assert success_code_from_response(response) is SuccessCode.SUCCESS_OK

    def test_counter_payload(self) -> None:
        response = build_success_response(proto.CounterData(value=7))

        assert get_payload_type(response) == PAYLOAD_COUNTER
        assert response.data.counter_data.value == 7

    def test_unsupported_payload_raises(self) -> None:
        """Test a request message cannot be used as a payload."""
        with pytest.raises(TypeError):
            build_success_response(build_login_request("a", "b"))

    def test_error_response_with_validation(self) -> None:
        """Test validation detail survives the wire."""
        detail = ValidationDetail(
            field_errors=(
                FieldError(
                    FieldType.USERNAME,
                    (ValidationErrorCode.TOO_SHORT, ValidationErrorCode.INVALID_CHARACTERS),
                ),
                FieldError(FieldType.PASSWORD, (ValidationErrorCode.TOO_FEW_DIGITS,)),
            )
        )
        wire = encode_message(
            build_error_response(ErrorCode.VALIDATION, validation_detail=detail)
        )

        response = decode_response(wire)

        assert response.code == ResponseCode.ERROR
        assert error_code_from_response(response) is ErrorCode.VALIDATION
        assert validation_detail_from_message(response.validation) == detail

    def test_unknown_error_code_maps_to_unspecified(self) -> None:
        """Test an error code from a newer backend is not lost."""
        response = proto.ApiResponse(code=int(ResponseCode.ERROR), error=99)

        assert error_code_from_response(response) is ErrorCode.ERROR_CODE_UNSPECIFIED

    def test_empty_validation_is_none(self) -> None:
        assert validation_detail_from_message(proto.ValidationErrorData()) is None
