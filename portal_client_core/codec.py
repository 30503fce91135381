"""Protocol Buffer serialization for portal API messages.

This module handles conversion between bytes, protobuf messages and the
client's domain types. All functions are pure; nothing here touches the
network.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from google.protobuf.message import DecodeError, Message

from . import proto
from .errors import ErrorCode, WireDecodeError
from .models import (
    FieldError,
    FieldType,
    ResponseCode,
    SuccessCode,
    UserRole,
    ValidationDetail,
    ValidationErrorCode,
)

_LOGGER = logging.getLogger(__name__)

M = TypeVar("M", bound=Message)

PAYLOAD_LOGIN = "login_response"
PAYLOAD_COUNTER = "counter_data"
PAYLOAD_EMPTY = "empty"

_PAYLOAD_FIELDS: dict[type, str] = {
    proto.LoginResponseData: PAYLOAD_LOGIN,
    proto.CounterData: PAYLOAD_COUNTER,
    proto.Empty: PAYLOAD_EMPTY,
}


def encode_message(message: Message) -> bytes:
    """Serialize protobuf message to binary.

    Args:
        message: Protobuf message

    Returns:
        Binary-serialized message
    """
    return message.SerializeToString()


def decode_message(data: bytes, message_cls: type[M]) -> M:
    """Deserialize binary data to a protobuf message of the given type.

    Args:
        data: Binary message data
        message_cls: Expected message class

    Returns:
        Parsed protobuf message

    Raises:
        WireDecodeError: If data is truncated, carries an invalid tag or
            wire type, or contains a malformed varint.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise WireDecodeError(
            f"Expected bytes for {message_cls.__name__}, got {type(data).__name__}"
        )
    message = message_cls()
    try:
        message.ParseFromString(bytes(data))
    except DecodeError as err:
        _LOGGER.debug(
            "Failed to decode %s (%d bytes): %s", message_cls.__name__, len(data), err
        )
        raise WireDecodeError(f"Invalid {message_cls.__name__} payload") from err
    return message


def decode_response(data: bytes) -> Any:
    """Deserialize an ApiResponse envelope."""
    return decode_message(data, proto.ApiResponse)


def get_payload_type(response: Any) -> str | None:
    """Get the populated payload variant of an envelope.

    Args:
        response: ApiResponse message

    Returns:
        Payload field name or None
    """
    if not response.HasField("data"):
        return None
    return response.data.WhichOneof("payload")


# -----------------------------------------------------------------------------
# Request builders
# -----------------------------------------------------------------------------


def build_registration_request(username: str, email: str, password: str) -> Any:
    return proto.RegistrationRequest(username=username, email=email, password=password)


def build_login_request(username: str, password: str) -> Any:
    return proto.LoginRequest(username=username, password=password)


def build_email_verification_request(token: str) -> Any:
    return proto.EmailVerificationRequest(token=token)


def build_password_reset_request(email: str) -> Any:
    return proto.PasswordResetRequest(email=email)


def build_password_reset_complete_request(token: str, new_password: str) -> Any:
    return proto.PasswordResetCompleteRequest(token=token, new_password=new_password)


def build_set_counter_request(value: int) -> Any:
    return proto.SetCounterRequest(value=value)


# -----------------------------------------------------------------------------
# Envelope builders
# -----------------------------------------------------------------------------


def build_login_data(
    username: str,
    email: str,
    *,
    created_at: int,
    expires_at: int,
    role: UserRole = UserRole.USER,
) -> Any:
    """Build a LoginResponseData payload."""
    return proto.LoginResponseData(
        username=username,
        email=email,
        role=int(role),
        session_created_at=created_at,
        session_expires_at=expires_at,
    )


def build_success_response(
    payload: Message | None = None,
    *,
    success_code: SuccessCode = SuccessCode.SUCCESS_OK,
) -> Any:
    """Build a SUCCESS envelope carrying exactly one payload variant.

    Args:
        payload: LoginResponseData, CounterData or Empty. Defaults to Empty.
        success_code: Success detail code.

    Returns:
        ApiResponse message
    """
    if payload is None:
        payload = proto.Empty()
    field_name = _PAYLOAD_FIELDS.get(type(payload))
    if field_name is None:
        raise TypeError(f"Unsupported payload type: {type(payload).__name__}")

    response = proto.ApiResponse(
        code=int(ResponseCode.SUCCESS),
        success=int(success_code),
    )
    getattr(response.data, field_name).CopyFrom(payload)
    return response


def build_error_response(
    error_code: ErrorCode,
    *,
    validation_detail: ValidationDetail | None = None,
) -> Any:
    """Build an ERROR envelope.

    Args:
        error_code: Business error code.
        validation_detail: Field errors, only meaningful for VALIDATION.

    Returns:
        ApiResponse message
    """
    response = proto.ApiResponse(code=int(ResponseCode.ERROR), error=int(error_code))
    if validation_detail is not None:
        response.validation.CopyFrom(validation_detail_to_message(validation_detail))
    return response


# -----------------------------------------------------------------------------
# Validation detail conversion
# -----------------------------------------------------------------------------


def validation_detail_to_message(detail: ValidationDetail) -> Any:
    """Convert ValidationDetail into a ValidationErrorData message."""
    message = proto.ValidationErrorData()
    for field_error in detail.field_errors:
        entry = message.field_errors.add(field=int(field_error.field))
        entry.errors.extend(int(code) for code in field_error.errors)
    return message


def validation_detail_from_message(message: Any) -> ValidationDetail | None:
    """Convert a ValidationErrorData message into ValidationDetail.

    Unknown enum numbers (newer backend) are mapped to the UNSPECIFIED
    members rather than dropped, so no rejected field goes missing.

    Returns:
        ValidationDetail, or None when the message carries no field errors.
    """
    if not message.field_errors:
        return None
    field_errors = tuple(
        FieldError(
            field=_enum_or_default(FieldType, entry.field),
            errors=tuple(
                _enum_or_default(ValidationErrorCode, code) for code in entry.errors
            ),
        )
        for entry in message.field_errors
    )
    return ValidationDetail(field_errors=field_errors)


def error_code_from_response(response: Any) -> ErrorCode:
    """Return the envelope's error code, UNSPECIFIED when absent or unknown."""
    if response.WhichOneof("detail") != "error":
        return ErrorCode.ERROR_CODE_UNSPECIFIED
    return _enum_or_default(ErrorCode, response.error)


def _enum_or_default(enum_cls: Any, value: int) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return enum_cls(0)


def success_code_from_response(response: Any) -> SuccessCode:
    """Return the envelope's success code, SUCCESS_OK when absent."""
    if response.WhichOneof("detail") != "success":
        return SuccessCode.SUCCESS_OK
    return _enum_or_default(SuccessCode, response.success)
