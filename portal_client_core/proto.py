"""Protocol Buffer schema for the portal API (package ``portal.v1``).

The descriptors mirror ``proto/api.proto`` and are assembled at import time
into a private descriptor pool, so no generated ``*_pb2`` module is needed.
Enum descriptors are derived from the IntEnums in ``models`` and ``errors``,
which keeps the wire numbers and the Python constants in one place.
"""

from __future__ import annotations

from enum import IntEnum

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

from .errors import ErrorCode
from .models import (
    FieldType,
    PasswordStrength,
    ResponseCode,
    SuccessCode,
    UserRole,
    ValidationErrorCode,
)

PACKAGE = "portal.v1"

_FDP = descriptor_pb2.FieldDescriptorProto
_STRING = _FDP.TYPE_STRING
_INT64 = _FDP.TYPE_INT64
_ENUM = _FDP.TYPE_ENUM
_MESSAGE = _FDP.TYPE_MESSAGE

_ENUMS: tuple[type[IntEnum], ...] = (
    ResponseCode,
    SuccessCode,
    ErrorCode,
    FieldType,
    ValidationErrorCode,
    PasswordStrength,
    UserRole,
)

# (message name, [(field name, number, type, type name, repeated, oneof)])
_MESSAGES: tuple[tuple[str, list[tuple[str, int, int, str | None, bool, str | None]]], ...] = (
    ("Empty", []),
    (
        "RegistrationRequest",
        [
            ("username", 1, _STRING, None, False, None),
            ("email", 2, _STRING, None, False, None),
            ("password", 3, _STRING, None, False, None),
        ],
    ),
    (
        "LoginRequest",
        [
            ("username", 1, _STRING, None, False, None),
            ("password", 2, _STRING, None, False, None),
        ],
    ),
    ("EmailVerificationRequest", [("token", 1, _STRING, None, False, None)]),
    ("PasswordResetRequest", [("email", 1, _STRING, None, False, None)]),
    (
        "PasswordResetCompleteRequest",
        [
            ("token", 1, _STRING, None, False, None),
            ("new_password", 2, _STRING, None, False, None),
        ],
    ),
    ("SetCounterRequest", [("value", 1, _INT64, None, False, None)]),
    (
        "LoginResponseData",
        [
            ("username", 1, _STRING, None, False, None),
            ("email", 2, _STRING, None, False, None),
            ("session_expires_at", 3, _INT64, None, False, None),
            ("session_created_at", 4, _INT64, None, False, None),
            ("role", 5, _ENUM, "UserRole", False, None),
        ],
    ),
    ("CounterData", [("value", 1, _INT64, None, False, None)]),
    (
        "ValidationFieldError",
        [
            ("field", 1, _ENUM, "FieldType", False, None),
            ("errors", 2, _ENUM, "ValidationErrorCode", True, None),
        ],
    ),
    (
        "ValidationErrorData",
        [("field_errors", 1, _MESSAGE, "ValidationFieldError", True, None)],
    ),
    (
        "ApiData",
        [
            ("login_response", 1, _MESSAGE, "LoginResponseData", False, "payload"),
            ("counter_data", 2, _MESSAGE, "CounterData", False, "payload"),
            ("empty", 3, _MESSAGE, "Empty", False, "payload"),
        ],
    ),
    (
        "ApiResponse",
        [
            ("code", 1, _ENUM, "ResponseCode", False, None),
            ("success", 2, _ENUM, "SuccessCode", False, "detail"),
            ("error", 3, _ENUM, "ErrorCode", False, "detail"),
            ("data", 4, _MESSAGE, "ApiData", False, None),
            ("validation", 5, _MESSAGE, "ValidationErrorData", False, None),
        ],
    ),
)


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Assemble the FileDescriptorProto for portal/v1/api.proto."""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="portal/v1/api.proto",
        package=PACKAGE,
        syntax="proto3",
    )

    for enum_cls in _ENUMS:
        enum_proto = file_proto.enum_type.add(name=enum_cls.__name__)
        for member in enum_cls:
            enum_proto.value.add(name=member.name, number=member.value)

    for message_name, fields in _MESSAGES:
        message_proto = file_proto.message_type.add(name=message_name)
        oneofs: list[str] = []
        for name, number, field_type, type_name, repeated, oneof in fields:
            field_proto = message_proto.field.add(
                name=name,
                number=number,
                type=field_type,
                label=_FDP.LABEL_REPEATED if repeated else _FDP.LABEL_OPTIONAL,
            )
            if type_name is not None:
                field_proto.type_name = f".{PACKAGE}.{type_name}"
            if oneof is not None:
                if oneof not in oneofs:
                    oneofs.append(oneof)
                    message_proto.oneof_decl.add(name=oneof)
                field_proto.oneof_index = oneofs.index(oneof)

    return file_proto


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(_build_file_descriptor().SerializeToString())


def _message_class(name: str) -> type:
    return message_factory.GetMessageClass(
        _POOL.FindMessageTypeByName(f"{PACKAGE}.{name}")
    )


Empty = _message_class("Empty")
RegistrationRequest = _message_class("RegistrationRequest")
LoginRequest = _message_class("LoginRequest")
EmailVerificationRequest = _message_class("EmailVerificationRequest")
PasswordResetRequest = _message_class("PasswordResetRequest")
PasswordResetCompleteRequest = _message_class("PasswordResetCompleteRequest")
SetCounterRequest = _message_class("SetCounterRequest")
LoginResponseData = _message_class("LoginResponseData")
CounterData = _message_class("CounterData")
ValidationFieldError = _message_class("ValidationFieldError")
ValidationErrorData = _message_class("ValidationErrorData")
ApiData = _message_class("ApiData")
ApiResponse = _message_class("ApiResponse")

__all__ = [
    "PACKAGE",
    "ApiData",
    "ApiResponse",
    "CounterData",
    "EmailVerificationRequest",
    "Empty",
    "LoginRequest",
    "LoginResponseData",
    "PasswordResetCompleteRequest",
    "PasswordResetRequest",
    "RegistrationRequest",
    "SetCounterRequest",
    "ValidationErrorData",
    "ValidationFieldError",
]
