"""Domain types shared by the codec, gateway and session store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

_LOGGER = logging.getLogger(__name__)


class ResponseCode(IntEnum):
    """Envelope discriminant."""

    RESPONSE_CODE_UNSPECIFIED = 0
    SUCCESS = 1
    ERROR = 2


class SuccessCode(IntEnum):
    """Success detail carried next to a SUCCESS envelope."""

    SUCCESS_CODE_UNSPECIFIED = 0
    SUCCESS_OK = 1
    SUCCESS_REGISTERED = 2
    SUCCESS_LOGGED_IN = 3
    SUCCESS_LOGGED_OUT = 4
    SUCCESS_EMAIL_VERIFIED = 5
    SUCCESS_PASSWORD_RESET_REQUESTED = 6
    SUCCESS_PASSWORD_RESET_COMPLETED = 7


class FieldType(IntEnum):
    """Fields that can carry validation errors."""

    FIELD_TYPE_UNSPECIFIED = 0
    USERNAME = 1
    EMAIL = 2
    PASSWORD = 3
    POST_TITLE = 4
    POST_DESCRIPTION = 5
    COMMENT_CONTENT = 6


class ValidationErrorCode(IntEnum):
    """Per-field validation failure codes."""

    VALIDATION_ERROR_CODE_UNSPECIFIED = 0
    REQUIRED = 1
    TOO_SHORT = 2
    TOO_LONG = 3
    INVALID_CHARACTERS = 4
    INVALID_FORMAT = 5
    TOO_FEW_UPPERCASE_LETTERS = 6
    TOO_FEW_LOWERCASE_LETTERS = 7
    TOO_FEW_DIGITS = 8
    TOO_FEW_SPECIAL_CHARACTERS = 9


class PasswordStrength(IntEnum):
    """Password strength levels reported by the password validator."""

    PASSWORD_STRENGTH_UNSPECIFIED = 0
    PASSWORD_STRENGTH_WEAK = 1
    PASSWORD_STRENGTH_MEDIUM = 2
    PASSWORD_STRENGTH_STRONG = 3
    PASSWORD_STRENGTH_CIA = 4


class UserRole(IntEnum):
    """User roles for RBAC."""

    USER = 0
    ADMIN = 1

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> UserRole:
        try:
            return cls[label.upper()]
        except KeyError as err:
            raise ValueError(f"Unknown user role: {label!r}") from err


@dataclass(frozen=True)
class FieldError:
    """Validation failure of a single field.

    Attributes:
        field: Which field was rejected.
        errors: Every error code reported for the field.
    """

    field: FieldType
    errors: tuple[ValidationErrorCode, ...] = ()


@dataclass(frozen=True)
class ValidationDetail:
    """Structured validation failure covering every rejected field."""

    field_errors: tuple[FieldError, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Session:
    """Client-held record of an authenticated identity and its validity window.

    Attributes:
        username: Account name.
        email: Account email.
        role: Account role.
        created_at: Epoch seconds at which the backend created the session.
        expires_at: Epoch seconds at which the session stops being valid.
    """

    username: str
    email: str
    role: UserRole
    created_at: int
    expires_at: int

    def __post_init__(self) -> None:
        if self.expires_at <= self.created_at:
            raise ValueError(
                f"Session expires_at ({self.expires_at}) must be after "
                f"created_at ({self.created_at})"
            )

    def is_valid_at(self, now: int) -> bool:
        """Return True while the session has not expired at epoch second now."""
        return self.expires_at > now

    @classmethod
    def from_login_data(cls, data: Any) -> Session:
        """Build a session from a LoginResponseData protobuf message.

        A role number this client does not know maps to USER.
        """
        try:
            role = UserRole(data.role)
        except ValueError:
            _LOGGER.warning(
                "[%s] Unknown role %d, treating as %s",
                data.username,
                data.role,
                UserRole.USER.label,
            )
            role = UserRole.USER
        return cls(
            username=data.username,
            email=data.email,
            role=role,
            created_at=int(data.session_created_at),
            expires_at=int(data.session_expires_at),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the durable mirror."""
        return {
            "username": self.username,
            "email": self.email,
            "role": self.role.label,
            "sessionExpiresAt": self.expires_at,
            "sessionCreatedAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        """Inverse of to_dict.

        Raises:
            KeyError: If a required key is missing.
            ValueError: If a value is malformed or the window is empty.
        """
        return cls(
            username=str(data["username"]),
            email=str(data["email"]),
            role=UserRole.from_label(str(data.get("role", "user"))),
            created_at=int(data["sessionCreatedAt"]),
            expires_at=int(data["sessionExpiresAt"]),
        )
