"""Typed portal API endpoints built on ApiGateway."""

from __future__ import annotations

import logging
from typing import Any, Final

from .codec import (
    PAYLOAD_COUNTER,
    PAYLOAD_LOGIN,
    build_email_verification_request,
    build_login_request,
    build_password_reset_complete_request,
    build_password_reset_request,
    build_registration_request,
    build_set_counter_request,
)
from .gateway import ApiGateway, Endpoint

_LOGGER = logging.getLogger(__name__)

REGISTER: Final = Endpoint("/register", "POST")
LOGIN: Final = Endpoint("/login", "POST")
LOGOUT: Final = Endpoint("/logout", "POST")
AUTH_CHECK: Final = Endpoint("/auth/check", "GET")
AUTH_REFRESH: Final = Endpoint("/auth/refresh", "POST")
VERIFY_EMAIL: Final = Endpoint("/verify-email", "POST")
REQUEST_PASSWORD_RESET: Final = Endpoint("/request-password-reset", "POST")
COMPLETE_PASSWORD_RESET: Final = Endpoint("/complete-password-reset", "POST")
COUNTER_GET: Final = Endpoint("/counter/get", "GET")
COUNTER_SET: Final = Endpoint("/counter/set", "POST")
HEALTH: Final = Endpoint("/health", "GET")


class AuthEndpoints:
    """Authentication operations.

    Login-shaped calls (login, check_auth, refresh_session) return the
    LoginResponseData payload; the others return the SUCCESS envelope so
    callers can show its translated success message.
    """

    def __init__(self, gateway: ApiGateway) -> None:
        self._gateway = gateway

    @property
    def gateway(self) -> ApiGateway:
        return self._gateway

    async def register(self, username: str, email: str, password: str) -> Any:
        """Register a new user account."""
        request = build_registration_request(username, email, password)
        return await self._gateway.call(REGISTER, request)

    async def login(self, username: str, password: str) -> Any:
        """Login with username and password."""
        response = await self._gateway.call(
            LOGIN, build_login_request(username, password), expect=PAYLOAD_LOGIN
        )
        return response.data.login_response

    async def logout(self) -> Any:
        """Logout the current user session."""
        return await self._gateway.call(LOGOUT)

    async def check_auth(self) -> Any:
        """Check if the current session cookie is authenticated."""
        response = await self._gateway.call(AUTH_CHECK, expect=PAYLOAD_LOGIN)
        return response.data.login_response

    async def refresh_session(self) -> Any:
        """Refresh the current session, extending its expiry time."""
        response = await self._gateway.call(AUTH_REFRESH, expect=PAYLOAD_LOGIN)
        return response.data.login_response

    async def verify_email(self, token: str) -> Any:
        """Verify email address with verification token."""
        return await self._gateway.call(
            VERIFY_EMAIL, build_email_verification_request(token)
        )

    async def request_password_reset(self, email: str) -> Any:
        """Request a password reset email."""
        return await self._gateway.call(
            REQUEST_PASSWORD_RESET, build_password_reset_request(email)
        )

    async def complete_password_reset(self, token: str, new_password: str) -> Any:
        """Complete password reset with token and new password."""
        return await self._gateway.call(
            COMPLETE_PASSWORD_RESET,
            build_password_reset_complete_request(token, new_password),
        )

    async def health_check(self) -> bool:
        """Best-effort liveness probe; never raises."""
        try:
            await self._gateway.call(HEALTH)
        except Exception as err:  # any failure means "not alive"
            _LOGGER.debug("Health check failed: %s", err)
            return False
        return True


class CounterEndpoints:
    """Per-user counter stored by the backend."""

    def __init__(self, gateway: ApiGateway) -> None:
        self._gateway = gateway

    async def get_counter(self) -> int:
        """Get the current counter value."""
        response = await self._gateway.call(COUNTER_GET, expect=PAYLOAD_COUNTER)
        return int(response.data.counter_data.value)

    async def set_counter(self, value: int) -> int:
        """Set the counter and return the value the backend stored."""
        response = await self._gateway.call(
            COUNTER_SET, build_set_counter_request(value), expect=PAYLOAD_COUNTER
        )
        return int(response.data.counter_data.value)
