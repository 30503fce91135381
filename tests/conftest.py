"""Pytest configuration and fixtures for portal_client_core tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from portal_client_core.codec import (
    build_login_data,
    build_success_response,
    encode_message,
)
from portal_client_core.endpoints import AuthEndpoints
from portal_client_core.models import UserRole
from portal_client_core.scheduler import Clock, RefreshAction, Scheduler
from portal_client_core.storage import MemoryStore
from portal_client_core.transport import PROTOBUF_CONTENT_TYPE


class FakeClock(Clock):
    """Clock whose time only moves when a test moves it."""

    def __init__(self, now: int = 1000) -> None:
        self.current = now

    def now(self) -> int:
        return self.current

    def advance(self, seconds: int) -> None:
        self.current += seconds


class ManualScheduler(Scheduler):
    """Scheduler that records the pending action; tests fire it explicitly."""

    def __init__(self, clock: FakeClock) -> None:
        self._clock = clock
        self._deadline: int | None = None
        self._action: RefreshAction | None = None
        self.arm_count = 0

    @property
    def deadline(self) -> int | None:
        return self._deadline

    def arm(self, deadline: int, action: RefreshAction) -> None:
        self._deadline = deadline
        self._action = action
        self.arm_count += 1

    def disarm(self) -> None:
        self._deadline = None
        self._action = None

    async def fire(self) -> None:
        """Advance the clock to the deadline and run the pending action."""
        assert self._action is not None, "no action armed"
        assert self._deadline is not None
        action = self._action
        self._clock.current = max(self._clock.current, self._deadline)
        self._deadline = None
        self._action = None
        await action()


def make_login_data(
    username: str = "alice",
    *,
    created_at: int = 1000,
    expires_at: int = 2000,
    role: UserRole = UserRole.USER,
) -> Any:
    """Build a LoginResponseData message for tests."""
    return build_login_data(
        username,
        f"{username}@example.com",
        created_at=created_at,
        expires_at=expires_at,
        role=role,
    )


def create_mock_response(
    status: int = 200,
    read_data: bytes | None = None,
    content_type: str | None = PROTOBUF_CONTENT_TYPE,
) -> AsyncMock:
    """Create a configured mock response.

    Args:
        status: HTTP status code
        read_data: Data to return from read() call
        content_type: Content-Type response header

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status
    response.headers = {"Content-Type": content_type} if content_type else {}

    if read_data is not None:
        response.read.return_value = read_data

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response


def success_body(payload: Any = None) -> bytes:
    """Encode a SUCCESS envelope around payload."""
    return encode_message(build_success_response(payload))


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    return MagicMock(spec=aiohttp.ClientSession)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> ManualScheduler:
    return ManualScheduler(clock)


@pytest.fixture
def storage() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def mock_auth() -> AsyncMock:
    """AuthEndpoints double; tests set return values per call."""
    return AsyncMock(spec=AuthEndpoints)
