"""Tagged success/failure values for gateway calls."""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import ErrorKind, GatewayError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying the call's value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    """Failed outcome carrying the error kind and the original error."""

    kind: ErrorKind
    error: GatewayError

    @property
    def is_ok(self) -> bool:
        return False


Result = Ok[T] | Err


async def settle(awaitable: Awaitable[T]) -> Ok[T] | Err:
    """Await a gateway-backed call and fold GatewayError into Err.

    Any other exception propagates unchanged.
    """
    try:
        value = await awaitable
    except GatewayError as err:
        return Err(kind=err.kind, error=err)
    return Ok(value)
