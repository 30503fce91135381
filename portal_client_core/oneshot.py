"""Memoized one-shot async initialization."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class OneShot(Generic[T]):
    """Run an async operation once and share its outcome.

    The first caller of run() starts the operation; concurrent callers await
    the same future. A success is cached for every later call. A failure is
    propagated to everyone waiting and resets the memo, so the next call
    starts a fresh attempt.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]], *, name: str = "init"):
        self._factory = factory
        self._name = name
        self._future: asyncio.Future[T] | None = None

    @property
    def done(self) -> bool:
        """True once the operation has completed successfully."""
        return (
            self._future is not None
            and self._future.done()
            and not self._future.cancelled()
            and self._future.exception() is None
        )

    async def run(self) -> T:
        if self._future is None:
            self._future = asyncio.ensure_future(self._execute())
        return await asyncio.shield(self._future)

    async def _execute(self) -> T:
        try:
            return await self._factory()
        except BaseException as err:
            _LOGGER.warning("%s failed, will retry on next call: %s", self._name, err)
            self._future = None
            raise

    def reset(self) -> None:
        """Forget a cached success so the next run() starts over."""
        if self._future is not None and not self._future.done():
            return
        self._future = None
