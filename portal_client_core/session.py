"""Client-side session lifecycle manager.

SessionStore is the single owner of the authenticated identity. It handles:
- Login/logout and server-side session checks
- Midpoint refresh scheduling through an injected Scheduler
- Mirroring the session into a durable KeyValueStore for restart survival
- Rehydrating (or discarding) the mirrored session on startup

States are ANONYMOUS and AUTHENTICATED. Every transition replaces the whole
session and bumps a generation counter; a refresh or check whose result
arrives after a newer transition is discarded.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from .endpoints import AuthEndpoints
from .errors import ErrorCode, GatewayError
from .models import Session, UserRole
from .result import Err, Ok, settle
from .scheduler import Clock, LoopScheduler, Scheduler, SystemClock, compute_refresh_at
from .storage import KeyValueStore

_LOGGER = logging.getLogger(__name__)

STORAGE_USER_KEY = "user"
STORAGE_EXPIRES_AT_KEY = "sessionExpiresAt"
STORAGE_CREATED_AT_KEY = "sessionCreatedAt"
STORAGE_KEYS = (STORAGE_USER_KEY, STORAGE_EXPIRES_AT_KEY, STORAGE_CREATED_AT_KEY)


class SessionState(Enum):
    """Authentication state of a SessionStore."""

    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class SessionStore:
    """Owner of the current session, its refresh timer and durable mirror.

    Usage (inside a running event loop, or with a LoopScheduler bound to
    one):
        store = SessionStore(auth, storage=JsonFileStore(path))
        store.ensure_loaded()
        await store.login("alice", "secret")
        store.is_session_valid()
        await store.logout()
    """

    def __init__(
        self,
        auth: AuthEndpoints,
        *,
        storage: KeyValueStore,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        """Initialize store.

        Args:
            auth: Endpoints used for login, logout, check and refresh.
            storage: Durable mirror; only this store writes its session keys.
            clock: Time source (default: wall clock).
            scheduler: Refresh timer slot (default: asyncio call_later).
        """
        self._auth = auth
        self._storage = storage
        self._clock = clock or SystemClock()
        self._scheduler = scheduler or LoopScheduler(self._clock)

        self._session: Session | None = None
        self._state = SessionState.ANONYMOUS
        self._generation = 0
        self._loaded = False

        self._state_callback: Callable[[SessionState], None] | None = None

    # -------------------------------------------------------------------------
    # Public API: State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def user(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def is_admin(self) -> bool:
        return self._session is not None and self._session.role is UserRole.ADMIN

    @property
    def session_expires_at(self) -> int | None:
        return self._session.expires_at if self._session else None

    @property
    def session_created_at(self) -> int | None:
        return self._session.created_at if self._session else None

    @property
    def refresh_at(self) -> int | None:
        """Epoch second of the pending refresh, or None when none is armed."""
        return self._scheduler.deadline

    @property
    def generation(self) -> int:
        return self._generation

    def is_session_valid(self) -> bool:
        """Check that a session exists and has not expired."""
        return self._session is not None and self._session.is_valid_at(
            self._clock.now()
        )

    def on_state_changed(self, callback: Callable[[SessionState], None]) -> None:
        """Register callback for ANONYMOUS/AUTHENTICATED transitions."""
        self._state_callback = callback

    # -------------------------------------------------------------------------
    # Public API: Transitions
    # -------------------------------------------------------------------------

    def set_user(self, data: Session | Any | None) -> None:
        """Replace the current session.

        Args:
            data: A Session, a LoginResponseData message, or None to clear.

        Raises:
            ValueError: If a LoginResponseData carries an empty window.
        """
        if data is None:
            self.clear_user()
            return

        session = data if isinstance(data, Session) else Session.from_login_data(data)
        if not session.is_valid_at(self._clock.now()):
            _LOGGER.warning(
                "[%s] Refusing session that expired at %d",
                session.username,
                session.expires_at,
            )
            self.clear_user()
            return

        self._activate(session, persist=True)
        _LOGGER.info(
            "[%s] Session valid until %d (refresh at %s)",
            session.username,
            session.expires_at,
            self._scheduler.deadline,
        )

    def clear_user(self) -> None:
        """Drop the session, cancel the refresh timer and clear the mirror.

        Idempotent; the mirror is cleared even when already anonymous.
        """
        self._generation += 1
        self._scheduler.disarm()
        if self._session is not None:
            _LOGGER.info("[%s] Session cleared", self._session.username)
        self._session = None
        self._storage.remove_many(STORAGE_KEYS)
        self._set_state(SessionState.ANONYMOUS)

    def load(self) -> bool:
        """Rehydrate the session from the durable mirror.

        Returns:
            True when a valid session was restored. Expired, partial or
            corrupt mirrors are cleared and leave the store anonymous.

        Raises:
            RuntimeError: If the refresh timer cannot be armed; nothing is
                changed and ensure_loaded() will try again.
        """
        restored = self._load()
        self._loaded = True
        return restored

    def _load(self) -> bool:
        values = self._storage.get_many(STORAGE_KEYS)
        if not all(values):
            if any(values):
                _LOGGER.warning("Discarding partial session mirror")
                self.clear_user()
            return False

        user_str, expires_str, created_str = values
        try:
            data = json.loads(user_str)  # type: ignore[arg-type]
            session = Session.from_dict(
                {
                    **data,
                    "sessionExpiresAt": int(expires_str),  # type: ignore[arg-type]
                    "sessionCreatedAt": int(created_str),  # type: ignore[arg-type]
                }
            )
        except (ValueError, KeyError, TypeError) as err:
            _LOGGER.warning("Discarding unreadable session mirror: %s", err)
            self.clear_user()
            return False

        if not session.is_valid_at(self._clock.now()):
            _LOGGER.info(
                "[%s] Stored session expired at %d, discarding",
                session.username,
                session.expires_at,
            )
            self.clear_user()
            return False

        self._activate(session, persist=False)
        _LOGGER.info("[%s] Session restored", session.username)
        return True

    def ensure_loaded(self) -> None:
        """Run load() once, on first use."""
        if not self._loaded:
            self.load()

    async def login(self, username: str, password: str) -> Session:
        """Authenticate and become AUTHENTICATED.

        Raises:
            GatewayError: On any failure; the current state is left untouched.
        """
        data = await self._auth.login(username, password)
        session = _session_from_login_data(data)
        self.set_user(session)
        return session

    async def logout(self) -> bool:
        """End the session locally and on the backend.

        The refresh timer is cancelled before the backend call and the store
        always ends ANONYMOUS. Safe to call repeatedly.

        Returns:
            True when the backend acknowledged the logout.
        """
        self._scheduler.disarm()
        outcome = await settle(self._auth.logout())
        self.clear_user()
        if isinstance(outcome, Err):
            _LOGGER.warning(
                "Backend logout failed (%s): %s", outcome.kind.value, outcome.error
            )
            return False
        return True

    async def check_auth(self) -> bool:
        """Confirm the session with the backend.

        Success replaces the session; any failure makes the store ANONYMOUS.

        Returns:
            True when the backend confirmed an authenticated session.
        """
        return await self._sync_with_backend("check", self._auth.check_auth)

    async def refresh(self) -> bool:
        """Extend the session; any failure makes the store ANONYMOUS.

        Returns:
            True when a new session window was applied.
        """
        return await self._sync_with_backend("refresh", self._auth.refresh_session)

    def close(self) -> None:
        """Stop refreshing without changing state or the mirror.

        Cancels the timer and any refresh already running; results of calls
        still in flight are discarded.
        """
        self._generation += 1
        self._scheduler.cancel()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    async def _sync_with_backend(
        self, operation: str, call: Callable[[], Awaitable[Any]]
    ) -> bool:
        generation = self._generation
        outcome = await settle(self._fetch_session(call))

        if generation != self._generation:
            _LOGGER.debug(
                "Discarding stale %s result (generation %d, now %d)",
                operation,
                generation,
                self._generation,
            )
            return False

        if isinstance(outcome, Ok):
            self.set_user(outcome.value)
            return self.is_authenticated

        _LOGGER.warning(
            "Session %s failed (%s): %s",
            operation,
            outcome.kind.value,
            outcome.error.message,
        )
        self.clear_user()
        return False

    async def _fetch_session(self, call: Callable[[], Awaitable[Any]]) -> Session:
        return _session_from_login_data(await call())

    async def _on_refresh_due(self) -> None:
        _LOGGER.debug("Refresh timer fired")
        await self.refresh()

    def _activate(self, session: Session, *, persist: bool) -> None:
        """Make session current.

        The timer is armed first, so a scheduler error leaves the previous
        session, state and mirror in place.
        """
        self._schedule_refresh(session)
        self._generation += 1
        self._session = session
        if persist:
            self._write_mirror(session)
        self._set_state(SessionState.AUTHENTICATED)

    def _schedule_refresh(self, session: Session) -> None:
        """Arm the timer for the session midpoint, replacing any pending one."""
        refresh_at = compute_refresh_at(session.created_at, session.expires_at)
        if refresh_at <= self._clock.now():
            self._scheduler.disarm()
            _LOGGER.debug(
                "[%s] Refresh point %d already passed, not arming",
                session.username,
                refresh_at,
            )
            return

        self._scheduler.arm(refresh_at, self._on_refresh_due)

    def _write_mirror(self, session: Session) -> None:
        self._storage.set_many(
            {
                STORAGE_USER_KEY: json.dumps(session.to_dict()),
                STORAGE_EXPIRES_AT_KEY: str(session.expires_at),
                STORAGE_CREATED_AT_KEY: str(session.created_at),
            }
        )

    def _set_state(self, state: SessionState) -> None:
        """Update state and notify callback."""
        if self._state != state:
            _LOGGER.debug("State: %s → %s", self._state.value, state.value)
            self._state = state
            if self._state_callback:
                self._state_callback(state)


def _session_from_login_data(data: Any) -> Session:
    """Build a Session, treating malformed login data as a protocol error."""
    try:
        return Session.from_login_data(data)
    except ValueError as err:
        raise GatewayError(
            f"invalid session data: {err}",
            http_status=200,
            error_code=ErrorCode.INTERNAL,
        ) from err
