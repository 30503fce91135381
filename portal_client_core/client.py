"""PortalClient: wiring of transport, gateway, endpoints and session store.

PortalClient is the single entry point applications use. It builds every
component from a PortalConfig, owns the aiohttp.ClientSession it creates,
and rehydrates the persisted session on start().
"""

from __future__ import annotations

import logging
from types import TracebackType

import aiohttp

from .config import PortalConfig
from .endpoints import AuthEndpoints, CounterEndpoints
from .gateway import ApiGateway
from .oneshot import OneShot
from .scheduler import Clock, Scheduler
from .session import SessionStore
from .storage import JsonFileStore, KeyValueStore, MemoryStore
from .translator import DEFAULT_LOCALES_DIR, CatalogTranslator, Translator
from .transport import PortalHttpTransport, create_client_session

_LOGGER = logging.getLogger(__name__)


class PortalClient:
    """Async client for the portal API.

    Usage:
        async with PortalClient(PortalConfig.from_env()) as client:
            await client.store.login("alice", "secret")
            value = await client.counter.get_counter()

    When no ClientSession is given, one is created (this requires a running
    event loop) and closed by close().
    """

    def __init__(
        self,
        config: PortalConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        storage: KeyValueStore | None = None,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
        translator: Translator | None = None,
    ) -> None:
        self._config = config or PortalConfig()
        self._owns_session = session is None
        self._session = session or create_client_session()

        if storage is None:
            if self._config.storage_path is not None:
                storage = JsonFileStore(self._config.storage_path)
            else:
                storage = MemoryStore()
        if translator is None:
            translator = CatalogTranslator(
                self._config.locales_dir or DEFAULT_LOCALES_DIR
            )

        transport = PortalHttpTransport(
            self._session,
            self._config.base_url,
            timeout=self._config.request_timeout,
        )
        self._gateway = ApiGateway(
            transport, translator=translator, locale=self._config.locale
        )
        self._auth = AuthEndpoints(self._gateway)
        self._counter = CounterEndpoints(self._gateway)
        self._store = SessionStore(
            self._auth, storage=storage, clock=clock, scheduler=scheduler
        )
        self._start = OneShot(self._do_start, name="Client start")
        self._closed = False

    @property
    def config(self) -> PortalConfig:
        return self._config

    @property
    def gateway(self) -> ApiGateway:
        return self._gateway

    @property
    def auth(self) -> AuthEndpoints:
        return self._auth

    @property
    def counter(self) -> CounterEndpoints:
        return self._counter

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def started(self) -> bool:
        return self._start.done

    async def start(self) -> None:
        """Load catalogs and rehydrate the stored session, once."""
        await self._start.run()

    async def _do_start(self) -> None:
        await self._gateway.translator.initialize()
        self._store.ensure_loaded()
        _LOGGER.debug(
            "Client started for %s (%s)",
            self._config.base_url,
            self._store.state.value,
        )

    async def close(self) -> None:
        """Cancel the refresh timer and close the owned HTTP session."""
        if self._closed:
            return
        self._closed = True
        self._store.close()
        if self._owns_session:
            await self._session.close()

    async def __aenter__(self) -> PortalClient:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
