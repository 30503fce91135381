"""Client-side session lifecycle and binary API gateway for the portal.

Owned by the Portal Client Core team.
"""

__version__ = "0.1.0"

from .client import PortalClient
from .config import PortalConfig
from .endpoints import AuthEndpoints, CounterEndpoints
from .errors import (
    ConfigError,
    ErrorCode,
    ErrorKind,
    GatewayError,
    PortalClientError,
    PortalConnectionError,
    PortalTimeout,
    PortalTransportError,
    WireDecodeError,
)
from .gateway import ApiGateway, Endpoint
from .models import Session, UserRole, ValidationDetail
from .result import Err, Ok, Result, settle
from .scheduler import Clock, LoopScheduler, Scheduler, SystemClock
from .session import SessionState, SessionStore
from .storage import JsonFileStore, KeyValueStore, MemoryStore
from .translator import CatalogTranslator, CodeNameTranslator, Translator

__all__ = [
    "ApiGateway",
    "AuthEndpoints",
    "CatalogTranslator",
    "Clock",
    "CodeNameTranslator",
    "ConfigError",
    "CounterEndpoints",
    "Endpoint",
    "Err",
    "ErrorCode",
    "ErrorKind",
    "GatewayError",
    "JsonFileStore",
    "KeyValueStore",
    "LoopScheduler",
    "MemoryStore",
    "Ok",
    "PortalClient",
    "PortalClientError",
    "PortalConfig",
    "PortalConnectionError",
    "PortalTimeout",
    "PortalTransportError",
    "Result",
    "Scheduler",
    "Session",
    "SessionState",
    "SessionStore",
    "SystemClock",
    "Translator",
    "UserRole",
    "ValidationDetail",
    "WireDecodeError",
    "__version__",
    "settle",
]
