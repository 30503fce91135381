"""Client configuration.

Configuration is data: it is read from the environment or a YAML file and
handed to PortalClient. Nothing here opens connections.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .translator import DEFAULT_LOCALE

DEFAULT_BASE_URL = "http://localhost:4000/api"
DEFAULT_REQUEST_TIMEOUT = 30.0

ENV_PREFIX = "PORTAL_"


@dataclass(frozen=True)
class PortalConfig:
    """Settings for one PortalClient.

    Attributes:
        base_url: API root; endpoint paths are appended to it.
        request_timeout: Total per-request timeout in seconds.
        locale: Locale used for translated error messages.
        storage_path: JSON file for the session mirror. None keeps the
            session in memory only.
        locales_dir: Directory of ``<locale>.yaml`` catalogs. None uses the
            bundled catalogs.
    """

    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    locale: str = DEFAULT_LOCALE
    storage_path: Path | None = None
    locales_dir: Path | None = None

    def __post_init__(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigError(f"base_url must be an http(s) URL: {self.base_url!r}")
        if self.request_timeout <= 0:
            raise ConfigError(
                f"request_timeout must be positive: {self.request_timeout}"
            )
        if not self.locale:
            raise ConfigError("locale must not be empty")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PortalConfig:
        """Build config from a plain mapping, ignoring unknown keys.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        kwargs: dict[str, Any] = {}
        if (base_url := data.get("base_url")) is not None:
            kwargs["base_url"] = str(base_url)
        if (timeout := data.get("request_timeout")) is not None:
            try:
                kwargs["request_timeout"] = float(timeout)
            except (TypeError, ValueError) as err:
                raise ConfigError(f"Invalid request_timeout: {timeout!r}") from err
        if (locale := data.get("locale")) is not None:
            kwargs["locale"] = str(locale)
        if storage_path := data.get("storage_path"):
            kwargs["storage_path"] = Path(storage_path).expanduser()
        if locales_dir := data.get("locales_dir"):
            kwargs["locales_dir"] = Path(locales_dir).expanduser()
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PortalConfig:
        """Build config from ``PORTAL_*`` environment variables.

        Recognized: PORTAL_BASE_URL, PORTAL_REQUEST_TIMEOUT, PORTAL_LOCALE,
        PORTAL_STORAGE_PATH, PORTAL_LOCALES_DIR.
        """
        env = os.environ if environ is None else environ
        data = {
            key[len(ENV_PREFIX) :].lower(): value
            for key, value in env.items()
            if key.startswith(ENV_PREFIX) and value
        }
        return cls.from_mapping(data)

    @classmethod
    def from_yaml(cls, path: Path) -> PortalConfig:
        """Load config from a YAML mapping file.

        Raises:
            ConfigError: If the file is missing, unparsable or not a mapping.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            with path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as err:
            raise ConfigError(f"Invalid YAML in {path}: {err}") from err
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must be a mapping")
        return cls.from_mapping(data)
