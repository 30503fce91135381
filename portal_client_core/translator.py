"""Locale-aware message lookup for response and validation codes.

Catalogs are YAML files named ``<locale>.yaml`` mapping code names
(``INVALID_CREDENTIALS``, ``USERNAME_TOO_SHORT``, ...) to messages. Messages
may contain ``%{name}`` placeholders.
"""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .models import FieldType, ValidationDetail, ValidationErrorCode
from .oneshot import OneShot

_LOGGER = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"
DEFAULT_LOCALES_DIR = Path(__file__).parent / "locales"

_PLACEHOLDER = re.compile(r"%\{(\w+)\}")

# Limits enforced by the field validators; used to fill message placeholders.
FIELD_LIMITS: dict[tuple[FieldType, ValidationErrorCode], dict[str, int]] = {
    (FieldType.USERNAME, ValidationErrorCode.TOO_SHORT): {"min": 3},
    (FieldType.USERNAME, ValidationErrorCode.TOO_LONG): {"max": 20},
    (FieldType.PASSWORD, ValidationErrorCode.TOO_SHORT): {"min": 8},
    (FieldType.PASSWORD, ValidationErrorCode.TOO_LONG): {"max": 128},
    (FieldType.PASSWORD, ValidationErrorCode.TOO_FEW_UPPERCASE_LETTERS): {"min": 1},
    (FieldType.PASSWORD, ValidationErrorCode.TOO_FEW_LOWERCASE_LETTERS): {"min": 1},
    (FieldType.PASSWORD, ValidationErrorCode.TOO_FEW_DIGITS): {"min": 1},
    (FieldType.PASSWORD, ValidationErrorCode.TOO_FEW_SPECIAL_CHARACTERS): {"min": 1},
}


class Translator(ABC):
    """Abstract interface for code-to-message translation."""

    async def initialize(self) -> None:
        """Prepare catalogs. No-op unless overridden."""

    @abstractmethod
    def translate(
        self, code: str, locale: str, params: Mapping[str, Any] | None = None
    ) -> str:
        """Return the message for code in locale."""

    def translate_validation(self, detail: ValidationDetail, locale: str) -> str:
        """Translate every field error in detail, joined with ", "."""
        messages: list[str] = []
        for field_error in detail.field_errors:
            for error_code in field_error.errors:
                key = f"{field_error.field.name}_{error_code.name}"
                params = FIELD_LIMITS.get((field_error.field, error_code))
                messages.append(self.translate(key, locale, params))
        return ", ".join(messages)


class CodeNameTranslator(Translator):
    """Returns the code itself. Used when no catalog is configured."""

    def translate(
        self, code: str, locale: str, params: Mapping[str, Any] | None = None
    ) -> str:
        return code


def _load_yaml(path: Path) -> dict[str, str]:
    """Load a catalog file with error handling."""
    if not path.exists():
        raise ConfigError(f"Catalog not found: {path}")
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Catalog {path} must be a mapping")
    return {str(key): str(value) for key, value in data.items()}


class CatalogTranslator(Translator):
    """Translator backed by YAML catalogs on disk.

    Lookup falls back from the requested locale to the default locale, and
    from there to the code name itself.

    Usage:
        translator = CatalogTranslator()
        await translator.initialize()
        translator.translate("INVALID_CREDENTIALS", "de")
    """

    def __init__(
        self,
        locales_dir: Path = DEFAULT_LOCALES_DIR,
        *,
        default_locale: str = DEFAULT_LOCALE,
    ) -> None:
        self._locales_dir = locales_dir
        self._default_locale = default_locale
        self._catalogs: dict[str, dict[str, str]] = {}
        self._init = OneShot(self._load_async, name="Catalog load")

    @property
    def loaded_locales(self) -> tuple[str, ...]:
        return tuple(sorted(self._catalogs))

    async def initialize(self) -> None:
        """Load all catalogs once; concurrent callers share the load."""
        await self._init.run()

    async def _load_async(self) -> None:
        self._catalogs = await asyncio.to_thread(self.load_catalogs)

    def load_catalogs(self) -> dict[str, dict[str, str]]:
        """Read every ``*.yaml`` catalog in the locales directory.

        Raises:
            ConfigError: If the directory or the default catalog is missing,
                or a catalog is not a mapping.
        """
        if not self._locales_dir.is_dir():
            raise ConfigError(f"Locales directory not found: {self._locales_dir}")
        catalogs = {
            path.stem: _load_yaml(path)
            for path in sorted(self._locales_dir.glob("*.yaml"))
        }
        if self._default_locale not in catalogs:
            raise ConfigError(
                f"Default locale {self._default_locale!r} has no catalog in "
                f"{self._locales_dir}"
            )
        _LOGGER.debug("Loaded catalogs: %s", ", ".join(catalogs))
        return catalogs

    def translate(
        self, code: str, locale: str, params: Mapping[str, Any] | None = None
    ) -> str:
        if not self._catalogs:
            _LOGGER.debug("Catalogs not loaded, returning code %s", code)
            return code

        message = self._catalogs.get(locale, {}).get(code)
        if message is None:
            message = self._catalogs[self._default_locale].get(code, code)

        if params:
            message = _PLACEHOLDER.sub(
                lambda m: str(params.get(m.group(1), m.group(0))), message
            )
        return message
