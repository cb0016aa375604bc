"""Localization adapters — plug formwatch into an i18n system.

A ``LocalizationProvider`` supplies the current language and translates
message and attribute keys. Formwatch calls both once per validation
pass and never caches, so a provider with expensive lookups should
memoize on its own.

Two adapters ship with formwatch:

- ``NoopLocalizationProvider``: keys are returned untranslated, the
  language comes from the process environment.
- ``CatalogLocalizationProvider``: in-memory catalogs per language::

      i18n = CatalogLocalizationProvider(
          {
              "en": {"field.name": "Full name"},
              "de": {"field.name": "Vollständiger Name"},
          },
          language="de",
      )
      i18n.translate("field.name")  # "Vollständiger Name"
"""

import locale
import os
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

DEFAULT_LANGUAGE = "en"

# Checked in the same order as gettext
_LANGUAGE_ENV_VARS = ("LANGUAGE", "LC_ALL", "LC_MESSAGES", "LANG")


@runtime_checkable
class LocalizationProvider(Protocol):
    """Adapter for a localization library."""

    def translate(self, key: str) -> str:
        """Translate *key* using the current language."""
        ...

    def language(self) -> str:
        """Return the current language code, e.g. ``"en"`` or ``"de-AT"``."""
        ...


def detect_language() -> str:
    """Best-effort language code from the process environment.

    Looks at the gettext environment variables first, then at
    ``locale.getlocale()``. Values like ``"de_DE.UTF-8"`` become
    ``"de_DE"``. ``C`` and ``POSIX`` count as unset.
    """
    for var in _LANGUAGE_ENV_VARS:
        value = os.environ.get(var, "")
        # LANGUAGE may hold a priority list: "de:en"
        value = value.split(":")[0].split(".")[0]
        if value and value not in ("C", "POSIX"):
            return value
    code = locale.getlocale()[0]
    if code and code not in ("C", "POSIX"):
        return code
    return DEFAULT_LANGUAGE


class NoopLocalizationProvider:
    """Identity translation with an environment-detected language."""

    __slots__ = ()

    def translate(self, key: str) -> str:
        return key

    def language(self) -> str:
        return detect_language()


class CatalogLocalizationProvider:
    """Dictionary-backed translations for a switchable language.

    Unknown keys (or an unknown language) fall back to the key itself.
    Catalogs are looked up by the full language code first, then by its
    two-letter prefix, so ``"de-AT"`` finds a ``"de"`` catalog.
    """

    __slots__ = ("_catalogs", "_language")

    def __init__(
        self,
        catalogs: Mapping[str, Mapping[str, str]],
        *,
        language: str = DEFAULT_LANGUAGE,
    ) -> None:
        self._catalogs = {code: dict(entries) for code, entries in catalogs.items()}
        self._language = language

    def set_language(self, language: str) -> None:
        self._language = language

    def language(self) -> str:
        return self._language

    def translate(self, key: str) -> str:
        catalog = self._catalogs.get(self._language) or self._catalogs.get(self._language[:2])
        if not catalog:
            return key
        return catalog.get(key, key)
