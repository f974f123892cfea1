from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import yaml
from django.conf import settings
from django.utils import translation

logger = logging.getLogger("htmlclient.i18n")


def _normalize_locale(locale: str | None) -> str:
    if not locale:
        return (getattr(settings, "LANGUAGE_CODE", "en") or "en").lower()
    return str(locale).strip().lower().replace("_", "-") or "en"


class TranslationProvider:
    def get(self, catalog: str, message: str, *, locale: str) -> Optional[str]:
        raise NotImplementedError


class YamlCatalogProvider(TranslationProvider):
    """
    YAML-backed provider reading configs/htmlclient/i18n/<locale>.yml.

    Each file maps a catalog name ("client", "controller/frontend", "mshop")
    to a {message: translation} mapping. Region locales fall back to the base
    language file ("fr-ma" -> "fr").
    """

    _catalog_cache: Dict[str, Dict[str, Any]] = {}

    def __init__(self, root: Optional[Path] = None) -> None:
        base_dir = Path(getattr(settings, "BASE_DIR", Path(__file__).resolve().parents[2]))
        self._root = Path(root) if root is not None else base_dir / "configs" / "htmlclient" / "i18n"

    def _catalog(self, locale: str) -> Dict[str, Any]:
        cache_key = f"{self._root}:{locale}"
        if cache_key in self._catalog_cache:
            return self._catalog_cache[cache_key]
        data: Dict[str, Any] = {}
        for suffix in (".yml", ".yaml"):
            path = self._root / f"{locale}{suffix}"
            if not path.exists():
                continue
            try:
                loaded = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            except (OSError, yaml.YAMLError) as exc:
                logger.warning("Unable to load translation catalog %s: %s", path, exc)
                loaded = {}
            if isinstance(loaded, Mapping):
                data = dict(loaded)
            break
        self._catalog_cache[cache_key] = data
        return data

    def get(self, catalog: str, message: str, *, locale: str) -> Optional[str]:
        candidates = [locale]
        if "-" in locale:
            candidates.append(locale.split("-", 1)[0])
        for loc in candidates:
            section = self._catalog(loc).get(catalog)
            if isinstance(section, Mapping):
                value = section.get(message)
                if isinstance(value, str) and value.strip():
                    return value
        return None

    @classmethod
    def clear_cache(cls) -> None:
        cls._catalog_cache.clear()


class GettextProvider(TranslationProvider):
    """Falls back on Django's gettext catalogs (LOCALE_PATHS)."""

    def get(self, catalog: str, message: str, *, locale: str) -> Optional[str]:
        with translation.override(locale):
            value = translation.gettext(message)
        return value if value != message else None


class TranslationService:
    def __init__(
        self,
        *,
        locale: str | None = None,
        providers: Optional[Iterable[TranslationProvider]] = None,
    ) -> None:
        self.locale = _normalize_locale(locale)
        self.providers = list(providers) if providers is not None else [
            _yaml_provider,
            _gettext_provider,
        ]
        self._missing_keys: set[tuple[str, str]] = set()

    @property
    def missing_keys(self) -> set[tuple[str, str]]:
        return set(self._missing_keys)

    def translate(self, catalog: str, message: str) -> str:
        if not isinstance(message, str) or not message.strip():
            return message
        for provider in self.providers:
            value = provider.get(catalog, message, locale=self.locale)
            if value is not None:
                return value
        self._missing_keys.add((catalog, message))
        return message


_yaml_provider = YamlCatalogProvider()
_gettext_provider = GettextProvider()

__all__ = ["TranslationService", "YamlCatalogProvider", "GettextProvider", "TranslationProvider"]
