# apps/htmlclient/context.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional

from django.conf import settings

from apps.htmlclient.cache import DEFAULT_TTL, FragmentCache, SessionFragmentCache
from apps.htmlclient.config.loader import ConfigProvider
from apps.htmlclient.i18n import TranslationService

DEFAULT_SITE = "default"


def default_site() -> str:
    return getattr(settings, "HTMLCLIENT_SITE_ID", DEFAULT_SITE) or DEFAULT_SITE


@dataclass
class Context:
    """
    Everything a client needs from the surrounding framework for one request:
    configuration, locale, fragment caches, translator and the request itself.
    """

    config: ConfigProvider = field(default_factory=ConfigProvider)
    site: str = field(default_factory=default_site)
    locale: str = ""
    request: Optional[Any] = None
    translator: Optional[TranslationService] = None
    cache: Optional[FragmentCache] = None
    session_cache: Optional[SessionFragmentCache] = None

    def __post_init__(self) -> None:
        if not self.locale:
            self.locale = getattr(settings, "LANGUAGE_CODE", "en") or "en"
        ttl = self.config.get("client/html/common/cache/ttl", None)
        if self.translator is None:
            self.translator = TranslationService(locale=self.locale)
        if self.cache is None:
            self.cache = FragmentCache(request=self.request, ttl_seconds=ttl or DEFAULT_TTL)
        if self.session_cache is None:
            self.session_cache = SessionFragmentCache(request=self.request)

    @classmethod
    def from_request(cls, request, *, config: Optional[ConfigProvider] = None, site: str | None = None) -> "Context":
        site_id = site or getattr(request, "site_version", None) or default_site()
        locale = getattr(request, "LANGUAGE_CODE", None) or ""
        return cls(config=config or ConfigProvider(), site=site_id, locale=locale, request=request)

    @property
    def session(self):
        return getattr(self.request, "session", None) if self.request is not None else None

    def translate(self, catalog: str, message: str) -> str:
        return self.translator.translate(catalog, message)
