"""
Cache de fragments HTML.

- Backend: cache Django (django-redis en prod, locmem en test).
- Namespace de clé pour éviter les collisions inter-apps.
- L1 request-local + télémétrie légère (hits/sets) posés sur la requête.
- Variante session pour les fragments propres à un visiteur (panier).
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from django.core.cache import cache as djcache

log = logging.getLogger("htmlclient.cache")

_NS = "htmlclient:frag:"
DEFAULT_TTL = 600
SESSION_KEY = "htmlclient/basket/cache"


def _ns(key: str) -> str:
    return f"{_NS}{key}"


def _coerce_int(value, fallback: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _empty_stats() -> Dict[str, int]:
    return {"l1_hits": 0, "backend_hits": 0, "backend_sets": 0}


class FragmentCache:
    """
    Façade de cache avec L1 "request-local" et télémétrie légère.

    - L1: évite de relire le backend deux fois pour la même clé dans une requête.
    - Stats: request._htmlclient_cache_stats = {"l1_hits", "backend_hits", "backend_sets"}
    """

    l1_attr = "_htmlclient_fragments_l1"

    def __init__(self, request: Optional[Any] = None, *, ttl_seconds: int = DEFAULT_TTL) -> None:
        self.request = request
        self.ttl_seconds = max(1, _coerce_int(ttl_seconds, DEFAULT_TTL))
        if request is not None:
            if not hasattr(request, self.l1_attr):
                setattr(request, self.l1_attr, {})
            if not hasattr(request, "_htmlclient_cache_stats"):
                request._htmlclient_cache_stats = _empty_stats()
        self._local_stats = _empty_stats()

    # --- internals ---

    def _l1(self) -> Dict[str, str]:
        if self.request is None:
            return {}
        return getattr(self.request, self.l1_attr, {})

    def _stats(self) -> Dict[str, int]:
        if self.request is None:
            return self._local_stats
        return getattr(self.request, "_htmlclient_cache_stats", self._local_stats)

    def _backend_get(self, key: str) -> Optional[str]:
        return djcache.get(_ns(key))

    def _backend_set(self, key: str, html: str) -> None:
        djcache.set(_ns(key), html, self.ttl_seconds)

    # --- API ---

    def get(self, key: str) -> Optional[str]:
        if not key:
            return None
        l1 = self._l1()
        if key in l1:
            self._stats()["l1_hits"] += 1
            return l1[key]
        val = self._backend_get(key)
        if val is not None:
            if self.request is not None:
                l1[key] = val
            self._stats()["backend_hits"] += 1
        return val

    def set(self, key: str, html: Optional[str]) -> None:
        if not key or html is None:
            return
        self._backend_set(key, html)
        if self.request is not None:
            self._l1()[key] = html
        self._stats()["backend_sets"] += 1
        log.debug("fragment stored key=%s size=%d", key, len(html))

    def stats(self) -> Dict[str, int]:
        return dict(self._stats())


class SessionFragmentCache(FragmentCache):
    """
    Fragments propres au visiteur (panier) stockés dans la session Django.
    Sans session (requête anonyme de script), se comporte comme un cache vide.
    """

    l1_attr = "_htmlclient_session_fragments_l1"

    def _session(self):
        return getattr(self.request, "session", None) if self.request is not None else None

    def _entries(self) -> Dict[str, str]:
        session = self._session()
        if session is None:
            return {}
        return session.get(SESSION_KEY) or {}

    def _backend_get(self, key: str) -> Optional[str]:
        return self._entries().get(key)

    def _backend_set(self, key: str, html: str) -> None:
        session = self._session()
        if session is None:
            return
        entries = dict(self._entries())
        entries[key] = html
        session[SESSION_KEY] = entries

    def clear(self) -> None:
        session = self._session()
        if session is not None:
            session.pop(SESSION_KEY, None)
        self._l1().clear()


def get_cache_stats(request) -> Dict[str, int]:
    """Expose les statistiques L1/backend pour debug/tests."""
    return getattr(request, "_htmlclient_cache_stats", _empty_stats())
