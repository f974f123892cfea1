# apps/htmlclient/clients/basket/base.py
from __future__ import annotations

from apps.htmlclient.clients.base import CachedClient, replace_section

CSRF_SECTION = "basket.csrf"


class BasketClient(CachedClient):
    """
    Basket fragments depend on the visitor, so they are cached in the session
    and not in the shared cache. Cached output still carries the CSRF field
    of the request that rendered it; modify_body swaps in the current one.
    """

    def fragment_cache(self):
        return self.context.session_cache

    def modify_body(self, content: str, uid: str) -> str:
        content = super().modify_body(content, uid)
        view = self._view
        if view is None:
            return content
        return replace_section(content, view.csrf_field(), CSRF_SECTION)
