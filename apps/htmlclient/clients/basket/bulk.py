# apps/htmlclient/clients/basket/bulk.py
from __future__ import annotations

from apps.htmlclient.clients.base import config_path
from apps.htmlclient.clients.basket.base import BasketClient
from apps.htmlclient.clients.registry import register_client


@register_client("basket/bulk")
class BulkClient(BasketClient):
    """Bulk order form: visitors type product codes and quantities line by line."""

    path = "basket/bulk"
    view_key = "bulk"
    template_body = "basket/bulk/body-standard"
    template_header = "basket/bulk/header-standard"

    def data(self, view):
        rows = self.config.get(config_path(self.path, "rows"), 5)
        try:
            view["bulkRows"] = range(max(1, int(rows)))
        except (TypeError, ValueError):
            view["bulkRows"] = range(5)
        return super().data(view)
