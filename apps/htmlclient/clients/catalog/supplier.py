# apps/htmlclient/clients/catalog/supplier.py
from __future__ import annotations

from apps.htmlclient import frontend
from apps.htmlclient.clients.base import CachedClient, config_path
from apps.htmlclient.clients.registry import register_client


@register_client("catalog/supplier")
class SupplierClient(CachedClient):
    path = "catalog/supplier"
    view_key = "supplier"
    template_body = "catalog/supplier/body-standard"

    def data(self, view):
        ids = self.config.get(config_path(self.path, "supid"), []) or []
        if isinstance(ids, str):
            ids = [i.strip() for i in ids.split(",") if i.strip()]
        domains = self.config.get(config_path(self.path, "domains"), ["text", "media"])
        limit = self.config.get(config_path(self.path, "limit"), 100)

        view["supplierList"] = frontend.create(self.context, "supplier").search(
            ids=ids, domains=domains, limit=int(limit)
        )
        return super().data(view)
