# apps/htmlclient/frontend/memory.py
"""
In-memory frontend controllers.

They back the test-suite and local development (fixtures loaded from YAML);
production settings point HTMLCLIENT_FRONTEND_CONTROLLERS at the real
persistence layer.
"""
from __future__ import annotations
import copy
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import yaml
from django.conf import settings

from apps.htmlclient.exceptions import ControllerError
from apps.htmlclient.frontend.items import (
    AttributeItem,
    Basket,
    ListItem,
    OrderProduct,
    ProductItem,
    SupplierItem,
)

log = logging.getLogger("htmlclient.frontend.memory")

BASKET_SESSION_KEY = "htmlclient/basket"


def normalize_domains(domains: Any) -> Dict[str, List[str]]:
    """
    ["text", "media"]               -> {"text": [], "media": []}
    {"product": ["bought-together"]} -> inchangé
    Un mélange des deux formes est accepté.
    """
    out: Dict[str, List[str]] = {}
    if isinstance(domains, str):
        domains = [d.strip() for d in domains.split(",") if d.strip()]
    if isinstance(domains, Mapping):
        for key, types in domains.items():
            if isinstance(types, str):
                types = [types]
            out.setdefault(str(key), [])
            for t in types or []:
                if t not in out[str(key)]:
                    out[str(key)].append(t)
    elif domains:
        for key in domains:
            out.setdefault(str(key), [])
    return out


def merge_domains(*parts: Any) -> Dict[str, List[str]]:
    merged: Dict[str, List[str]] = {}
    for part in parts:
        for key, types in normalize_domains(part).items():
            bucket = merged.setdefault(key, [])
            for t in types:
                if t not in bucket:
                    bucket.append(t)
    return merged


class MemoryStore:
    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.products: Dict[str, ProductItem] = {}
        self.attributes: Dict[str, AttributeItem] = {}
        self.suppliers: Dict[str, SupplierItem] = {}
        self.loaded = False

    def add_product(self, item: ProductItem) -> ProductItem:
        self.products[item.id] = item
        return item

    def add_attribute(self, item: AttributeItem) -> AttributeItem:
        self.attributes[item.id] = item
        return item

    def add_supplier(self, item: SupplierItem) -> SupplierItem:
        self.suppliers[item.id] = item
        return item

    def link(self, product_id: str, domain: str, list_type: str, ref_id: str, position: int = 0) -> None:
        product = self.products[product_id]
        ref = self.products.get(ref_id) if domain == "product" else self.attributes.get(ref_id)
        product.lists.setdefault(domain, {}).setdefault(list_type, []).append(ListItem(ref=ref, position=position))

    def load(self, path: Path) -> None:
        """Charge un fichier de fixtures YAML (products/attributes/suppliers/lists)."""
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        for row in data.get("products") or []:
            self.add_product(ProductItem(id=str(row["id"]), code=row.get("code", ""), label=row.get("label", ""),
                                         type=row.get("type", "default"), values=dict(row.get("values") or {})))
        for row in data.get("attributes") or []:
            self.add_attribute(AttributeItem(id=str(row["id"]), code=row.get("code", ""), label=row.get("label", ""),
                                             type=row.get("type", ""), position=int(row.get("position", 0))))
        for row in data.get("suppliers") or []:
            self.add_supplier(SupplierItem(id=str(row["id"]), code=row.get("code", ""), label=row.get("label", ""),
                                           position=int(row.get("position", 0))))
        for row in data.get("lists") or []:
            self.link(str(row["product"]), row.get("domain", "product"), row["type"], str(row["ref"]),
                      int(row.get("position", 0)))
        self.loaded = True
        log.info("memory store loaded from %s: %d products, %d attributes, %d suppliers",
                 path, len(self.products), len(self.attributes), len(self.suppliers))


store = MemoryStore()


def _ensure_fixtures() -> None:
    if store.loaded:
        return
    path = getattr(settings, "HTMLCLIENT_MEMORY_FIXTURES", None)
    if path and Path(path).exists():
        store.load(Path(path))
    store.loaded = True


class _Controller:
    def __init__(self, context) -> None:
        self.context = context
        _ensure_fixtures()


class ProductController(_Controller):
    def search(self, ids: Iterable[str], *, domains: Any = None) -> List[ProductItem]:
        allowed = normalize_domains(domains).get("product")
        out: List[ProductItem] = []
        for pid in ids or []:
            item = store.products.get(str(pid))
            if item is None:
                continue
            # copies: callers annotate items (position, checked, ...)
            item = copy.deepcopy(item)
            if allowed and "product" in item.lists:
                item.lists["product"] = {t: v for t, v in item.lists["product"].items() if t in allowed}
            out.append(item)
        return out


class AttributeController(_Controller):
    def search(
        self,
        *,
        types: Optional[Iterable[str]] = None,
        domains: Any = None,
        sort: str = "position",
        limit: int = 10000,
    ) -> Dict[str, AttributeItem]:
        wanted = [t for t in (types or []) if t]
        rows = [a for a in store.attributes.values() if not wanted or a.type in wanted]
        if sort == "position":
            rows.sort(key=lambda a: (a.position, a.id))
        elif sort:
            raise ControllerError(f'Invalid sort key "{sort}"')
        return {a.id: copy.deepcopy(a) for a in rows[: max(0, int(limit))]}


class SupplierController(_Controller):
    def search(self, *, ids: Optional[Iterable[str]] = None, domains: Any = None, limit: int = 100) -> List[SupplierItem]:
        wanted = {str(i) for i in (ids or [])}
        rows = [s for s in store.suppliers.values() if not wanted or s.id in wanted]
        rows.sort(key=lambda s: (s.position, s.label, s.id))
        return [copy.deepcopy(s) for s in rows[: max(0, int(limit))]]


def _order_product(row: Mapping[str, Any]) -> OrderProduct:
    return OrderProduct(
        product_id=str(row.get("product_id", "")),
        parent_product_id=str(row.get("parent_product_id", "") or ""),
        quantity=int(row.get("quantity", 1) or 1),
        products=[_order_product(sub) for sub in row.get("products") or []],
    )


class BasketController(_Controller):
    """Basket kept in the Django session; any change drops the visitor's cached basket fragments."""

    def _session(self):
        session = getattr(self.context, "session", None)
        if session is None:
            raise ControllerError("No session available for the basket")
        return session

    def get(self) -> Basket:
        session = getattr(self.context, "session", None)
        rows = (session.get(BASKET_SESSION_KEY) if session is not None else None) or []
        return Basket(products=[_order_product(r) for r in rows])

    def add(self, product_id: str, *, parent_product_id: str = "", quantity: int = 1) -> Basket:
        if int(quantity) < 1:
            raise ControllerError("Quantity must be at least 1")
        session = self._session()
        rows = list(session.get(BASKET_SESSION_KEY) or [])
        rows.append({"product_id": str(product_id), "parent_product_id": str(parent_product_id or ""),
                     "quantity": int(quantity), "products": []})
        session[BASKET_SESSION_KEY] = rows
        if self.context.session_cache is not None:
            self.context.session_cache.clear()
        return self.get()
