# apps/htmlclient/clients/basket/related.py
from __future__ import annotations
import logging
from typing import Dict, List

from apps.htmlclient import frontend
from apps.htmlclient.clients.base import BaseClient, config_path
from apps.htmlclient.clients.basket.base import BasketClient
from apps.htmlclient.clients.registry import register_client
from apps.htmlclient.frontend.items import Basket, ProductItem
from apps.htmlclient.frontend.memory import merge_domains

log = logging.getLogger("htmlclient.clients.basket.related")

DEFAULT_DOMAINS = ["text", "price", "media"]
DEFAULT_LIMIT = 6


@register_client("basket/related")
class RelatedClient(BasketClient):
    """Products related to the basket content; the basket is shared with the sub-clients."""

    path = "basket/related"
    view_key = "related"
    sub_part_names = ("bought",)
    template_body = "basket/related/body-standard"
    template_header = "basket/related/header-standard"

    def data(self, view):
        view["relatedBasket"] = frontend.create(self.context, "basket").get()
        return super().data(view)


def product_ids_from_basket(basket: Basket) -> List[str]:
    """Ids des produits du panier (produit parent si présent, sous-produits inclus), sans doublon."""
    ids: Dict[str, bool] = {}
    for order_product in basket.products:
        ids[order_product.parent_product_id or order_product.product_id] = True
        for sub in order_product.products:
            ids[sub.parent_product_id or sub.product_id] = True
    return list(ids)


@register_client("basket/related/bought")
class BoughtClient(BaseClient):
    """Products frequently bought together with the ones in the basket."""

    path = "basket/related/bought"
    view_key = "bought"
    template_body = "basket/related/bought-body-standard"

    def domains(self) -> Dict[str, List[str]]:
        configured = self.config.get(config_path(self.path, "domains"), DEFAULT_DOMAINS)
        domains = merge_domains(configured, {"product": ["bought-together"]})
        if self.config.get(config_path("basket/related", "basket-add"), False):
            domains = merge_domains(domains, {"product": ["default"], "attribute": ["variant", "custom", "config"]})
        return domains

    def data(self, view):
        basket = view.get("relatedBasket")
        if basket is not None:
            size = int(self.config.get(config_path(self.path, "limit"), DEFAULT_LIMIT))
            cntl = frontend.create(self.context, "product")

            items: Dict[str, ProductItem] = {}
            for product in cntl.search(product_ids_from_basket(basket), domains=self.domains()):
                for list_item in product.list_items("product", "bought-together"):
                    ref = list_item.ref
                    if ref is not None:
                        items[ref.id] = ref.set("position", list_item.position)

            ordered = sorted(items.values(), key=lambda item: item.get("position", 0))
            view["boughtItems"] = ordered[:size]
            log.debug("bought-together items=%d limit=%d", len(ordered), size)
        return super().data(view)
