"""Plain items returned by the frontend controllers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Item:
    id: str
    code: str = ""
    label: str = ""
    values: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def set(self, key: str, value: Any) -> "Item":
        self.values[key] = value
        return self


@dataclass
class ListItem:
    """Reference from a product to another item, ordered by position."""

    ref: Optional[Item]
    position: int = 0


@dataclass
class ProductItem(Item):
    type: str = "default"
    lists: Dict[str, Dict[str, List[ListItem]]] = field(default_factory=dict)

    def list_items(self, domain: str, list_type: str) -> List[ListItem]:
        return list((self.lists.get(domain) or {}).get(list_type) or [])


@dataclass
class AttributeItem(Item):
    type: str = ""
    position: int = 0


@dataclass
class SupplierItem(Item):
    position: int = 0


@dataclass
class OrderProduct:
    product_id: str
    parent_product_id: str = ""
    quantity: int = 1
    products: List["OrderProduct"] = field(default_factory=list)


@dataclass
class Basket:
    products: List[OrderProduct] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.products
