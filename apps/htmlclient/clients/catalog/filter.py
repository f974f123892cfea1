# apps/htmlclient/clients/catalog/filter.py
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Sequence

from apps.htmlclient import frontend
from apps.htmlclient.clients.base import BaseClient, CachedClient, config_path
from apps.htmlclient.clients.registry import register_client
from apps.htmlclient.frontend.items import AttributeItem

FILTER_PREFIXES = ("f_", "l_", "d_")
ATTRIBUTE_PARAMS = ("f_attrid", "f_oneid", "f_optid")


def client_params(params: Mapping[str, Any], prefixes: Sequence[str] = FILTER_PREFIXES) -> Dict[str, Any]:
    return {k: v for k, v in (params or {}).items() if str(k).startswith(tuple(prefixes))}


def _flatten(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, Mapping):
        out: List[str] = []
        for sub in value.values():
            out.extend(_flatten(sub))
        return out
    if isinstance(value, (list, tuple)):
        out = []
        for sub in value:
            out.extend(_flatten(sub))
        return out
    return [str(value)]


def selected_ids(params: Mapping[str, Any], name: str) -> List[str]:
    """
    Ids sélectionnés pour `name`, quelle que soit la forme du paramètre:
    f_attrid=1, f_attrid[]=1, f_oneid[color][]=1 ...
    """
    ids: List[str] = []
    for key, value in (params or {}).items():
        if key == name or key.startswith(f"{name}["):
            ids.extend(v for v in _flatten(value) if v)
    return ids


@register_client("catalog/filter")
class FilterClient(CachedClient):
    """Catalog filter section; varies with the filter parameters of the request."""

    path = "catalog/filter"
    view_key = "filter"
    sub_part_names = ("attribute",)
    template_body = "catalog/filter/body-standard"
    template_header = "catalog/filter/header-standard"
    cache_params = FILTER_PREFIXES


@register_client("catalog/filter/attribute")
class AttributeFilterClient(BaseClient):
    path = "catalog/filter/attribute"
    view_key = "attribute"
    template_body = "catalog/filter/attribute-body-standard"

    @staticmethod
    def form_params(type: str, oneof: Sequence[str], options: Sequence[str]) -> List[str]:
        if type in oneof:
            return ["f_oneid", type, ""]
        if type in options:
            return ["f_optid", ""]
        return ["f_attrid", ""]

    @staticmethod
    def sort(attr_map: Dict[str, Dict[str, AttributeItem]], attr_types: Sequence[str]) -> Dict[str, Dict[str, AttributeItem]]:
        ordered = {t: attr_map[t] for t in attr_types if t in attr_map}
        return ordered if ordered else attr_map

    def _types(self) -> List[str]:
        types = self.config.get(config_path(self.path, "types"), [])
        if isinstance(types, str):
            types = types.split(",")
        return [t.strip() for t in types or [] if t and t.strip()]

    def data(self, view):
        options = self.config.get(config_path(self.path, "types-option"), []) or []
        oneof = self.config.get(config_path(self.path, "types-oneof"), []) or []
        attr_types = self._types()
        domains = self.config.get(config_path(self.path, "domains"), ["text", "media"])

        attributes = frontend.create(self.context, "attribute").search(
            types=attr_types, domains=domains, sort="position", limit=10000
        )

        request_params = view.param()
        params = client_params(request_params)
        checked = set()
        for name in ATTRIBUTE_PARAMS:
            checked.update(selected_ids(request_params, name))

        attr_map: Dict[str, Dict[str, AttributeItem]] = {}
        for attr_id, item in attributes.items():
            if attr_id in checked:
                item = item.set("checked", True)
            item.set("params", dict(params))
            item.set("formparam", self.form_params(item.type, oneof, options))
            attr_map.setdefault(item.type, {})[attr_id] = item

        reset = {k: v for k, v in params.items() if not any(k == n or k.startswith(f"{n}[") for n in ATTRIBUTE_PARAMS)}
        view["attributeResetParams"] = reset
        view["attributeMap"] = self.sort(attr_map, attr_types)
        return super().data(view)
