# apps/htmlclient/view.py
from __future__ import annotations
from typing import Any, Dict, Iterator, Mapping, Optional

from django.middleware.csrf import get_token
from django.template.loader import render_to_string
from django.utils.html import format_html

TEMPLATE_PREFIX = "htmlclient/"
TEMPLATE_SUFFIX = ".html"


class TemplateRenderer:
    """
    Thin wrapper around Django's template loader.

    Client templates are configured without prefix nor extension
    ("basket/bulk/body-standard"); both are added here.
    """

    def resolve(self, name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValueError("Empty template name")
        if name.endswith(TEMPLATE_SUFFIX) or name.endswith(".txt"):
            return name if name.startswith(TEMPLATE_PREFIX) else f"{TEMPLATE_PREFIX}{name}"
        return f"{TEMPLATE_PREFIX}{name}{TEMPLATE_SUFFIX}"

    def render(self, name: str, values: Mapping[str, Any], *, request=None) -> str:
        return render_to_string(self.resolve(name), dict(values), request=request)


class ViewContext:
    """
    Mutable bag of named values shared by every client of one render pass.

    Clients read upstream values (site, locale, basket, ...) and write their
    own output ("bulkBody", "boughtItems", ...). A view belongs to exactly one
    request and is discarded once the response is built.
    """

    def __init__(
        self,
        context,
        *,
        values: Optional[Mapping[str, Any]] = None,
        renderer: Optional[TemplateRenderer] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._context = context
        self._renderer = renderer or TemplateRenderer()
        self._params = params
        self._values: Dict[str, Any] = {
            "site": context.site,
            "locale": context.locale,
        }
        self._values.update(values or {})
        self.error_count = 0

    # --- bag ---

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> "ViewContext":
        self._values[key] = value
        return self

    def update(self, values: Mapping[str, Any]) -> "ViewContext":
        self._values.update(values or {})
        return self

    def append(self, key: str, items) -> list:
        merged = list(self._values.get(key) or []) + list(items or [])
        self._values[key] = merged
        return merged

    def add_error(self, key: str, messages) -> list:
        """Ajoute des messages à une liste d'erreurs et compte chaque ajout pour la vue entière."""
        self.error_count += 1
        return self.append(key, messages)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    # --- helpers ---

    @property
    def context(self):
        return self._context

    @property
    def request(self):
        return self._context.request

    def config(self, path: str, default: Any = None) -> Any:
        return self._context.config.get(path, default)

    def translate(self, catalog: str, message: str) -> str:
        return self._context.translate(catalog, message)

    def _raw_params(self) -> Mapping[str, Any]:
        if self._params is not None:
            return self._params
        request = self.request
        if request is None:
            return {}
        merged = request.GET.copy()
        if request.method == "POST":
            for key in request.POST:
                merged.setlist(key, request.POST.getlist(key))
        return merged

    def param(self, name: str | None = None, default: Any = None) -> Any:
        """
        Paramètres de requête. Sans nom: dict complet (listes pour les clés
        répétées). Avec un défaut liste: toutes les valeurs de `name` / `name[]`.
        """
        raw = self._raw_params()
        if name is None:
            return _params_as_dict(raw)
        if isinstance(default, (list, tuple)):
            values = _getlist(raw, name) or _getlist(raw, f"{name}[]")
            return values if values else list(default)
        if name in raw:
            return raw[name]
        return default

    def csrf_field(self) -> str:
        request = self.request
        if request is None:
            return ""
        return format_html('<input type="hidden" name="csrfmiddlewaretoken" value="{}">', get_token(request))

    def render(self, template: str) -> str:
        return self._renderer.render(template, self.as_dict(), request=self.request)


def _getlist(raw: Mapping[str, Any], name: str) -> list:
    if hasattr(raw, "getlist"):
        return list(raw.getlist(name))
    value = raw.get(name)
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _params_as_dict(raw: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in raw:
        values = _getlist(raw, key)
        if key.endswith("[]"):
            out[key[:-2]] = values
        elif len(values) == 1:
            out[key] = values[0]
        else:
            out[key] = values
    return out
