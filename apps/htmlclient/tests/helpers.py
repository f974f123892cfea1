# apps/htmlclient/tests/helpers.py
"""Arbre de clients factice et contexte isolé pour les tests du noyau."""
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional

from apps.htmlclient.clients import registry
from apps.htmlclient.clients.base import BaseClient, CachedClient, config_path
from apps.htmlclient.config.loader import ConfigProvider
from apps.htmlclient.context import Context
from apps.htmlclient.exceptions import ClientError, ControllerError
from apps.htmlclient.i18n import TranslationProvider, TranslationService

ROOT = "test/root"


class DictProvider(TranslationProvider):
    def __init__(self, catalogs: Mapping[str, Mapping[str, str]]) -> None:
        self.catalogs = catalogs

    def get(self, catalog: str, message: str, *, locale: str) -> Optional[str]:
        return (self.catalogs.get(catalog) or {}).get(message)


def make_context(
    values: Optional[Mapping[str, Any]] = None,
    *,
    request=None,
    catalogs: Optional[Mapping[str, Mapping[str, str]]] = None,
    locale: str = "fr",
) -> Context:
    """Contexte sans config partagée: seules les valeurs données sont visibles."""
    config = ConfigProvider(tree={})
    for path, value in (values or {}).items():
        config.set(path, value)
    translator = TranslationService(locale=locale, providers=[DictProvider(catalogs or {})])
    return Context(config=config, site="unittest", locale=locale, request=request, translator=translator)


class StubRenderer:
    """
    Remplace les templates Django: "root:body" rend
    `<root>{rootBody}</root>` suivi des erreurs de `rootErrorList`.
    Un nom "fail:..." lève une erreur inattendue.
    """

    def __init__(self) -> None:
        self.calls: List[str] = []

    def render(self, name: str, values: Mapping[str, Any], *, request=None) -> str:
        self.calls.append(name)
        key, _, phase = name.partition(":")
        if key == "fail":
            raise RuntimeError(f"template {name} broken")
        if phase == "header":
            return f"<head>{values.get(key + 'Header', '')}</head>"
        errors = "".join(f"<error>{e}</error>" for e in values.get(key + "ErrorList") or [])
        return f"<{key}>{values.get(key + 'Body', '')}</{key}>{errors}"


class Leaf(BaseClient):
    """Feuille: `[a]` en body, `<a/>` en header; `fail` / `fail-header` en config la font échouer."""

    def _name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def _raise(self, mode: str) -> None:
        if mode == "client":
            raise ClientError(f"Leaf {self._name()} failed")
        if mode == "controller":
            raise ControllerError("Controller down")
        raise RuntimeError("secret internal detail")

    def body(self, uid: str = "") -> str:
        mode = self.config.get(config_path(self.path, "fail"))
        if mode:
            self._raise(mode)
        return f"[{self._name()}]"

    def header(self, uid: str = "") -> Optional[str]:
        mode = self.config.get(config_path(self.path, "fail-header"))
        if mode:
            self._raise(mode)
        return f"<{self._name()}/>"


class Root(CachedClient):
    path = ROOT
    view_key = "root"
    sub_part_names = ("a", "b", "c")
    template_body = "root:body"
    template_header = "root:header"

    data_calls: Dict[str, int] = {"count": 0}

    def data(self, view):
        Root.data_calls["count"] += 1
        view["rootData"] = True
        return super().data(view)


def register_test_tree() -> None:
    Root.data_calls["count"] = 0
    registry.register_client(ROOT, factory=Root)
    for name in ("a", "b", "c"):
        registry.register_client(f"{ROOT}/{name}", factory=Leaf)


def unregister_test_tree() -> None:
    registry.unregister_client(ROOT)
    for name in ("a", "b", "c"):
        registry.unregister_client(f"{ROOT}/{name}")
