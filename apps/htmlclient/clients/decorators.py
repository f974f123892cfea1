# apps/htmlclient/clients/decorators.py
from __future__ import annotations
import logging
import re
import time
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from apps.htmlclient.clients.base import Renderable, config_path
from apps.htmlclient.clients.registry import (
    COMMON_SCOPE,
    get_decorator,
    register_decorator,
    scope_of,
)
from apps.htmlclient.exceptions import InvalidName

log = logging.getLogger("htmlclient.clients.decorators")

_NAME_RE = re.compile(r"[A-Za-z0-9]+")


def validate_name(name, *, kind: str = "client") -> str:
    if not isinstance(name, str) or not _NAME_RE.fullmatch(name):
        raise InvalidName(str(name), kind=kind)
    return name


class Decorator(Renderable):
    """
    Wraps a client and forwards every call to it. Subclasses override the
    methods they augment. Attributes that are not part of the capability
    (path, depth, get_sub_clients, ...) are read from the wrapped client.
    """

    def __init__(self, client: Renderable, context, path: str = "") -> None:
        self.client = client
        self.context = context
        self.decorated_path = path

    def __getattr__(self, name: str):
        # appelé seulement si l'attribut n'existe pas sur le décorateur
        client = self.__dict__.get("client")
        if client is None:
            raise AttributeError(name)
        return getattr(client, name)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} of {self.client!r}>"

    def body(self, uid: str = "") -> str:
        return self.client.body(uid)

    def header(self, uid: str = "") -> Optional[str]:
        return self.client.header(uid)

    def modify_body(self, content: str, uid: str) -> str:
        return self.client.modify_body(content, uid)

    def modify_header(self, content: str, uid: str) -> str:
        return self.client.modify_header(content, uid)

    def data(self, view):
        return self.client.data(view)

    def get_sub_client(self, type: str, name: str | None = None) -> Renderable:
        return self.client.get_sub_client(type, name)

    def get_view(self):
        return self.client.get_view()

    def set_view(self, view) -> "Decorator":
        self.client.set_view(view)
        return self

    def get_object(self) -> Renderable:
        return self.client.get_object()

    def set_object(self, obj: Renderable) -> "Decorator":
        self.client.set_object(obj)
        return self


def _dedupe(names: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for name in names or ():
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


def _as_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [str(v) for v in value]


class DecoratorChain:
    """
    Wraps a client with its configured decorators.

    Order: global decorators outside, local decorators inside; in each list
    the first name is the outermost. Excludes filter the global set only.
    """

    @staticmethod
    def configured(config, path: str) -> Tuple[List[str], List[str], List[str]]:
        default = _as_list(config.get(config_path("common", "decorators", "default"), []))
        global_names = _as_list(config.get(config_path(path, "decorators", "global"), []))
        local_names = _as_list(config.get(config_path(path, "decorators", "local"), []))
        excludes = _as_list(config.get(config_path(path, "decorators", "excludes"), []))
        return _dedupe(default + global_names), local_names, excludes

    @staticmethod
    def resolve(
        global_names: Sequence[str],
        local_names: Sequence[str],
        exclude_names: Sequence[str] = (),
        *,
        path: str = "",
    ) -> List[Tuple[str, Callable]]:
        """Résout toutes les fabriques avant d'instancier quoi que ce soit."""
        excluded = set(exclude_names or ())
        specs = [(n, COMMON_SCOPE) for n in global_names if n not in excluded]
        specs += [(n, scope_of(path)) for n in local_names]

        resolved: List[Tuple[str, Callable]] = []
        for name, scope in specs:
            validate_name(name, kind="decorator")
            resolved.append((name, get_decorator(name, scope)))
        return resolved

    @classmethod
    def wrap(
        cls,
        base: Renderable,
        global_names: Sequence[str],
        local_names: Sequence[str],
        exclude_names: Sequence[str] = (),
        *,
        context=None,
        path: str = "",
    ) -> Renderable:
        client = base
        for name, factory in reversed(cls.resolve(global_names, local_names, exclude_names, path=path)):
            client = factory(client, context, path)
            log.debug("decorator %s wrapped around %s", name, path)
        return client


# ==========================================================
# Décorateurs communs
# ==========================================================
@register_decorator("Timing")
class TimingDecorator(Decorator):
    """Logs how long body/header rendering took."""

    def body(self, uid: str = "") -> str:
        start = time.perf_counter()
        try:
            return self.client.body(uid)
        finally:
            log.info("render body path=%s uid=%s %.1fms", self.decorated_path, uid, (time.perf_counter() - start) * 1000)

    def header(self, uid: str = "") -> Optional[str]:
        start = time.perf_counter()
        try:
            return self.client.header(uid)
        finally:
            log.info("render header path=%s uid=%s %.1fms", self.decorated_path, uid, (time.perf_counter() - start) * 1000)


@register_decorator("Restrict")
class RestrictDecorator(Decorator):
    """Only renders for authenticated visitors; anonymous visitors get nothing."""

    def _allowed(self) -> bool:
        request = getattr(self.context, "request", None)
        user = getattr(request, "user", None)
        return bool(getattr(user, "is_authenticated", False))

    def body(self, uid: str = "") -> str:
        return self.client.body(uid) if self._allowed() else ""

    def header(self, uid: str = "") -> Optional[str]:
        return self.client.header(uid) if self._allowed() else None

    def data(self, view):
        return self.client.data(view) if self._allowed() else view


_BETWEEN_TAGS = re.compile(r">\s+<")


@register_decorator("Strip")
class StripDecorator(Decorator):
    """Removes the whitespace between tags of the rendered output."""

    @staticmethod
    def _strip(html: Optional[str]) -> Optional[str]:
        if html is None:
            return None
        return _BETWEEN_TAGS.sub("><", html).strip()

    def body(self, uid: str = "") -> str:
        return self._strip(self.client.body(uid))

    def header(self, uid: str = "") -> Optional[str]:
        return self._strip(self.client.header(uid))
