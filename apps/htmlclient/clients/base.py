# apps/htmlclient/clients/base.py
from __future__ import annotations
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional

from apps.htmlclient.exceptions import ClientError, kind_of, message_of
from apps.htmlclient.keys import build_cache_key, filter_params

log = logging.getLogger("htmlclient.clients.base")

CONFIG_ROOT = "client/html"


def config_path(path: str, *suffix: str) -> str:
    return "/".join([CONFIG_ROOT, path, *suffix]).rstrip("/")


def replace_section(content: str, replacement: str, section: str) -> str:
    """
    Remplace le texte entre deux marqueurs `<!-- section -->`.
    Le contenu est rendu inchangé si le marqueur n'apparaît pas deux fois.
    """
    marker = f"<!-- {section} -->"
    start = content.find(marker)
    if start < 0:
        return content
    end = content.find(marker, start + len(marker))
    if end < 0:
        return content
    return content[: start + len(marker)] + replacement + content[end:]


class Renderable(ABC):
    """Capability shared by every node of the composition tree and by its decorators."""

    @abstractmethod
    def body(self, uid: str = "") -> str:
        ...

    @abstractmethod
    def header(self, uid: str = "") -> Optional[str]:
        ...

    @abstractmethod
    def modify_body(self, content: str, uid: str) -> str:
        ...

    @abstractmethod
    def modify_header(self, content: str, uid: str) -> str:
        ...

    @abstractmethod
    def data(self, view):
        ...

    @abstractmethod
    def get_sub_client(self, type: str, name: str | None = None) -> "Renderable":
        ...

    @abstractmethod
    def get_view(self):
        ...

    @abstractmethod
    def set_view(self, view) -> "Renderable":
        ...

    @abstractmethod
    def get_object(self) -> "Renderable":
        ...

    @abstractmethod
    def set_object(self, obj: "Renderable") -> "Renderable":
        ...


class BaseClient(Renderable):
    """
    Composite client: renders its configured sub-clients in order and feeds
    their concatenated output to its own template.

    Subclasses set:
      - path: client path ("basket/related/bought"), also the config prefix
      - view_key: prefix of the values written into the view ("bought")
      - sub_part_names: default order of the sub-clients
      - template_body / template_header: default templates (None = no own template)
    """

    path: str = ""
    view_key: str = ""
    sub_part_names: Iterable[str] = ()
    template_body: Optional[str] = None
    template_header: Optional[str] = None

    def __init__(self, context, *, depth: int = 0) -> None:
        self.context = context
        self.depth = depth
        self._view = None
        self._object: Optional[Renderable] = None
        self._sub_clients: Optional[List[Renderable]] = None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} path={self.path!r}>"

    # --- plumbing ---

    @property
    def config(self):
        return self.context.config

    def get_view(self):
        if self._view is None:
            raise ClientError(f'No view available for client "{self.path}"')
        return self._view

    def set_view(self, view) -> "BaseClient":
        self._view = view
        return self

    def get_object(self) -> Renderable:
        return self._object if self._object is not None else self

    def set_object(self, obj: Renderable) -> "BaseClient":
        self._object = obj
        return self

    def get_sub_client_names(self) -> List[str]:
        names = self.config.get(config_path(self.path, "subparts"), list(self.sub_part_names))
        if isinstance(names, str):
            names = [n for n in (s.strip() for s in names.split(",")) if n]
        return list(names or [])

    def get_sub_client(self, type: str, name: str | None = None) -> Renderable:
        from apps.htmlclient.clients.factory import ClientFactory

        return ClientFactory.create_sub_client(self.context, self.path, type, name, depth=self.depth + 1)

    def get_sub_clients(self) -> List[Renderable]:
        if self._sub_clients is None:
            self._sub_clients = [self.get_sub_client(name) for name in self.get_sub_client_names()]
        return self._sub_clients

    def template(self, phase: str) -> Optional[str]:
        default = self.template_body if phase == "body" else self.template_header
        return self.config.get(config_path(self.path, f"template-{phase}"), default)

    def key(self, suffix: str) -> str:
        base = self.view_key or self.path.rsplit("/", 1)[-1]
        return f"{base}{suffix}"

    # --- errors ---

    def log_exception(self, exc: BaseException) -> None:
        log.error("Client %s failed: %s", self.path, exc, exc_info=exc)

    def record_error(self, view, exc: BaseException) -> None:
        """Traduit l'erreur et l'ajoute à `<key>ErrorList`; les erreurs inattendues sont aussi loggées."""
        kind = kind_of(exc)
        message = self.context.translate(kind.catalog, message_of(exc))
        view.add_error(self.key("ErrorList"), [message])
        if not kind.recoverable:
            self.log_exception(exc)

    # --- data ---

    def data(self, view):
        for subclient in self.get_sub_clients():
            view = subclient.data(view)
        return view

    # --- rendering ---

    def render_children(self, view, phase: str, uid: str = "") -> str:
        """
        Rend les sous-clients dans l'ordre configuré. L'échec d'un enfant
        n'empêche jamais le rendu de ses voisins.
        """
        output = ""
        for subclient in self.get_sub_clients():
            try:
                subclient.set_view(view)
                if phase == "body":
                    output += subclient.body(uid)
                else:
                    output += subclient.header(uid) or ""
            except Exception as exc:
                if phase == "body":
                    self.record_error(view, exc)
                else:
                    self.log_exception(exc)
        return output

    def body(self, uid: str = "") -> str:
        view = self.get_view()
        view[self.key("Body")] = self.render_children(view, "body", uid)
        template = self.template("body")
        if not template:
            return view[self.key("Body")]
        return view.render(template)

    def header(self, uid: str = "") -> Optional[str]:
        view = self.get_view()
        view[self.key("Header")] = self.render_children(view, "header", uid)
        template = self.template("header")
        if not template:
            return view[self.key("Header")]
        return view.render(template)

    def modify_body(self, content: str, uid: str) -> str:
        view = self._view
        for subclient in self.get_sub_clients():
            if view is not None:
                subclient.set_view(view)
            content = subclient.modify_body(content, uid)
        return content

    def modify_header(self, content: str, uid: str) -> str:
        view = self._view
        for subclient in self.get_sub_clients():
            if view is not None:
                subclient.set_view(view)
            content = subclient.modify_header(content, uid)
        return content


class CachedClient(BaseClient):
    """
    Root of a cached subtree.

    body(): cache hit -> modify_body(cached); miss -> data once per instance,
    children, own template, store. Body errors are contained in the view's
    error list and never raised. header(): errors are logged and give None.
    """

    # request parameter prefixes that make the fragment vary
    cache_params: Iterable[str] = ()

    def __init__(self, context, *, depth: int = 0) -> None:
        super().__init__(context, depth=depth)
        self._data_view = None

    def fragment_cache(self):
        return self.context.cache

    def cache_key(self, uid: str, phase: str, view) -> str:
        params = filter_params(view.param(), self.cache_params) if self.cache_params else {}
        return build_cache_key(
            uid,
            self.context.site,
            phase,
            self.path.replace("/", ":"),
            config=self.config.subtree(config_path(self.path)),
            params=params,
            locale=self.context.locale,
        )

    def materialize(self):
        if self._data_view is None:
            self._data_view = self.get_object().data(self.get_view())
        return self._data_view

    def body(self, uid: str = "") -> str:
        view = self.get_view()
        cache = self.fragment_cache()
        key = self.cache_key(uid, "body", view)

        html = cache.get(key)
        if html is not None:
            return self.modify_body(html, uid)

        errors_before = view.error_count
        try:
            view = self.materialize()
        except Exception as exc:
            self.record_error(view, exc)
        else:
            view[self.key("Body")] = self.render_children(view, "body", uid)

        rendered = True
        try:
            template = self.template("body")
            html = view.render(template) if template else view.get(self.key("Body"), "")
        except Exception as exc:
            self.record_error(view, exc)
            html = view.get(self.key("Body"), "")
            rendered = False

        if rendered and view.error_count == errors_before:
            cache.set(key, html)
        return html

    def header(self, uid: str = "") -> Optional[str]:
        try:
            view = self.get_view()
            cache = self.fragment_cache()
            key = self.cache_key(uid, "header", view)
        except Exception as exc:
            self.log_exception(exc)
            return None

        html = cache.get(key)
        if html is not None:
            return self.modify_header(html, uid)

        try:
            view = self.materialize()
            view[self.key("Header")] = self.render_children(view, "header", uid)
            template = self.template("header")
            html = view.render(template) if template else view[self.key("Header")]
        except Exception as exc:
            self.log_exception(exc)
            return None

        cache.set(key, html)
        return html
