# apps/htmlclient/clients/registry.py
from __future__ import annotations
from typing import Callable, Dict, List, Optional, Tuple

from apps.htmlclient.exceptions import UnknownClient, UnknownDecorator

COMMON_SCOPE = "common"
DEFAULT_NAME = "Standard"

# Stockage en mémoire, alimenté au boot par HtmlClientConfig.ready()
_CLIENTS: Dict[Tuple[str, str], Callable] = {}
_DECORATORS: Dict[Tuple[str, str], Callable] = {}


def normalize_path(path: str) -> str:
    return "/".join(seg.strip().lower() for seg in (path or "").split("/") if seg.strip())


def scope_of(path: str) -> str:
    """Local decorators belong to the first segment of the client path ("basket/bulk" -> "basket")."""
    parts = normalize_path(path).split("/")
    return parts[0] if parts and parts[0] else COMMON_SCOPE


# ---------------------------
# Clients
# ---------------------------
def register_client(path: str, name: str = DEFAULT_NAME, factory: Optional[Callable] = None):
    """
    Enregistre un constructeur `factory(context, *, depth=0) -> client` pour (path, name).
    Utilisable comme décorateur de classe.
    """
    key = (normalize_path(path), name)

    def _register(target: Callable) -> Callable:
        _CLIENTS[key] = target
        return target

    if factory is not None:
        return _register(factory)
    return _register


def get_client(path: str, name: str = DEFAULT_NAME) -> Callable:
    key = (normalize_path(path), name)
    try:
        return _CLIENTS[key]
    except KeyError:
        raise UnknownClient(key[0], name) from None


def client_exists(path: str, name: str = DEFAULT_NAME) -> bool:
    return (normalize_path(path), name) in _CLIENTS


def all_clients() -> List[Tuple[str, str]]:
    return sorted(_CLIENTS.keys())


def unregister_client(path: str, name: str = DEFAULT_NAME) -> None:
    _CLIENTS.pop((normalize_path(path), name), None)


# ---------------------------
# Decorators
# ---------------------------
def register_decorator(name: str, scope: str = COMMON_SCOPE, factory: Optional[Callable] = None):
    """
    `factory(inner, context, path) -> decorator`. Le scope "common" regroupe les
    décorateurs globaux, sinon le premier segment du chemin client (décorateurs locaux).
    """
    key = ((scope or COMMON_SCOPE).lower(), name)

    def _register(target: Callable) -> Callable:
        _DECORATORS[key] = target
        return target

    if factory is not None:
        return _register(factory)
    return _register


def get_decorator(name: str, scope: str = COMMON_SCOPE) -> Callable:
    key = ((scope or COMMON_SCOPE).lower(), name)
    try:
        return _DECORATORS[key]
    except KeyError:
        raise UnknownDecorator(name, scope=key[0]) from None


def all_decorators() -> List[Tuple[str, str]]:
    return sorted(_DECORATORS.keys())


def unregister_decorator(name: str, scope: str = COMMON_SCOPE) -> None:
    _DECORATORS.pop(((scope or COMMON_SCOPE).lower(), name), None)
