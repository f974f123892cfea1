# apps/htmlclient/frontend/__init__.py
"""
Domain query services used by the clients (products, attributes, ...).

The implementation of each controller is resolved from the
HTMLCLIENT_FRONTEND_CONTROLLERS setting (dotted paths), so the storefront can
plug its own persistence layer without touching the clients.
"""
from __future__ import annotations
import logging
from functools import lru_cache
from typing import Dict

from django.conf import settings
from django.utils.module_loading import import_string

from apps.htmlclient.exceptions import ControllerError

log = logging.getLogger("htmlclient.frontend")

DEFAULT_CONTROLLERS: Dict[str, str] = {
    "attribute": "apps.htmlclient.frontend.memory.AttributeController",
    "basket": "apps.htmlclient.frontend.memory.BasketController",
    "product": "apps.htmlclient.frontend.memory.ProductController",
    "supplier": "apps.htmlclient.frontend.memory.SupplierController",
}


@lru_cache(maxsize=32)
def _import_callable(dotted_path: str):
    return import_string(dotted_path)


def controllers() -> Dict[str, str]:
    configured = getattr(settings, "HTMLCLIENT_FRONTEND_CONTROLLERS", None) or {}
    return {**DEFAULT_CONTROLLERS, **configured}


def create(context, name: str):
    dotted = controllers().get((name or "").strip().lower())
    if not dotted:
        raise ControllerError(f'Controller "{name}" not available')
    try:
        cls = _import_callable(dotted)
    except ImportError as e:
        log.error("Controller import failed for %s (%s): %s", name, dotted, e)
        raise ControllerError(f'Controller "{name}" not available') from e
    return cls(context)
