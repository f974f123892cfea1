# apps/htmlclient/apps.py
from django.apps import AppConfig
import logging

log = logging.getLogger("htmlclient.apps")

# Modules qui enregistrent clients et décorateurs à l'import
CLIENT_MODULES = (
    "apps.htmlclient.clients.decorators",
    "apps.htmlclient.clients.basket.bulk",
    "apps.htmlclient.clients.basket.related",
    "apps.htmlclient.clients.catalog.filter",
    "apps.htmlclient.clients.catalog.supplier",
    "apps.htmlclient.clients.email.account",
)


class HtmlClientConfig(AppConfig):
    name = "apps.htmlclient"
    label = "htmlclient"
    verbose_name = "HTML clients"

    def ready(self):
        from importlib import import_module
        from django.conf import settings

        from . import checks  # noqa: F401
        from .clients import registry

        modules = list(CLIENT_MODULES) + list(getattr(settings, "HTMLCLIENT_CLIENT_MODULES", []))
        for dotted in modules:
            import_module(dotted)

        log.info("HTML clients registered: %d clients, %d decorators",
                 len(registry.all_clients()), len(registry.all_decorators()))
