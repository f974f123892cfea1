# apps/htmlclient/checks.py
from __future__ import annotations
from django.core.checks import register, Warning, Error

from .clients import registry
from .clients.base import config_path
from .clients.decorators import DecoratorChain, validate_name
from .config.loader import ConfigProvider
from .exceptions import HtmlClientError


def _root_paths():
    """Chemins sans parent enregistré: ce sont eux que les pages instancient."""
    paths = {path for path, _name in registry.all_clients()}
    return sorted(p for p in paths if "/" not in p or p.rsplit("/", 1)[0] not in paths)


@register()
def registry_not_empty_check(app_configs, **kwargs):
    if not registry.all_clients():
        return [Warning("Aucun client HTML enregistré.",
                        hint="Vérifie HTMLCLIENT_CLIENT_MODULES et HtmlClientConfig.ready().",
                        id="htmlclient.W001")]
    return []


@register()
def configured_names_check(app_configs, **kwargs):
    errors = []
    config = ConfigProvider()
    for path in _root_paths():
        name = config.get(config_path(path, "name"), registry.DEFAULT_NAME)
        try:
            validate_name(name)
            registry.get_client(path, name)
        except HtmlClientError as exc:
            errors.append(Error(
                f"Client {path}: {exc}",
                hint=f"Corrige {config_path(path, 'name')} dans la configuration.",
                id="htmlclient.E001"))
    return errors


@register()
def configured_decorators_check(app_configs, **kwargs):
    errors = []
    config = ConfigProvider()
    for path in sorted({path for path, _name in registry.all_clients()}):
        global_names, local_names, excludes = DecoratorChain.configured(config, path)
        try:
            DecoratorChain.resolve(global_names, local_names, excludes, path=path)
        except HtmlClientError as exc:
            errors.append(Error(
                f"Décorateurs de {path}: {exc}",
                hint="Vérifie decorators/global, decorators/local et decorators/excludes.",
                id="htmlclient.E002"))
    return errors
