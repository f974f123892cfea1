# apps/htmlclient/clients/factory.py
from __future__ import annotations
import logging
from typing import Optional

from apps.htmlclient.clients.base import Renderable, config_path
from apps.htmlclient.clients.decorators import DecoratorChain, validate_name
from apps.htmlclient.clients.registry import DEFAULT_NAME, get_client, normalize_path
from apps.htmlclient.exceptions import ClientError

log = logging.getLogger("htmlclient.factory")

DEFAULT_MAX_DEPTH = 10


class ClientFactory:
    """
    Builds decorated clients from the registry.

    The name comes from `client/html/<path>/name` (default "Standard") unless
    given explicitly, and is validated before anything is looked up, because
    it may come from user-controlled input.
    """

    @classmethod
    def create(cls, context, path: str, name: Optional[str] = None, *, depth: int = 0) -> Renderable:
        path = normalize_path(path)
        if name is None:
            name = context.config.get(config_path(path, "name"), DEFAULT_NAME)
        validate_name(name)

        max_depth = int(context.config.get(config_path("common", "max-depth"), DEFAULT_MAX_DEPTH))
        if depth > max_depth:
            raise ClientError(f'Client tree deeper than {max_depth} levels at "{path}"')

        constructor = get_client(path, name)
        client = constructor(context, depth=depth)
        if not getattr(client, "path", ""):
            client.path = path
        # sous-clients construits ici: nom inconnu ou décorateur introuvable
        # interrompent la construction, jamais le rendu
        client.get_sub_clients()

        global_names, local_names, excludes = DecoratorChain.configured(context.config, path)
        client = DecoratorChain.wrap(client, global_names, local_names, excludes, context=context, path=path)
        log.debug("client created path=%s name=%s depth=%d", path, name, depth)
        return client.set_object(client)

    @classmethod
    def create_sub_client(
        cls,
        context,
        parent_path: str,
        type: str,
        name: Optional[str] = None,
        *,
        depth: int = 1,
    ) -> Renderable:
        validate_name(type, kind="client type")
        if name is not None:
            validate_name(name)
        return cls.create(context, f"{normalize_path(parent_path)}/{type}", name, depth=depth)


def create(context, path: str, name: Optional[str] = None) -> Renderable:
    return ClientFactory.create(context, path, name)
