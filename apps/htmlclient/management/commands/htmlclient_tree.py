# apps/htmlclient/management/commands/htmlclient_tree.py
from __future__ import annotations
import sys
from typing import Optional

from django.core.management.base import BaseCommand, CommandParser
from django.test import RequestFactory

from apps.htmlclient.clients.decorators import Decorator
from apps.htmlclient.clients.factory import ClientFactory
from apps.htmlclient.context import Context
from apps.htmlclient.exceptions import HtmlClientError
from apps.htmlclient.view import ViewContext


def describe(client, indent: int = 0):
    """Lignes décrivant un client décoré et ses sous-clients, récursivement."""
    pad = "  " * indent
    layers = []
    node = client
    while isinstance(node, Decorator):
        layers.append(node.__class__.__name__)
        node = node.client
    label = f"{pad}{node.path} [{node.__class__.__name__}]"
    if layers:
        label += " <- " + " > ".join(layers)
    yield label
    for sub in node.get_sub_clients():
        yield from describe(sub, indent + 1)


class Command(BaseCommand):
    help = "Affiche l'arbre d'un client HTML (décorateurs et sous-clients), avec rendu optionnel."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("path", type=str, help="Chemin du client (ex: basket/related)")
        parser.add_argument("--name", type=str, default=None, help="Nom d'implémentation (défaut: config ou Standard)")
        parser.add_argument("--uid", type=str, default="cli", help="Identifiant de page pour les clés de cache")
        parser.add_argument("--render", action="store_true", help="Rend aussi header et body")

    def handle(self, *args, **options):
        path: str = options["path"]
        name: Optional[str] = options.get("name")
        uid: str = options.get("uid") or "cli"

        request = RequestFactory().get("/")
        context = Context.from_request(request)
        try:
            client = ClientFactory.create(context, path, name)
            lines = list(describe(client))
        except HtmlClientError as exc:
            self.stderr.write(self.style.ERROR(str(exc)))
            sys.exit(2)

        self.stdout.write(self.style.SUCCESS(f"=== {path} ==="))
        for line in lines:
            self.stdout.write(line)

        if options.get("render"):
            client.set_view(ViewContext(context))
            self.stdout.write("")
            self.stdout.write(self.style.SUCCESS("--- header ---"))
            self.stdout.write(client.header(uid) or "")
            self.stdout.write(self.style.SUCCESS("--- body ---"))
            self.stdout.write(client.body(uid))
