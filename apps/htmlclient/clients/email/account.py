# apps/htmlclient/clients/email/account.py
"""
Mail "nouveau compte": le parent n'a pas de template, ses deux parties
(texte et html) renseignent directement le message mis dans la vue sous
la clé `mail` (voir apps.htmlclient.mail.MailMessage).

Valeurs attendues dans la vue: extAccountCode, extAccountPassword et
extAddressItem (salutation, firstname, lastname).
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

from django.conf import settings

from apps.htmlclient.clients.base import BaseClient
from apps.htmlclient.clients.registry import register_client
from apps.htmlclient.exceptions import ClientError

log = logging.getLogger("htmlclient.clients.email")

LOGO_KEY = "client/html/email/logo"


def _mail(view):
    mail = view.get("mail")
    if mail is None:
        raise ClientError("No mail message available in the view")
    return mail


def resolve_logo(path: str) -> Path:
    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = Path(settings.BASE_DIR) / candidate
    return candidate


@register_client("email/account")
class AccountClient(BaseClient):
    path = "email/account"
    view_key = "account"
    sub_part_names = ("text", "html")


@register_client("email/account/text")
class AccountTextClient(BaseClient):
    path = "email/account/text"
    view_key = "text"
    template_body = "email/account/text-body-standard.txt"

    def body(self, uid: str = "") -> str:
        output = super().body(uid)
        _mail(self.get_view()).text(output)
        return output


@register_client("email/account/html")
class AccountHtmlClient(BaseClient):
    path = "email/account/html"
    view_key = "html"
    template_body = "email/account/html-body-standard"

    def embed_logo(self, view) -> Optional[str]:
        logo = self.config.get(LOGO_KEY)
        if not logo:
            return None
        file = resolve_logo(logo)
        if not file.is_file():
            log.warning("email logo %s not found, mail sent without it", file)
            return None
        return _mail(view).embed(file.read_bytes(), file.name)

    def data(self, view):
        view["htmlLogo"] = self.embed_logo(view)
        return super().data(view)

    def body(self, uid: str = "") -> str:
        output = super().body(uid)
        _mail(self.get_view()).html(output)
        return output
