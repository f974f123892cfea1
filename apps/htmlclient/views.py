# apps/htmlclient/views.py
from __future__ import annotations

import logging
from django.http import Http404, HttpResponseRedirect
from django.template.response import TemplateResponse
from django.utils.http import url_has_allowed_host_and_scheme
from django.views import View
from django.views.generic import TemplateView

from apps.htmlclient import frontend
from apps.htmlclient.clients.factory import ClientFactory
from apps.htmlclient.context import Context
from apps.htmlclient.exceptions import ControllerError
from apps.htmlclient.view import ViewContext

log = logging.getLogger("htmlclient.views")

PAGES_KEY = "client/html/pages"


class ClientPageView(TemplateView):
    """
    Page composée de clients HTML.

    `client/html/pages/<page>` donne le titre et la liste ordonnée des chemins
    clients; chaque client contribue son header au <head> et son body à la page.
    Toutes les parties partagent la même vue.
    """

    template_name = "htmlclient/page.html"

    def get(self, request, *args, **kwargs):
        page_id = kwargs.get("page", "")
        context = Context.from_request(request)
        page = context.config.get(f"{PAGES_KEY}/{page_id}") if page_id else None
        if not page:
            raise Http404(f"Unknown page {page_id!r}")

        paths = page.get("clients") if isinstance(page, dict) else page
        view = ViewContext(context)

        headers, bodies = [], []
        for path in paths or []:
            client = ClientFactory.create(context, path)
            client.set_view(view)
            head = client.header(page_id)
            if head:
                headers.append(head)
            bodies.append(client.body(page_id))

        log.debug("page %s rendered with %d clients", page_id, len(bodies))
        return TemplateResponse(request, self.template_name, {
            "page_id": page_id,
            "title": page.get("title", page_id) if isinstance(page, dict) else page_id,
            "headers": headers,
            "bodies": bodies,
        })


class BasketAddView(View):
    """Cible du formulaire de commande en masse: ajoute les lignes saisies au panier."""

    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        context = Context.from_request(request)
        cntl = frontend.create(context, "basket")

        ids = request.POST.getlist("b_prodid")
        quantities = request.POST.getlist("b_quantity")
        added = 0
        for idx, product_id in enumerate(ids):
            product_id = product_id.strip()
            if not product_id:
                continue
            raw = quantities[idx] if idx < len(quantities) else "1"
            try:
                cntl.add(product_id, quantity=int(raw or 1))
                added += 1
            except (ControllerError, ValueError) as exc:
                log.warning("basket add refused product=%s quantity=%r: %s", product_id, raw, exc)

        log.info("basket add: %d line(s)", added)
        target = request.POST.get("next") or request.META.get("HTTP_REFERER") or "/"
        if not url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}, require_https=request.is_secure()):
            target = "/"
        return HttpResponseRedirect(target)
