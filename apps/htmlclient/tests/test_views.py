from __future__ import annotations

from django.core.cache import cache as djcache
from django.test import SimpleTestCase

from apps.htmlclient.frontend.items import ProductItem
from apps.htmlclient.frontend.memory import BASKET_SESSION_KEY, store


class ClientPageViewTests(SimpleTestCase):
    def setUp(self) -> None:
        djcache.clear()
        store.reset()
        self.addCleanup(store.reset)

    def test_catalog_page(self) -> None:
        response = self.client.get("/p/catalog/")

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "<title>Catalog</title>", html=False)
        self.assertContains(response, "catalog-filter")
        self.assertContains(response, "catalog-supplier")

    def test_unknown_page(self) -> None:
        response = self.client.get("/p/nothing/")

        self.assertEqual(response.status_code, 404)

    def test_basket_page(self) -> None:
        response = self.client.get("/p/basket/")

        self.assertContains(response, "basket-bulk")
        self.assertContains(response, "htmlclient-basket-bulk")


class BasketAddViewTests(SimpleTestCase):
    def setUp(self) -> None:
        djcache.clear()
        store.reset()
        self.addCleanup(store.reset)
        store.add_product(ProductItem(id="1", label="Cafe Noire Cappuccino"))
        store.add_product(ProductItem(id="3", label="Unittest: Test Selection"))
        store.link("1", "product", "bought-together", "3", position=0)

    def test_add_lines_then_show_related_products(self) -> None:
        response = self.client.post("/basket/add/", {
            "b_prodid": ["1", "", "2"],
            "b_quantity": ["2", "1", "0"],
            "next": "/p/basket/",
        })

        self.assertRedirects(response, "/p/basket/", fetch_redirect_response=False)
        rows = self.client.session[BASKET_SESSION_KEY]
        self.assertEqual([(r["product_id"], r["quantity"]) for r in rows], [("1", 2)])

        page = self.client.get("/p/basket/")
        self.assertContains(page, 'data-prodid="3"')

    def test_foreign_redirect_is_refused(self) -> None:
        response = self.client.post("/basket/add/", {"b_prodid": ["1"], "next": "https://evil.example.com/"})

        self.assertRedirects(response, "/", fetch_redirect_response=False)

    def test_get_is_not_allowed(self) -> None:
        self.assertEqual(self.client.get("/basket/add/").status_code, 405)
