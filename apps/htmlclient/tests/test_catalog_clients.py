from __future__ import annotations

from django.core.cache import cache as djcache
from django.test import RequestFactory, SimpleTestCase

from apps.htmlclient.clients.catalog.filter import AttributeFilterClient, selected_ids
from apps.htmlclient.clients.factory import ClientFactory
from apps.htmlclient.config.loader import ConfigProvider
from apps.htmlclient.context import Context
from apps.htmlclient.frontend.items import AttributeItem, SupplierItem
from apps.htmlclient.frontend.memory import store
from apps.htmlclient.view import ViewContext

from .helpers import make_context

ATTRIBUTE = "client/html/catalog/filter/attribute"


def seed_attributes() -> None:
    store.reset()
    store.add_attribute(AttributeItem(id="10", label="Black", type="color", position=1))
    store.add_attribute(AttributeItem(id="11", label="White", type="color", position=0))
    store.add_attribute(AttributeItem(id="20", label="30", type="length", position=0))
    store.add_attribute(AttributeItem(id="30", label="29", type="width", position=0))


class AttributeFilterTests(SimpleTestCase):
    def setUp(self) -> None:
        djcache.clear()
        seed_attributes()
        self.addCleanup(store.reset)
        self.factory = RequestFactory()

    def collect(self, query: str = "", values=None) -> ViewContext:
        config = {f"{ATTRIBUTE}/types": ["color", "length"], f"{ATTRIBUTE}/types-oneof": ["color"]}
        config.update(values or {})
        context = make_context(config, request=self.factory.get(f"/{query}"))
        client = ClientFactory.create(context, "catalog/filter")
        view = ViewContext(context)
        client.set_view(view)
        return client.data(view)

    def test_groups_follow_configured_type_order(self) -> None:
        view = self.collect()

        self.assertEqual(list(view["attributeMap"]), ["color", "length"])
        self.assertEqual(list(view["attributeMap"]["color"]), ["11", "10"])

    def test_comma_separated_types(self) -> None:
        view = self.collect(values={f"{ATTRIBUTE}/types": "length, color"})

        self.assertEqual(list(view["attributeMap"]), ["length", "color"])

    def test_checked_items(self) -> None:
        view = self.collect("?f_attrid[]=20&f_oneid[color][]=11")

        color = view["attributeMap"]["color"]
        self.assertTrue(color["11"].get("checked"))
        self.assertIsNone(color["10"].get("checked"))
        self.assertTrue(view["attributeMap"]["length"]["20"].get("checked"))

    def test_form_params(self) -> None:
        view = self.collect(values={f"{ATTRIBUTE}/types-option": ["length"]})

        self.assertEqual(view["attributeMap"]["color"]["10"].get("formparam"), ["f_oneid", "color", ""])
        self.assertEqual(view["attributeMap"]["length"]["20"].get("formparam"), ["f_optid", ""])

        view = self.collect()
        self.assertEqual(view["attributeMap"]["length"]["20"].get("formparam"), ["f_attrid", ""])

    def test_reset_params_drop_attribute_filters(self) -> None:
        view = self.collect("?f_attrid=20&f_optid=30&f_oneid[color][]=11&l_page=2&f_name=cafe&x=1")

        self.assertEqual(view["attributeResetParams"], {"l_page": "2", "f_name": "cafe"})
        self.assertEqual(view["attributeMap"]["color"]["10"].get("params")["l_page"], "2")

    def test_all_groups_when_no_configured_type_matches(self) -> None:
        self.assertEqual(
            AttributeFilterClient.sort({"width": {}, "color": {}}, ["size"]),
            {"width": {}, "color": {}},
        )

    def test_selected_ids_accepts_every_form(self) -> None:
        params = {"f_oneid[color]": ["11"], "f_oneid[width]": ["30", ""], "f_attrid": "20"}

        self.assertEqual(selected_ids(params, "f_oneid"), ["11", "30"])
        self.assertEqual(selected_ids(params, "f_attrid"), ["20"])

    def test_filter_body_varies_with_filter_params(self) -> None:
        for query in ("", "?f_attrid=10"):
            context = Context(config=ConfigProvider(), request=self.factory.get(f"/{query}"))
            client = ClientFactory.create(context, "catalog/filter")
            client.set_view(ViewContext(context))
            output = client.body("catalog")
            self.assertIn("catalog-filter-attribute", output)

        self.assertEqual(context.cache.stats()["backend_hits"], 0)
        self.assertIn('checked="checked"', output)

    def test_unrelated_params_share_the_cached_body(self) -> None:
        outputs = []
        for query in ("?utm_source=a", "?utm_source=b"):
            context = Context(config=ConfigProvider(), request=self.factory.get(f"/{query}"))
            client = ClientFactory.create(context, "catalog/filter")
            client.set_view(ViewContext(context))
            outputs.append(client.body("catalog"))

        self.assertEqual(outputs[0], outputs[1])
        self.assertEqual(context.cache.stats()["backend_hits"], 1)


class SupplierClientTests(SimpleTestCase):
    def setUp(self) -> None:
        djcache.clear()
        store.reset()
        self.addCleanup(store.reset)
        store.add_supplier(SupplierItem(id="101", label="Test supplier 2", position=1))
        store.add_supplier(SupplierItem(id="100", label="Test supplier 1", position=0))

    def test_supplier_list(self) -> None:
        context = make_context()
        client = ClientFactory.create(context, "catalog/supplier")
        view = ViewContext(context)
        client.set_view(view)

        view = client.data(view)

        self.assertEqual([s.id for s in view["supplierList"]], ["100", "101"])

    def test_configured_ids(self) -> None:
        context = make_context({"client/html/catalog/supplier/supid": "101"})
        client = ClientFactory.create(context, "catalog/supplier")
        view = ViewContext(context)
        client.set_view(view)

        self.assertEqual([s.id for s in client.data(view)["supplierList"]], ["101"])

    def test_body(self) -> None:
        context = Context(config=ConfigProvider(), request=RequestFactory().get("/"))
        client = ClientFactory.create(context, "catalog/supplier")
        client.set_view(ViewContext(context))

        output = client.body("catalog")

        self.assertIn("Test supplier 1", output)
        self.assertLess(output.index("Test supplier 1"), output.index("Test supplier 2"))
