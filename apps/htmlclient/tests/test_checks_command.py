from __future__ import annotations
from io import StringIO
from unittest import mock

from django.core.cache import cache as djcache
from django.core.management import call_command
from django.test import SimpleTestCase, override_settings

from apps.htmlclient import checks
from apps.htmlclient.frontend.memory import store


class SystemChecksTests(SimpleTestCase):
    def test_registry_empty_is_a_warning(self) -> None:
        with mock.patch.object(checks.registry, "all_clients", return_value=[]):
            messages = checks.registry_not_empty_check(None)

        self.assertEqual([m.id for m in messages], ["htmlclient.W001"])

    def test_shipped_configuration_passes(self) -> None:
        self.assertEqual(checks.registry_not_empty_check(None), [])
        self.assertEqual(checks.configured_names_check(None), [])
        self.assertEqual(checks.configured_decorators_check(None), [])

    @override_settings(HTMLCLIENT_CONFIG={"client": {"html": {"basket": {"bulk": {"name": "My$"}}}}})
    def test_invalid_configured_name(self) -> None:
        messages = checks.configured_names_check(None)

        self.assertEqual([m.id for m in messages], ["htmlclient.E001"])
        self.assertIn("basket/bulk", messages[0].msg)

    @override_settings(HTMLCLIENT_CONFIG={"client": {"html": {"catalog": {"supplier": {"name": "Missing"}}}}})
    def test_unknown_configured_name(self) -> None:
        messages = checks.configured_names_check(None)

        self.assertEqual([m.id for m in messages], ["htmlclient.E001"])

    @override_settings(HTMLCLIENT_CONFIG={"client": {"html": {"basket": {"bulk": {"decorators": {"global": ["Nope"]}}}}}})
    def test_unknown_decorator(self) -> None:
        messages = checks.configured_decorators_check(None)

        self.assertEqual([m.id for m in messages], ["htmlclient.E002"])


class HtmlClientTreeCommandTests(SimpleTestCase):
    def setUp(self) -> None:
        djcache.clear()
        store.reset()
        self.addCleanup(store.reset)

    def test_prints_the_tree(self) -> None:
        out = StringIO()

        call_command("htmlclient_tree", "basket/related", stdout=out)

        lines = out.getvalue().splitlines()
        self.assertIn("basket/related [RelatedClient]", lines)
        self.assertIn("  basket/related/bought [BoughtClient]", lines)

    @override_settings(HTMLCLIENT_CONFIG={"client": {"html": {"catalog": {"supplier": {"decorators": {"global": ["Strip"]}}}}}})
    def test_shows_decorators(self) -> None:
        out = StringIO()

        call_command("htmlclient_tree", "catalog/supplier", stdout=out)

        self.assertIn("catalog/supplier [SupplierClient] <- StripDecorator", out.getvalue())

    def test_render(self) -> None:
        out = StringIO()

        call_command("htmlclient_tree", "catalog/supplier", "--render", stdout=out)

        self.assertIn("catalog-supplier", out.getvalue())

    def test_invalid_name_exits_with_2(self) -> None:
        err = StringIO()

        with self.assertRaises(SystemExit) as cm:
            call_command("htmlclient_tree", "basket/bulk", "--name", "$$$", stdout=StringIO(), stderr=err)

        self.assertEqual(cm.exception.code, 2)
        self.assertIn("Invalid characters", err.getvalue())
