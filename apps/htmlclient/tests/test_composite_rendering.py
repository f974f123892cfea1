from __future__ import annotations

from django.core.cache import cache as djcache
from django.test import SimpleTestCase

from apps.htmlclient.clients import registry
from apps.htmlclient.clients.base import BaseClient
from apps.htmlclient.clients.factory import ClientFactory
from apps.htmlclient.exceptions import UNEXPECTED_MESSAGE
from apps.htmlclient.view import ViewContext

from .helpers import ROOT, Leaf, Root, StubRenderer, make_context, register_test_tree, unregister_test_tree

SUBPARTS = f"client/html/{ROOT}/subparts"


class Group(BaseClient):
    """Noeud intermédiaire sans template propre."""

    sub_part_names = ("x",)


class CompositeRenderingTests(SimpleTestCase):
    def setUp(self) -> None:
        djcache.clear()
        register_test_tree()
        self.addCleanup(unregister_test_tree)

    def render(self, context, uid: str = "page", phase: str = "body"):
        client = ClientFactory.create(context, ROOT)
        client.set_view(ViewContext(context, renderer=StubRenderer()))
        return client.body(uid) if phase == "body" else client.header(uid)

    # --- cache ---

    def test_second_render_comes_from_cache_and_is_identical(self) -> None:
        context = make_context()

        first = self.render(context)
        second = self.render(context)

        self.assertEqual(first, "<root>[a][b][c]</root>")
        self.assertEqual(second, first)
        self.assertEqual(context.cache.stats()["backend_sets"], 1)
        self.assertEqual(context.cache.stats()["backend_hits"], 1)
        self.assertEqual(Root.data_calls["count"], 1)

    def test_cache_hit_goes_through_modify_body(self) -> None:
        context = make_context()
        self.render(context)

        client = ClientFactory.create(context, ROOT)
        client.set_view(ViewContext(context, renderer=StubRenderer()))
        original = Root.modify_body
        seen = []

        def spy(self, content, uid):
            seen.append((content, uid))
            return original(self, content, uid)

        Root.modify_body = spy
        self.addCleanup(setattr, Root, "modify_body", original)

        client.body("page")

        self.assertEqual(seen, [("<root>[a][b][c]</root>", "page")])

    def test_data_is_collected_once_per_instance(self) -> None:
        context = make_context()
        client = ClientFactory.create(context, ROOT)
        client.set_view(ViewContext(context, renderer=StubRenderer()))

        client.header("page")
        client.body("page")

        self.assertEqual(Root.data_calls["count"], 1)

    def test_distinct_config_subtrees_never_share_an_entry(self) -> None:
        text = make_context({f"client/html/{ROOT}/domains": ["text"]})
        media = make_context({f"client/html/{ROOT}/domains": ["media"]})

        self.render(text)
        self.render(media)

        self.assertEqual(media.cache.stats()["backend_hits"], 0)
        self.assertEqual(media.cache.stats()["backend_sets"], 1)

    def test_locales_of_one_site_never_share_an_entry(self) -> None:
        french = make_context(locale="fr")
        english = make_context(locale="en")

        self.render(french)
        self.render(english)

        self.assertEqual(english.cache.stats()["backend_hits"], 0)
        self.assertEqual(english.cache.stats()["backend_sets"], 1)

    def test_page_id_is_part_of_the_key(self) -> None:
        context = make_context()
        self.render(context, uid="home")
        self.render(context, uid="catalog")

        self.assertEqual(context.cache.stats()["backend_sets"], 2)

    # --- child order ---

    def test_reordering_children_reorders_output(self) -> None:
        output = self.render(make_context({SUBPARTS: ["c", "a", "b"]}))

        self.assertEqual(output, "<root>[c][a][b]</root>")

    def test_removing_a_child_removes_only_its_output(self) -> None:
        output = self.render(make_context({SUBPARTS: ["a", "c"]}))

        self.assertEqual(output, "<root>[a][c]</root>")

    def test_comma_separated_subparts_are_accepted(self) -> None:
        output = self.render(make_context({SUBPARTS: "b, a"}))

        self.assertEqual(output, "<root>[b][a]</root>")

    # --- body errors ---

    def test_recoverable_child_error_keeps_siblings_and_is_translated(self) -> None:
        context = make_context(
            {f"client/html/{ROOT}/b/fail": "client"},
            catalogs={"client": {"Leaf b failed": "La feuille b a échoué"}},
        )

        output = self.render(context)

        self.assertEqual(output, "<root>[a][c]</root><error>La feuille b a échoué</error>")

    def test_controller_error_uses_controller_catalog(self) -> None:
        context = make_context(
            {f"client/html/{ROOT}/a/fail": "controller"},
            catalogs={"controller/frontend": {"Controller down": "Service indisponible"}},
        )

        output = self.render(context)

        self.assertIn("<error>Service indisponible</error>", output)
        self.assertIn("[b][c]", output)

    def test_unexpected_child_error_is_hidden_and_logged(self) -> None:
        context = make_context({f"client/html/{ROOT}/c/fail": "unexpected"})

        with self.assertLogs("htmlclient.clients.base", level="ERROR") as logs:
            output = self.render(context)

        self.assertEqual(len(logs.records), 1)
        self.assertIn(f"<error>{UNEXPECTED_MESSAGE}</error>", output)
        self.assertNotIn("secret internal detail", output)
        self.assertIn("[a][b]", output)

    def test_errored_render_is_not_cached(self) -> None:
        context = make_context({f"client/html/{ROOT}/b/fail": "client"})

        self.render(context)
        self.render(context)

        self.assertEqual(context.cache.stats()["backend_sets"], 0)
        self.assertEqual(Root.data_calls["count"], 2)

    def test_error_in_nested_client_is_not_cached(self) -> None:
        registry.register_client(f"{ROOT}/n", factory=Group)
        registry.register_client(f"{ROOT}/n/x", factory=Leaf)
        self.addCleanup(registry.unregister_client, f"{ROOT}/n")
        self.addCleanup(registry.unregister_client, f"{ROOT}/n/x")
        context = make_context({SUBPARTS: ["a", "n"], f"client/html/{ROOT}/n/x/fail": "client"})

        first = self.render(context)
        self.render(context)

        self.assertEqual(first, "<root>[a]</root>")
        self.assertEqual(context.cache.stats()["backend_sets"], 0)
        self.assertEqual(Root.data_calls["count"], 2)

    def test_broken_template_returns_children_output(self) -> None:
        context = make_context({f"client/html/{ROOT}/template-body": "fail:body"})

        with self.assertLogs("htmlclient.clients.base", level="ERROR"):
            output = self.render(context)

        self.assertEqual(output, "[a][b][c]")
        self.assertEqual(context.cache.stats()["backend_sets"], 0)

    # --- header ---

    def test_header_concatenates_children(self) -> None:
        output = self.render(make_context(), phase="header")

        self.assertEqual(output, "<head><a/><b/><c/></head>")

    def test_failing_child_header_is_dropped_and_logged_once(self) -> None:
        context = make_context({f"client/html/{ROOT}/b/fail-header": "client"})

        with self.assertLogs("htmlclient.clients.base", level="ERROR") as logs:
            output = self.render(context, phase="header")

        self.assertEqual(output, "<head><a/><c/></head>")
        self.assertEqual(len(logs.records), 1)

    def test_own_header_failure_gives_none_and_is_not_cached(self) -> None:
        context = make_context({f"client/html/{ROOT}/template-header": "fail:header"})

        with self.assertLogs("htmlclient.clients.base", level="ERROR") as logs:
            output = self.render(context, phase="header")

        self.assertIsNone(output)
        self.assertEqual(len(logs.records), 1)
        self.assertEqual(context.cache.stats()["backend_sets"], 0)
