"""
Tests for anchor strategies.
"""
from dolphin.core.anchors import (
    AfterFirstImportAnchor,
    CatchAllRouteAnchor,
    ClassBodyEndAnchor,
    DefaultExportAnchor,
    EndOfFileAnchor,
    ViteInputAnchor,
    locate,
)


class TestRouteAnchors:
    """Tests for catch-all and default export anchors."""

    def test_catch_all_last_match(self):
        text = 'const app = new Hono();\napp.get("*", a);\napp.all("/*", b);\n'
        offset = CatchAllRouteAnchor().find(text)
        assert text[offset:].startswith('app.all("/*"')

    def test_middleware_use_is_not_catch_all(self):
        text = 'app.use("*", logger());\napp.use("/*", cors());\n'
        assert CatchAllRouteAnchor().find(text) is None

    def test_static_use_is_catch_all(self):
        text = 'app.use("*", logger());\napp.use("/*", serveStatic({ root: "./dist" }));\n'
        offset = CatchAllRouteAnchor().find(text)
        assert text[offset:].startswith('app.use("/*", serveStatic(')

    def test_not_found_handler_is_catch_all(self):
        text = "const app = new Hono();\napp.notFound((c) => c.text('nope'));\n"
        offset = CatchAllRouteAnchor().find(text)
        assert text[offset:].startswith("app.notFound(")

    def test_plain_route_is_not_catch_all(self):
        assert CatchAllRouteAnchor().find('app.get("/api/x", h);\n') is None

    def test_default_export_last_match(self):
        text = "export default a;\n// comment\nexport default app;\n"
        offset = DefaultExportAnchor().find(text)
        assert text[offset:] == "export default app;\n"

    def test_locate_prefers_first_strategy(self):
        text = 'app.get("*", h);\nexport default app;\n'
        strategy, offset = locate(text, (CatchAllRouteAnchor(), DefaultExportAnchor()))
        assert strategy.name == "catch_all_route"
        assert offset == 0

    def test_locate_nothing_found(self):
        assert locate("const x = 1;\n", (CatchAllRouteAnchor(), DefaultExportAnchor())) == (None, None)


class TestClassBodyEndAnchor:
    """Tests for the class closing-brace anchor."""

    def test_finds_closing_brace_line(self):
        text = "export class UserShard {\n  a() {\n    return 1;\n  }\n}\n"
        offset = ClassBodyEndAnchor("UserShard").find(text)
        assert text[offset:] == "}\n"

    def test_ignores_braces_in_strings_and_comments(self):
        text = (
            "class A {\n"
            '  s = "}";\n'
            "  // } not this\n"
            "  /* { nor this */\n"
            "  t = `${x}`;\n"
            "}\n"
            "const after = {};\n"
        )
        offset = ClassBodyEndAnchor("A").find(text)
        assert text[offset:].startswith("}\nconst after")

    def test_named_class_selected(self):
        text = "class Other {\n}\n\nclass Target {\n  x = 1;\n}\n"
        offset = ClassBodyEndAnchor("Target").find(text)
        assert offset == len(text) - 2

    def test_missing_class(self):
        assert ClassBodyEndAnchor("Nope").find("class A {}\n") is None

    def test_unbalanced_class(self):
        assert ClassBodyEndAnchor("A").find("class A {\n  x() {\n") is None


class TestViteInputAnchor:
    """Tests for the Vite input mapping anchor."""

    def test_finds_end_of_mapping(self):
        text = "input: {\n  main: x,\n},"
        offset = ViteInputAnchor().find(text)
        assert text[offset] == "}"

    def test_missing_mapping(self):
        assert ViteInputAnchor().find("export default {};\n") is None


class TestAfterFirstImportAnchor:
    """Tests for the import insertion anchor."""

    def test_after_first_import(self):
        text = 'import { a } from "a";\nimport b from "b";\n\ncode();\n'
        offset = AfterFirstImportAnchor().find(text)
        assert text[offset:].startswith('import b from "b";')

    def test_side_effect_import(self):
        text = 'import "./styles.css";\nconst x = 1;\n'
        offset = AfterFirstImportAnchor().find(text)
        assert text[offset:] == "const x = 1;\n"

    def test_no_imports(self):
        assert AfterFirstImportAnchor().find("const x = 1;\n") is None


def test_end_of_file_always_found():
    assert EndOfFileAnchor().find("") == 0
    assert EndOfFileAnchor().find("abc") == 3
