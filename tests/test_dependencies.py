"""
These tests check `resolve_dependencies()` on its own, without a `Document`.

For the rendered output, see `test_styles.py` and `test_scripts.py`.
"""

import logging

from django_document import Script, Style, resolve_dependencies

from .testutils import setup_test_config

setup_test_config()


def make_styles(graph: dict[str, list[str]]) -> dict[str, Style]:
    return {handle: Style(handle, src=f"{handle}.css", dependencies=deps) for handle, deps in graph.items()}


class TestResolveDependencies:
    def test_no_dependencies(self):
        styles = make_styles({"one": [], "two": []})

        assert list(resolve_dependencies(styles, ["two", "one"])) == ["two", "one"]

    def test_returns_definitions(self):
        styles = make_styles({"one": []})

        assert resolve_dependencies(styles, ["one"]) == {"one": styles["one"]}

    def test_dependencies_before_dependants(self):
        styles = make_styles({"one": [], "two": ["one"], "three": ["two", "one"]})

        assert list(resolve_dependencies(styles, ["three"])) == ["one", "two", "three"]

    def test_complex_graph(self):
        styles = make_styles(
            {
                "a1": ["b1", "b2"],
                "b1": ["c1"],
                "b2": ["c2", "c3"],
                "c1": [],
                "c2": [],
                "c3": [],
                "a2": ["b3", "b4"],
                "b3": ["c2"],
                "b4": ["b1"],
            }
        )

        result = resolve_dependencies(styles, ["a1", "c2", "a2"])

        assert list(result) == ["c3", "c2", "b2", "c1", "b1", "a1", "b4", "b3", "a2"]

    def test_every_dependency_precedes_dependant(self):
        graph = {
            "app": ["router", "store", "ui"],
            "router": ["core"],
            "store": ["core", "utils"],
            "ui": ["utils", "icons"],
            "icons": [],
            "utils": ["core"],
            "core": [],
        }
        result = list(resolve_dependencies(make_styles(graph), ["app"]))

        assert sorted(result) == sorted(graph)
        for handle, deps in graph.items():
            for dep in deps:
                assert result.index(dep) < result.index(handle)

    def test_cycle(self):
        styles = make_styles({"one": ["two"], "two": ["three"], "three": ["one"]})

        assert list(resolve_dependencies(styles, ["one"])) == ["one", "three", "two"]

    def test_self_dependency(self):
        styles = make_styles({"one": ["one"]})

        assert list(resolve_dependencies(styles, ["one"])) == ["one"]

    def test_unknown_handles(self, caplog):
        styles = make_styles({"two": ["one"]})

        with caplog.at_level(logging.DEBUG, logger="django_document"):
            result = resolve_dependencies(styles, ["unknown", "two"])

        assert list(result) == ["two"]
        assert "Skipping unknown asset 'unknown'" in caplog.text
        assert "Skipping unknown asset 'one'" in caplog.text

    def test_rendered_are_excluded(self):
        styles = make_styles({"one": [], "two": ["one"], "three": []})

        assert list(resolve_dependencies(styles, ["two", "three"], rendered=["one", "three"])) == ["two"]

    def test_deterministic(self):
        graph = {"a": ["b", "c"], "b": ["d"], "c": ["d"], "d": []}

        first = list(resolve_dependencies(make_styles(graph), ["a", "c"]))
        second = list(resolve_dependencies(make_styles(graph), ["a", "c"]))

        assert first == second == ["d", "c", "b", "a"]


class TestResolvePlacement:
    def test_footer_scripts_skipped_in_head(self):
        scripts = {
            "head": Script("head", src="head.js", placement="head"),
            "footer": Script("footer", src="footer.js", dependencies=["head"]),
        }

        assert list(resolve_dependencies(scripts, ["footer"])) == ["head"]
        assert list(resolve_dependencies(scripts, ["footer"], allow_footer=True)) == ["head", "footer"]
        assert scripts["footer"].placement == "footer"

    def test_head_script_promotes_footer_dependencies(self, caplog):
        scripts = {
            "head-one": Script("head-one", src="head-one.js", placement="head"),
            "footer-one": Script("footer-one", src="footer-one.js", dependencies=["head-one"]),
            "footer-two": Script("footer-two", src="footer-two.js", dependencies=["footer-one"]),
            "head-two": Script("head-two", src="head-two.js", dependencies=["footer-two"], placement="head"),
        }

        with caplog.at_level(logging.DEBUG, logger="django_document"):
            result = resolve_dependencies(scripts, ["head-two"])

        assert list(result) == ["head-one", "footer-one", "footer-two", "head-two"]
        assert scripts["footer-one"].placement == "head"
        assert scripts["footer-two"].placement == "head"
        assert "Moving script 'footer-two' to head" in caplog.text

    def test_promotes_dependencies_of_already_expanded_script(self):
        scripts = {
            "g": Script("g", src="g.js"),
            "f": Script("f", src="f.js", dependencies=["g"]),
            "x": Script("x", src="x.js", dependencies=["f"]),
            "h": Script("h", src="h.js", dependencies=["f"], placement="head"),
        }

        # `x` expands `f` as a footer script first, then `h` moves it to head
        assert list(resolve_dependencies(scripts, ["x", "h"])) == ["g", "f", "h"]
        assert scripts["g"].placement == "head"
        assert list(resolve_dependencies(scripts, ["x", "h"], rendered=["g", "f", "h"], allow_footer=True)) == ["x"]

    def test_no_promotion_when_footer_allowed(self):
        scripts = {
            "footer": Script("footer", src="footer.js"),
            "head": Script("head", src="head.js", dependencies=["footer"], placement="head"),
        }

        assert list(resolve_dependencies(scripts, ["head"], allow_footer=True)) == ["footer", "head"]
        assert scripts["footer"].placement == "footer"

    def test_footer_script_does_not_promote(self):
        scripts = {
            "lib": Script("lib", src="lib.js"),
            "app": Script("app", src="app.js", dependencies=["lib"]),
        }

        assert list(resolve_dependencies(scripts, ["app"])) == []
        assert scripts["lib"].placement == "footer"
