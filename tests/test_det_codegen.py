from __future__ import annotations

import html
import re
import unittest

from figma_docs import document, hello_document, node, solid, two_rects_document

from backend.tasks.codegen import render_document
from backend.tasks.det_codegen import STYLESHEET_NAME, generate_css, generate_html
from backend.tasks.figma_ir import file_to_ir
from backend.tasks.style_registry import StyleRegistry, collect_styles


def _render(doc):
    forest = file_to_ir(doc)
    reg = collect_styles(forest)
    return generate_html(forest, reg), generate_css(forest, reg)


def _rule(css: str, class_id: str) -> str:
    m = re.search(r"\." + re.escape(class_id) + r" \{\n(.*?)\n\}", css, re.S)
    if not m:
        raise AssertionError(f"no rule for .{class_id}")
    return m.group(1)


class ScenarioTests(unittest.TestCase):
    def test_hello_stylesheet(self) -> None:
        _html, css = _render(hello_document())
        self.assertIn("font-size:16px;", _rule(css, "ts-0"))
        self.assertIn("background-color:rgba(255,255,255,1.000);", _rule(css, "fs-0"))
        self.assertNotIn(".ts-1", css)
        self.assertNotIn(".fs-1", css)
        self.assertNotIn(".bs-", css)

    def test_hello_markup(self) -> None:
        markup, _css = _render(hello_document())
        self.assertIn("Hi &amp; bye", markup)
        self.assertIn("left:20px;top:50px", markup)
        self.assertIn('<section class="page" id="page-1:1" style="width:320px;height:568px;position:relative;">', markup)
        self.assertIn(f'href="{STYLESHEET_NAME}"', markup)

    def test_text_node_gets_color_not_background(self) -> None:
        markup, _css = _render(hello_document())
        self.assertIn('class="node ts-0"', markup)
        self.assertNotIn("fs-0", markup)
        self.assertIn("color:rgba(255,255,255,1.000);", markup)
        self.assertIn("font-size:16px", markup)
        self.assertIn("align-items:center", markup)

    def test_two_rects_share_fill_and_split_strokes(self) -> None:
        markup, css = _render(two_rects_document())
        self.assertEqual(css.count(".fs-"), 1)
        self.assertEqual(css.count(".bs-"), 2)
        self.assertIn("border:1px solid rgba(0,0,0,1.000);", _rule(css, "bs-0"))
        self.assertIn("border:2px solid rgba(0,0,0,1.000);", _rule(css, "bs-1"))
        self.assertIn('class="node fs-0 bs-0"', markup)
        self.assertIn('class="node fs-0 bs-1"', markup)


class DeterminismTests(unittest.TestCase):
    def test_rerun_is_byte_identical(self) -> None:
        for build in (hello_document, two_rects_document):
            first = render_document(build())
            second = render_document(build())
            self.assertEqual(first.html, second.html)
            self.assertEqual(first.css, second.css)


class StylesheetTests(unittest.TestCase):
    def test_section_order_and_empty_tables(self) -> None:
        frame = node("f", "FRAME", "Frame", 0, 0, 10, 10)
        forest = file_to_ir(document(frame))
        css = generate_css(forest, collect_styles(forest))
        self.assertTrue(css.startswith("* {"))
        self.assertIn(".page {", css)
        self.assertIn(".node {\n  position:absolute;", css)
        self.assertNotIn(".ts-", css)
        self.assertNotIn(".fs-", css)
        self.assertNotIn(".bs-", css)

    def test_text_style_declarations_only_when_present(self) -> None:
        style = {
            "fontFamily": "Inter",
            "fontSize": 14,
            "fontWeight": 600,
            "lineHeightPx": 19.5,
            "letterSpacing": 0.2,
            "textAlignHorizontal": "JUSTIFIED",
            "textCase": "UPPER",
        }
        t1 = node("t1", "TEXT", "t1", 0, 0, 1, 1, characters="a", style=style)
        t2 = node("t2", "TEXT", "t2", 0, 0, 1, 1, characters="b", style={"fontSize": 10, "letterSpacing": 0})
        forest = file_to_ir(document(node("f", "FRAME", "Frame", 0, 0, 10, 10, children=[t1, t2])))
        css = generate_css(forest, collect_styles(forest))

        ts0 = _rule(css, "ts-0")
        self.assertEqual(
            ts0.split("\n"),
            [
                '  font-family:"Inter", system-ui, -apple-system, sans-serif;',
                "  font-size:14px;",
                "  font-weight:600;",
                "  line-height:19.5px;",
                "  letter-spacing:0.2px;",
                "  text-align:justify;",
                "  text-transform:uppercase;",
            ],
        )
        self.assertEqual(_rule(css, "ts-1"), "  font-size:10px;")

    def test_text_without_style_gets_an_empty_class_block(self) -> None:
        t1 = node("t1", "TEXT", "t1", 0, 0, 1, 1, characters="a")
        t2 = node("t2", "TEXT", "t2", 0, 0, 1, 1, characters="b", style={"fontSize": 16})
        forest = file_to_ir(document(node("f", "FRAME", "Frame", 0, 0, 10, 10, children=[t1, t2])))
        reg = collect_styles(forest)
        css = generate_css(forest, reg)
        markup = generate_html(forest, reg)

        self.assertIn(".ts-0 {\n}\n\n.ts-1 {\n  font-size:16px;\n}", css)
        self.assertNotIn("{\n\n}", css)
        self.assertIn('id="node-t1" class="node ts-0"', markup)
        self.assertIn('id="node-t2" class="node ts-1"', markup)

    def test_tiny_float_noise_prints_as_plain_decimal(self) -> None:
        style = {"fontSize": 12, "letterSpacing": 1.52587890625e-05}
        t = node("t", "TEXT", "t", 0, 0, 1, 1, characters="a", style=style)
        forest = file_to_ir(document(node("f", "FRAME", "Frame", 0, 0, 10, 10, children=[t])))
        css = generate_css(forest, collect_styles(forest))
        self.assertIn("letter-spacing:0.0000152587890625px;", css)
        self.assertNotIn("e-05", css)

    def test_gradient_fill_uses_background_shorthand(self) -> None:
        grad = {
            "type": "GRADIENT_LINEAR",
            "gradientStops": [
                {"position": 0, "color": {"r": 0, "g": 0, "b": 0, "a": 1}},
                {"position": 1, "color": {"r": 1, "g": 1, "b": 1, "a": 1}},
            ],
        }
        rect = node("r", "RECTANGLE", "r", 0, 0, 1, 1, fills=[grad])
        forest = file_to_ir(document(node("f", "FRAME", "Frame", 0, 0, 10, 10, children=[rect])))
        css = generate_css(forest, collect_styles(forest))
        self.assertIn(
            "background:linear-gradient(90deg, rgba(0,0,0,1.000) 0%, rgba(255,255,255,1.000) 100%);",
            _rule(css, "fs-0"),
        )

    def test_image_fill_degrades_to_transparent(self) -> None:
        rect = node("r", "RECTANGLE", "r", 0, 0, 1, 1, fills=[{"type": "IMAGE", "imageRef": "x"}])
        forest = file_to_ir(document(node("f", "FRAME", "Frame", 0, 0, 10, 10, children=[rect])))
        css = generate_css(forest, collect_styles(forest))
        self.assertIn("background-color:transparent;", _rule(css, "fs-0"))


class MarkupTests(unittest.TestCase):
    def _markup(self, *children, **frame_kw):
        frame = node("f", "FRAME", "Frame", 0, 0, 100, 100, children=list(children), **frame_kw)
        forest = file_to_ir(document(frame))
        return generate_html(forest, collect_styles(forest))

    def test_escaping_round_trip_and_whitespace(self) -> None:
        raw = "a < b && c > d\n  indented"
        markup = self._markup(node("t", "TEXT", "t", 0, 0, 10, 10, characters=raw, style={"fontSize": 12}))
        m = re.search(r"<p [^>]*>(.*?)</p>", markup, re.S)
        self.assertIsNotNone(m)
        self.assertEqual(m.group(1), "a &lt; b &amp;&amp; c &gt; d\n  indented")
        self.assertEqual(html.unescape(m.group(1)), raw)

    def test_opacity_only_when_not_one(self) -> None:
        markup = self._markup(
            node("a", "RECTANGLE", "a", 0, 0, 1, 1),
            node("b", "RECTANGLE", "b", 0, 0, 1, 1, opacity=0.5),
        )
        self.assertEqual(markup.count("opacity:"), 1)
        self.assertIn("opacity:0.5", markup)

    def test_corner_radii_declaration_comes_after_corner_radius(self) -> None:
        markup = self._markup(
            node("a", "RECTANGLE", "a", 0, 0, 1, 1, cornerRadius=4, rectangleCornerRadii=[1, 2, 3, 4]),
        )
        self.assertIn("border-radius:4px;border-radius:1px 2px 3px 4px;", markup)

    def test_negative_offsets_are_kept(self) -> None:
        markup = self._markup(node("a", "RECTANGLE", "a", -2, -3.5, 4, 4))
        self.assertIn("left:-2px;top:-3.5px;width:4px;height:4px;", markup)

    def test_nesting_and_empty_leaves(self) -> None:
        leaf = node("l", "RECTANGLE", "l", 5, 5, 1, 1)
        group = node("g", "GROUP", "g", 0, 0, 10, 10, children=[leaf])
        markup = self._markup(group)
        self.assertIn('  <div id="node-g" class="node" style="left:0px;top:0px;width:10px;height:10px;">\n', markup)
        self.assertIn('    <div id="node-l" class="node" style="left:5px;top:5px;width:1px;height:1px;"></div>\n', markup)
        self.assertIn("\n  </div>\n</section>", markup)

    def test_text_without_visible_solid_fill_uses_default_color(self) -> None:
        markup = self._markup(node("t", "TEXT", "t", 0, 0, 1, 1, characters="x", fills=[solid(1, 0, 0, visible=False)]))
        self.assertIn("color:#333333;", markup)
        self.assertIn("text-align:left;", markup)

    def test_page_carries_root_fill_stroke_and_radius(self) -> None:
        markup = self._markup(
            fills=[solid(0, 0, 0)], strokes=[solid(1, 1, 1)], strokeWeight=1, cornerRadius=24,
        )
        self.assertIn(
            '<section class="page fs-0 bs-0" id="page-f" '
            'style="width:100px;height:100px;position:relative;border-radius:24px;overflow:hidden;">',
            markup,
        )

    def test_node_ids_are_attribute_escaped(self) -> None:
        markup = self._markup(node('a"b', "RECTANGLE", "a", 0, 0, 1, 1))
        self.assertIn('id="node-a&quot;b"', markup)

    def test_empty_registry_gives_no_style_classes(self) -> None:
        forest = file_to_ir(hello_document())
        markup = generate_html(forest, StyleRegistry())
        self.assertIn('class="node"', markup)
        self.assertNotIn("ts-0", markup)


if __name__ == "__main__":
    unittest.main()
