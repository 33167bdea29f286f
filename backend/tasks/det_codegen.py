# backend/tasks/det_codegen.py
# -*- coding: utf-8 -*-
"""
Deterministisk IR→HTML/CSS-generator.

Mål:
- 1:1 utseende för statiska skärmar (absolut positionering, inga layoutmotorer).
- Två rena funktioner över en oföränderlig IR-skog och ett fryst stilregister:
    generate_css(forest, registry)  -> str
    generate_html(forest, registry) -> str
- Samma indata ger byte-identisk utdata. Ordningen styrs helt av registrets
  insättningsordning och IR-trädets källordning.

Observera:
- Bakgrunder sätts via fill-klasser (fs-*). TEXT-noder får aldrig bakgrundsklass;
  deras fill blir förgrundsfärg (color) på <p>.
- Textnoder duplicerar storlek/vikt/radhöjd/spärrning inline från sin egen
  typografi, eftersom klassen ensam har underspecificerat vissa attribut.
- Text escapas för &, < och >. Blanksteg och radbrytningar bevaras (pre-wrap).
- HTML:en länkar stilmallen via STYLESHEET_NAME, samma namn som sinken skriver.
"""

from __future__ import annotations

from html import escape
from typing import Any, Dict, List, Optional

from .figma_ir import IRNode
from .paints import first_visible, gradient_from_paint, rgba_from_paint
from .schemas import TEXT
from .style_registry import (
    StyleRegistry,
    find_fill_class_id,
    find_stroke_class_id,
    find_text_class_id,
)
from .utils import fmt_num

STYLESHEET_NAME = "styles.css"
DOCUMENT_NAME = "index.html"
DEFAULT_TITLE = "Figma Export"
DEFAULT_TEXT_COLOR = "#333333"

_TEXT_ALIGN = {"LEFT": "left", "RIGHT": "right", "CENTER": "center", "JUSTIFIED": "justify"}


# ──────────────────────────────────────────────────────────────────────────────
# Hjälpfunktioner
# ──────────────────────────────────────────────────────────────────────────────

def _px(v: Any) -> str:
    return f"{fmt_num(v)}px"


def _text_align(style: Dict[str, Any]) -> str:
    return _TEXT_ALIGN.get(str(style.get("textAlignHorizontal") or ""), "left")


def _font_family(family: Any) -> str:
    fam = str(family).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{fam}", system-ui, -apple-system, sans-serif'


def _attr(s: Any) -> str:
    return escape(str(s), quote=True)


def _block(selector: str, decls: List[str]) -> str:
    if not decls:
        return f"{selector} {{\n}}"
    body = "\n".join(f"  {d}" for d in decls)
    return f"{selector} {{\n{body}\n}}"


def _radius_decls(node: IRNode) -> List[str]:
    """border-radius från cornerRadius, sedan från de fyra hörnen (tl tr br bl) som då vinner."""
    out: List[str] = []
    if node.corner_radius is not None:
        out.append(f"border-radius:{_px(node.corner_radius)}")
    if node.corner_radii is not None:
        tl, tr, br, bl = node.corner_radii
        out.append(f"border-radius:{_px(tl)} {_px(tr)} {_px(br)} {_px(bl)}")
    return out


# ──────────────────────────────────────────────────────────────────────────────
# CSS
# ──────────────────────────────────────────────────────────────────────────────

GLOBAL_CSS = """\
* {
  box-sizing:border-box;
}
html, body {
  margin:0;
  padding:0;
}
body {
  font-family:system-ui, -apple-system, BlinkMacSystemFont, "SF Pro Text", sans-serif;
  background:#111111;
  display:flex;
  align-items:center;
  justify-content:center;
  min-height:100vh;
}
.page {
  position:relative;
}
.node {
  position:absolute;
  overflow:hidden;
}"""


def _text_style_decls(style: Dict[str, Any]) -> List[str]:
    """Typografiklasser; varje rad endast om källattributet finns."""
    out: List[str] = []
    if style.get("fontFamily"):
        out.append(f"font-family:{_font_family(style['fontFamily'])};")
    if style.get("fontSize"):
        out.append(f"font-size:{_px(style['fontSize'])};")
    if style.get("fontWeight"):
        out.append(f"font-weight:{fmt_num(style['fontWeight'])};")
    if style.get("lineHeightPx"):
        out.append(f"line-height:{_px(style['lineHeightPx'])};")
    if style.get("letterSpacing"):
        out.append(f"letter-spacing:{_px(style['letterSpacing'])};")
    if style.get("textAlignHorizontal"):
        out.append(f"text-align:{_text_align(style)};")
    if style.get("textCase") == "UPPER":
        out.append("text-transform:uppercase;")
    return out


def _fill_decl(paint: Dict[str, Any]) -> str:
    gradient = gradient_from_paint(paint)
    if gradient:
        return f"background:{gradient};"
    return f"background-color:{rgba_from_paint(paint)};"


def _stroke_decl(paint: Dict[str, Any], weight: Optional[float]) -> str:
    return f"border:{_px(weight)} solid {rgba_from_paint(paint)};"


def generate_css(forest: List[IRNode], registry: StyleRegistry) -> str:
    """
    Global reset → textstilar → fills → strokes.
    Tomma tabeller ger inga block. forest tas emot för symmetri med generate_html;
    allt innehåll kommer från registret.
    """
    sections: List[str] = [GLOBAL_CSS]

    text_css = "\n\n".join(
        _block(f".{e.class_id}", _text_style_decls(e.payload)) for e in registry.text_styles
    )
    fills_css = "\n\n".join(
        _block(f".{e.class_id}", [_fill_decl(e.payload)]) for e in registry.fills
    )
    strokes_css = "\n\n".join(
        _block(f".{e.class_id}", [_stroke_decl(e.payload, e.weight)]) for e in registry.strokes
    )

    sections += [text_css, fills_css, strokes_css]
    return "\n\n".join(s for s in sections if s) + "\n"


# ──────────────────────────────────────────────────────────────────────────────
# HTML
# ──────────────────────────────────────────────────────────────────────────────

def _text_color(node: IRNode) -> str:
    fill = first_visible(node.fills)
    if fill is not None and fill.get("type") == "SOLID":
        return rgba_from_paint(fill)
    return DEFAULT_TEXT_COLOR


def _inline_text_style(node: IRNode) -> str:
    st = node.text.style if node.text is not None else {}
    parts = [
        "margin:0",
        "width:100%",
        "white-space:pre-wrap",
        f"text-align:{_text_align(st)}",
        f"color:{_text_color(node)}",
    ]
    if st.get("fontSize"):
        parts.append(f"font-size:{_px(st['fontSize'])}")
    if st.get("fontWeight"):
        parts.append(f"font-weight:{fmt_num(st['fontWeight'])}")
    if st.get("lineHeightPx"):
        parts.append(f"line-height:{_px(st['lineHeightPx'])}")
    if st.get("letterSpacing"):
        parts.append(f"letter-spacing:{_px(st['letterSpacing'])}")
    return ";".join(parts) + ";"


def _node_to_html(node: IRNode, registry: StyleRegistry, depth: int) -> str:
    """Skriv HTML för en nod + dess barn (rekursivt, pre-order)."""
    indent = "  " * depth

    style_parts = [
        f"left:{_px(node.x)}",
        f"top:{_px(node.y)}",
        f"width:{_px(node.width)}",
        f"height:{_px(node.height)}",
    ]
    if node.opacity != 1:
        style_parts.append(f"opacity:{fmt_num(node.opacity)}")
    style_parts += _radius_decls(node)

    classes = ["node"]
    if node.type != TEXT:
        fill_class = find_fill_class_id(node, registry)
        if fill_class:
            classes.append(fill_class)
    stroke_class = find_stroke_class_id(node, registry)
    if stroke_class:
        classes.append(stroke_class)

    # TEXT: flex-container som centrerar vertikalt, <p> bär färg och typografi
    if node.type == TEXT and node.text is not None:
        text_class = find_text_class_id(node.text.style, registry)
        if text_class:
            classes.append(text_class)
        style_parts += ["display:flex", "align-items:center", "justify-content:flex-start"]
        open_tag = f'{indent}<div id="node-{_attr(node.id)}" class="{" ".join(classes)}" style="{";".join(style_parts)};">'
        text_html = escape(node.text.characters, quote=False)
        return (
            f"{open_tag}\n"
            f'{indent}  <p style="{_inline_text_style(node)}">{text_html}</p>\n'
            f"{indent}</div>"
        )

    open_tag = f'{indent}<div id="node-{_attr(node.id)}" class="{" ".join(classes)}" style="{";".join(style_parts)};">'
    if not node.children:
        return f"{open_tag}</div>"

    children_html = "\n".join(_node_to_html(ch, registry, depth + 1) for ch in node.children)
    return f"{open_tag}\n{children_html}\n{indent}</div>"


def _page_to_html(root: IRNode, registry: StyleRegistry) -> str:
    """Roten blir en <section class="page"> med rotens storlek; endast barnen renderas inuti."""
    classes = ["page"]
    if root.type != TEXT:
        fill_class = find_fill_class_id(root, registry)
        if fill_class:
            classes.append(fill_class)
    stroke_class = find_stroke_class_id(root, registry)
    if stroke_class:
        classes.append(stroke_class)

    style = f"width:{_px(root.width)};height:{_px(root.height)};position:relative;"
    radius = _radius_decls(root)
    if radius:
        style += "".join(f"{d};" for d in radius) + "overflow:hidden;"

    children_html = "\n".join(_node_to_html(ch, registry, 1) for ch in root.children)
    open_tag = f'<section class="{" ".join(classes)}" id="page-{_attr(root.id)}" style="{style}">'
    if not children_html:
        return f"{open_tag}\n</section>"
    return f"{open_tag}\n{children_html}\n</section>"


def generate_html(forest: List[IRNode], registry: StyleRegistry, *, title: str = DEFAULT_TITLE) -> str:
    pages_html = "\n\n".join(_page_to_html(root, registry) for root in forest)
    return (
        "<!doctype html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '  <meta charset="UTF-8" />\n'
        f"  <title>{escape(title, quote=False)}</title>\n"
        f'  <link rel="stylesheet" href="{STYLESHEET_NAME}" />\n'
        '  <meta name="viewport" content="width=device-width, initial-scale=1" />\n'
        "</head>\n"
        "<body>\n"
        f"{pages_html}\n"
        "</body>\n"
        "</html>\n"
    )


__all__ = [
    "STYLESHEET_NAME",
    "DOCUMENT_NAME",
    "GLOBAL_CSS",
    "generate_css",
    "generate_html",
]
