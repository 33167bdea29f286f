from __future__ import annotations
"""
Stilregister: deduplicering av textstilar, fills och strokes.

Tre oberoende tabeller. Varje unik deskriptor (strukturell likhet, fältordning
oviktig) får en klass-id i registreringsordning:
    ts-0, ts-1, … (text)   fs-0, … (fill)   bs-0, … (stroke + bredd)

Registret fylls av EN pre-order-traversering av IR-skogen (nod → fill → stroke →
barn) och fryses innan emission. Uppslagen (find_*) använder exakt samma
urvalsregel och nyckelkonstruktion som insamlingen.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from .figma_ir import IRNode
from .paints import first_visible
from .utils import canonical_key

log = logging.getLogger("figma-static-export/style-registry")

TEXT_PREFIX = "ts"
FILL_PREFIX = "fs"
STROKE_PREFIX = "bs"

# ────────────────────────────────────────────────────────────────────────────
# Tabeller
# ────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class StyleEntry:
    class_id: str
    payload: Dict[str, Any]
    weight: Optional[float] = None


class StyleTable:
    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        self._entries: "OrderedDict[str, StyleEntry]" = OrderedDict()
        self._frozen = False

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries.values())

    def entries(self) -> List[StyleEntry]:
        return list(self._entries.values())

    def get(self, key: str) -> Optional[StyleEntry]:
        return self._entries.get(key)

    def register(self, key: str, payload: Dict[str, Any], weight: Optional[float] = None) -> str:
        hit = self._entries.get(key)
        if hit is not None:
            return hit.class_id
        if self._frozen:
            raise RuntimeError(f"Stilregistret är fryst; kan inte registrera ny {self.prefix}-stil.")
        entry = StyleEntry(class_id=f"{self.prefix}-{len(self._entries)}", payload=payload, weight=weight)
        self._entries[key] = entry
        return entry.class_id

    def freeze(self) -> None:
        self._frozen = True


@dataclass
class StyleRegistry:
    text_styles: StyleTable = field(default_factory=lambda: StyleTable(TEXT_PREFIX))
    fills: StyleTable = field(default_factory=lambda: StyleTable(FILL_PREFIX))
    strokes: StyleTable = field(default_factory=lambda: StyleTable(STROKE_PREFIX))

    def freeze(self) -> "StyleRegistry":
        for t in (self.text_styles, self.fills, self.strokes):
            t.freeze()
        return self

    def summary(self) -> Dict[str, int]:
        return {"text_styles": len(self.text_styles), "fills": len(self.fills), "strokes": len(self.strokes)}

# ────────────────────────────────────────────────────────────────────────────
# Nycklar och urval (delas av insamling och uppslag)
# ────────────────────────────────────────────────────────────────────────────

def _text_key(style: Dict[str, Any]) -> str:
    return canonical_key(style)

def _fill_key(paint: Dict[str, Any]) -> str:
    return canonical_key(paint)

def _stroke_key(paint: Dict[str, Any], weight: float) -> str:
    return canonical_key({"strokePaint": paint, "w": weight})

def _text_style(node: IRNode) -> Optional[Dict[str, Any]]:
    # Varje TEXT-nod har en deskriptor, även tom {}; den får också ett ts-id
    if node.is_text and node.text is not None:
        return node.text.style
    return None

def _stroke_of(node: IRNode) -> Optional[Tuple[Dict[str, Any], float]]:
    paint = first_visible(node.strokes)
    if paint is None or not node.stroke_weight:
        return None
    return paint, node.stroke_weight

# ────────────────────────────────────────────────────────────────────────────
# Insamling
# ────────────────────────────────────────────────────────────────────────────

def _collect(node: IRNode, registry: StyleRegistry) -> None:
    style = _text_style(node)
    if style is not None:
        registry.text_styles.register(_text_key(style), style)

    fill = first_visible(node.fills)
    if fill is not None:
        registry.fills.register(_fill_key(fill), fill)

    stroke = _stroke_of(node)
    if stroke is not None:
        paint, weight = stroke
        registry.strokes.register(_stroke_key(paint, weight), paint, weight)

    for ch in node.children:
        _collect(ch, registry)

def collect_styles(forest: Iterable[IRNode], registry: Optional[StyleRegistry] = None) -> StyleRegistry:
    """Fyller (och fryser) ett register från IR-skogen."""
    reg = registry if registry is not None else StyleRegistry()
    for root in forest:
        _collect(root, reg)
    log.info("Styles collected", extra=reg.summary())
    return reg.freeze()

# ────────────────────────────────────────────────────────────────────────────
# Uppslag
# ────────────────────────────────────────────────────────────────────────────

def find_text_class_id(style: Optional[Dict[str, Any]], registry: StyleRegistry) -> Optional[str]:
    if style is None:
        return None
    entry = registry.text_styles.get(_text_key(style))
    return entry.class_id if entry else None

def find_fill_class_id(node: IRNode, registry: StyleRegistry) -> Optional[str]:
    fill = first_visible(node.fills)
    if fill is None:
        return None
    entry = registry.fills.get(_fill_key(fill))
    return entry.class_id if entry else None

def find_stroke_class_id(node: IRNode, registry: StyleRegistry) -> Optional[str]:
    stroke = _stroke_of(node)
    if stroke is None:
        return None
    entry = registry.strokes.get(_stroke_key(*stroke))
    return entry.class_id if entry else None


__all__ = [
    "StyleEntry",
    "StyleTable",
    "StyleRegistry",
    "collect_styles",
    "find_text_class_id",
    "find_fill_class_id",
    "find_stroke_class_id",
]
