from __future__ import annotations
"""
Figma → Render-IR för statisk HTML/CSS-export.

Mål:
- Deterministisk och oföränderlig beskrivning av nodträdet.
- All geometri förälder-relativ: varje nods (x, y) räknas mot närmaste förälders
  bounding box, inte mot roten. Roten hamnar alltid på (0, 0).
- Visuella attribut (fills, strokes, effects, opacity, radier) kopieras oförändrade
  eller får explicita defaults. Ingen tolkning av paints sker här.
- Saknad geometri är inget fel: noden blir ett degenererat löv (0, 0, 0, 0).
- Enda fatala fel: ingen igenkännbar rotram i dokumentet → StructuralError.

Publikt API: normalize_node, file_to_ir, iter_nodes, StructuralError, IRNode, TextContent.
"""

from dataclasses import dataclass, field
from copy import deepcopy
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union
import json
import logging
import os

from pydantic import ValidationError

from .schemas import FRAME, TEXT, RawDocument, RawNode

log = logging.getLogger("figma-static-export/figma-ir")

_MINLOG = os.getenv("FIGMA_IR_MINLOG", "0").lower() in ("1", "true", "yes")

def _minlog(evt: str, **kv):
    if _MINLOG:
        try:
            print("[figma_ir]", evt, json.dumps(kv, ensure_ascii=False, default=str))
        except (TypeError, ValueError):
            print("[figma_ir]", evt, kv)

# ────────────────────────────────────────────────────────────────────────────
# Fel
# ────────────────────────────────────────────────────────────────────────────

class StructuralError(ValueError):
    """Dokumentet saknar en rot som går att rendera. Ej retrybart."""

# ────────────────────────────────────────────────────────────────────────────
# IR-typer
# ────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TextContent:
    characters: str = ""
    style: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class IRNode:
    id: str
    name: str
    type: str
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    fills: Tuple[Dict[str, Any], ...] = ()
    strokes: Tuple[Dict[str, Any], ...] = ()
    stroke_weight: Optional[float] = None
    effects: Tuple[Dict[str, Any], ...] = ()
    opacity: float = 1.0
    corner_radius: Optional[float] = None
    corner_radii: Optional[Tuple[float, float, float, float]] = None
    text: Optional[TextContent] = None
    children: Tuple["IRNode", ...] = ()

    @property
    def is_text(self) -> bool:
        return self.type == TEXT and self.text is not None

# ────────────────────────────────────────────────────────────────────────────
# Hjälpare
# ────────────────────────────────────────────────────────────────────────────

def _as_raw(node: Union[RawNode, Dict[str, Any]]) -> RawNode:
    if isinstance(node, RawNode):
        return node
    try:
        return RawNode.model_validate(node)
    except ValidationError as e:
        raise StructuralError(f"Ogiltig nod i dokumentet: {e.error_count()} valideringsfel") from e

def _radii(v: Optional[List[float]]) -> Optional[Tuple[float, float, float, float]]:
    if v is None:
        return None
    vals = list(v)[:4] + [0.0] * max(0, 4 - len(v))
    return (vals[0], vals[1], vals[2], vals[3])

# ────────────────────────────────────────────────────────────────────────────
# Normalisering
# ────────────────────────────────────────────────────────────────────────────

def normalize_node(node: Union[RawNode, Dict[str, Any]],
                   parent_x: float = 0.0,
                   parent_y: float = 0.0) -> IRNode:
    """
    Rå nod → IRNode med koordinater relativt (parent_x, parent_y).
    Barnen normaliseras mot nodens EGEN bounding box-origo.
    """
    raw = _as_raw(node)
    bb = raw.absoluteBoundingBox
    bx, by = (bb.x, bb.y) if bb is not None else (0.0, 0.0)
    bw, bh = (bb.width, bb.height) if bb is not None else (0.0, 0.0)

    text: Optional[TextContent] = None
    if raw.type == TEXT:
        text = TextContent(characters=raw.characters or "",
                           style=deepcopy(raw.style) if raw.style else {})

    children = tuple(normalize_node(ch, bx, by) for ch in raw.children)

    return IRNode(
        id=raw.id,
        name=raw.name,
        type=raw.type,
        x=bx - parent_x,
        y=by - parent_y,
        width=bw,
        height=bh,
        fills=tuple(deepcopy(raw.fills)),
        strokes=tuple(deepcopy(raw.strokes)),
        stroke_weight=raw.strokeWeight,
        effects=tuple(deepcopy(raw.effects)),
        opacity=raw.opacity if raw.opacity is not None else 1.0,
        corner_radius=raw.cornerRadius,
        corner_radii=_radii(raw.rectangleCornerRadii),
        text=text,
        children=children,
    )

def _is_main_frame(n: Any) -> bool:
    return isinstance(n, dict) and n.get("type") == FRAME and "frame" in str(n.get("name") or "").lower()

def find_main_frame(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Första FRAME på första sidan vars namn innehåller "frame" (skiftlägesokänsligt).
    Arbetar på rå JSON: syskon och övriga sidor valideras aldrig.
    """
    pages = document.get("children")
    if not isinstance(pages, list) or not pages:
        raise StructuralError("Dokumentet saknar sidor.")
    first = pages[0] if isinstance(pages[0], dict) else {}
    for n in first.get("children") or []:
        if _is_main_frame(n):
            return n
    raise StructuralError("No main FRAME found.")

def file_to_ir(file_json: Union[RawDocument, Dict[str, Any]]) -> List[IRNode]:
    """
    Hela fil-JSON → IR-skog med en rot (huvudramen).
    Endast huvudramens delträd valideras; ramens syskon på sidan ignoreras.
    """
    if isinstance(file_json, RawDocument):
        doc = file_json
    else:
        if not isinstance(file_json, dict) or not isinstance(file_json.get("document"), dict):
            raise StructuralError("Fil-JSON saknar 'document'.")
        try:
            doc = RawDocument.model_validate(file_json)
        except ValidationError as e:
            raise StructuralError(f"Ogiltigt dokument: {e.error_count()} valideringsfel") from e

    frame = _as_raw(find_main_frame(doc.document))
    bb = frame.absoluteBoundingBox
    ox, oy = (bb.x, bb.y) if bb is not None else (0.0, 0.0)

    _minlog("ir.build.start", frame_id=frame.id, frame_name=frame.name, origin=[ox, oy])
    root = normalize_node(frame, ox, oy)

    log.info("IR built", extra={"frame_id": root.id, "nodes": sum(1 for _ in iter_nodes([root]))})
    _minlog("ir.build.done", frame_id=root.id, w=root.width, h=root.height)
    return [root]

def iter_nodes(forest: List[IRNode]) -> Iterator[IRNode]:
    """Pre-order över hela skogen."""
    for n in forest:
        yield n
        yield from iter_nodes(list(n.children))


__all__ = [
    "StructuralError",
    "TextContent",
    "IRNode",
    "normalize_node",
    "find_main_frame",
    "file_to_ir",
    "iter_nodes",
]
