from __future__ import annotations
"""
Paint → CSS-uttryck.

Rena funktioner utan tillstånd. Samma funktioner används av stilregistret,
CSS-generatorn och HTML-generatorn så att färgerna blir identiska överallt.

- SOLID → rgba(R,G,B,A) med 8-bitars kanaler och alpha med tre decimaler.
- GRADIENT_LINEAR / GRADIENT_RADIAL → linear-gradient(90deg, …) / radial-gradient(circle, …).
  Riktningen approximeras alltid till 90deg.
- Allt annat (IMAGE, okända typer, saknad paint) → "transparent" respektive None.
"""

from typing import Any, Dict, Iterable, Optional

from .utils import round_half_up, to_float

TRANSPARENT = "transparent"

# ────────────────────────────────────────────────────────────────────────────
# Hjälpare
# ────────────────────────────────────────────────────────────────────────────

def _channel(c: Dict[str, Any], k: str) -> int:
    return round_half_up((to_float(c.get(k)) or 0.0) * 255)

def first_visible(paints: Optional[Iterable[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
    """Första paint vars visible inte uttryckligen är False ("first visible wins")."""
    for p in paints or []:
        if isinstance(p, dict) and p.get("visible") is not False:
            return p
    return None

# ────────────────────────────────────────────────────────────────────────────
# Publikt API
# ────────────────────────────────────────────────────────────────────────────

def rgba_from_paint(paint: Optional[Dict[str, Any]]) -> str:
    if not isinstance(paint, dict) or paint.get("type") != "SOLID":
        return TRANSPARENT
    color = paint.get("color")
    if not isinstance(color, dict):
        color = {}

    # paint.opacity vinner över färgens egen alpha
    a = to_float(paint.get("opacity"))
    if a is None:
        a = to_float(color.get("a"))
    if a is None:
        a = 1.0

    r, g, b = _channel(color, "r"), _channel(color, "g"), _channel(color, "b")
    return f"rgba({r},{g},{b},{a:.3f})"

def gradient_from_paint(paint: Optional[Dict[str, Any]]) -> Optional[str]:
    if not isinstance(paint, dict):
        return None
    raw_stops = paint.get("gradientStops")
    if not isinstance(raw_stops, list) or not raw_stops:
        return None

    parts = []
    for st in raw_stops:
        if not isinstance(st, dict):
            continue
        color = st.get("color") if isinstance(st.get("color"), dict) else {}
        col = rgba_from_paint({"type": "SOLID", "color": color, "opacity": color.get("a")})
        pos = round_half_up((to_float(st.get("position")) or 0.0) * 100)
        parts.append(f"{col} {pos}%")
    stops = ", ".join(parts)

    t = paint.get("type")
    if t == "GRADIENT_LINEAR":
        return f"linear-gradient(90deg, {stops})"
    if t == "GRADIENT_RADIAL":
        return f"radial-gradient(circle, {stops})"
    return None


__all__ = ["TRANSPARENT", "first_visible", "rgba_from_paint", "gradient_from_paint"]
