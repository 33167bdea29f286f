# backend/tasks/utils.py
"""
Gemensamma hjälpfunktioner för exportpipen:

* Talformatering för CSS (px-värden utan onödiga decimaler)
* Avrundning "half-up" så att kanaler och procent blir samma som i Figma-UI:t
* Kanoniska strukturnycklar för deduplicering av stildeskriptorer
* Säkra filnamn för cache-nycklar
"""

from __future__ import annotations

import json
import math
import re
from decimal import Decimal
from typing import Any, Optional

# ─────────────────────────── 1) Tal ───────────────────────────


def to_float(x: Any) -> Optional[float]:
    if isinstance(x, bool):
        return None
    try:
        return float(x)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def round_half_up(x: float) -> int:
    """
    Avrundar .5 uppåt (0.5 → 1, 127.5 → 128).
    Pythons round() avrundar mot jämnt tal, vilket ger fel kanalvärden.
    """
    return int(math.floor(x + 0.5))


def fmt_num(v: Any) -> str:
    """
    Formaterar ett tal för CSS:
      20.0 → "20", 20.5 → "20.5", -3 → "-3", 1.5e-05 → "0.000015".
    Icke-numeriska värden returneras som str().
    """
    if isinstance(v, bool):
        return str(v).lower()
    if isinstance(v, int):
        return str(v)
    if isinstance(v, float):
        if math.isfinite(v) and v.is_integer():
            return str(int(v))
        s = repr(v)
        # Figma-brus som 1.52587890625e-05 skrivs som vanligt decimaltal
        if "e" in s:
            s = format(Decimal(s), "f")
        return s
    return str(v)


# ─────────────────────────── 2) Strukturnycklar ───────────────────────────


def canonical_key(obj: Any) -> str:
    """
    Deterministisk nyckel över en deskriptors fält.
    Nycklar sorteras på alla nivåer, så fältordningen i källan spelar ingen roll.
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


# ─────────────────────────── 3) Filnamn ───────────────────────────

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


def safe_file_key(file_key: str) -> str:
    """Figma-filnyckel → filnamnssäker sträng (inga snedstreck eller punkter i början)."""
    s = _UNSAFE.sub("_", (file_key or "").strip()).lstrip(".")
    return s or "_"


__all__ = ["to_float", "round_half_up", "fmt_num", "canonical_key", "safe_file_key"]
