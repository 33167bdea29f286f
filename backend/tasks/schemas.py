# backend/tasks/schemas.py
"""
Pydantic-modeller för rå Figma-JSON (GET /v1/files/:key).

Varje valfritt attribut är ett uttryckligt Optional-fält i stället för
spridda "finns nyckeln?"-kontroller. Okända nycklar tolereras och ignoreras,
så att nya Figma-fält inte knäcker exporten.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

FRAME = "FRAME"
TEXT = "TEXT"


class BoundingBox(BaseModel):
    model_config = ConfigDict(extra="ignore")

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class RawNode(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: str = ""
    type: str = ""
    absoluteBoundingBox: Optional[BoundingBox] = None
    fills: List[Dict[str, Any]] = Field(default_factory=list)
    strokes: List[Dict[str, Any]] = Field(default_factory=list)
    strokeWeight: Optional[float] = None
    effects: List[Dict[str, Any]] = Field(default_factory=list)
    opacity: Optional[float] = None
    cornerRadius: Optional[float] = None
    rectangleCornerRadii: Optional[List[float]] = None
    characters: Optional[str] = None
    style: Optional[Dict[str, Any]] = None
    children: List["RawNode"] = Field(default_factory=list)

    # Figma skickar ibland null i stället för tom lista
    @field_validator("fills", "strokes", "effects", "children", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("id", "name", "type", mode="before")
    @classmethod
    def _none_as_blank(cls, v: Any) -> Any:
        return "" if v is None else v


class RawDocument(BaseModel):
    """
    Hela fil-svaret, löst validerat. document hålls som rå JSON så att bara
    huvudramens delträd valideras som RawNode; trasiga syskon och sidor stoppar
    inte exporten.
    """
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    document: Dict[str, Any]


RawNode.model_rebuild()

__all__ = ["FRAME", "TEXT", "BoundingBox", "RawNode", "RawDocument"]
