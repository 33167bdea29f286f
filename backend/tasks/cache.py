# backend/tasks/cache.py
"""
Diskcache för rå fil-JSON.

  <FIGMA_CACHE_DIR>/<file_key>.json

Trasiga eller oläsbara cacheposter loggas och behandlas som miss, så att en
avbruten skrivning aldrig stoppar en export.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .figma_proxy import DocumentSource
from .utils import safe_file_key

log = logging.getLogger("figma-static-export/cache")

FIGMA_CACHE_DIR = os.getenv("FIGMA_CACHE_DIR", ".cache")


class DocumentCache:
    def __init__(self, cache_dir: Union[str, Path] = FIGMA_CACHE_DIR) -> None:
        self.cache_dir = Path(cache_dir)

    def path_for(self, file_key: str) -> Path:
        return self.cache_dir / f"{safe_file_key(file_key)}.json"

    def read(self, file_key: str) -> Optional[Dict[str, Any]]:
        p = self.path_for(file_key)
        if not p.exists():
            return None
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            log.warning("Cache entry unreadable, ignoring", extra={"path": str(p)}, exc_info=True)
            return None
        if not isinstance(data, dict):
            log.warning("Cache entry has unexpected type, ignoring", extra={"path": str(p)})
            return None
        return data

    def write(self, file_key: str, data: Dict[str, Any]) -> Path:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        p = self.path_for(file_key)
        p.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        log.info("Saved cache", extra={"path": str(p)})
        return p


class CachedDocumentSource:
    """Läser från cachen om möjligt, annars från källan och sparar resultatet."""

    def __init__(self, source: DocumentSource, cache: DocumentCache) -> None:
        self.source = source
        self.cache = cache

    def fetch(self, file_key: str) -> Dict[str, Any]:
        cached = self.cache.read(file_key)
        if cached is not None:
            log.info("Loaded Figma file from cache", extra={"file_key": file_key})
            return cached
        log.info("Fetching Figma file from API", extra={"file_key": file_key})
        data = self.source.fetch(file_key)
        self.cache.write(file_key, data)
        return data


__all__ = ["FIGMA_CACHE_DIR", "DocumentCache", "CachedDocumentSource"]
