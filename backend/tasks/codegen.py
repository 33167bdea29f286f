from __future__ import annotations
"""
Celery-worker + pipeline: Figma-fil → IR → stilregister → CSS + HTML → sink

Flöde:
- render_document(file_json): ren funktion, ingen I/O. Samma indata → byte-identisk utdata.
    1. figma_ir.file_to_ir        (huvudramen, förälder-relativa koordinater)
    2. style_registry.collect     (en pre-order-pass, registret fryses)
    3. det_codegen.generate_css   (läser registret)
    4. det_codegen.generate_html  (läser IR + registret)
- DirectoryArtifactSink: skriver index.html + styles.css i en katalog.
- export_figma_file (Celery): källa (med diskcache) → render_document → sink.

Felpolicy:
- StructuralError (ingen huvudram) propageras oförändrat. Ej retrybart.
- FigmaApiError från källan propageras oförändrat.
"""

import logging
import os
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from celery import Celery

from . import figma_ir as FIR
from .cache import CachedDocumentSource, DocumentCache
from .det_codegen import DOCUMENT_NAME, STYLESHEET_NAME, generate_css, generate_html
from .figma_proxy import DocumentSource, FigmaDocumentSource
from .style_registry import StyleRegistry, collect_styles

log = logging.getLogger("figma-static-export/codegen")

# ─────────────────────────────────────────────────────────
# Miljö & konfiguration
# ─────────────────────────────────────────────────────────

BROKER_URL = (os.getenv("CELERY_BROKER_URL") or "redis://redis:6379/0").strip()
RESULT_BACKEND = (os.getenv("CELERY_RESULT_BACKEND") or BROKER_URL).strip()

EXPORT_OUT_DIR = os.getenv("EXPORT_OUT_DIR", "dist").strip() or "dist"

CODEGEN_TIMING = os.getenv("CODEGEN_TIMING", "0").lower() in ("1", "true", "yes")

# ─────────────────────────────────────────────────────────
# Celery-app
# ─────────────────────────────────────────────────────────

app = Celery("codegen", broker=BROKER_URL, backend=RESULT_BACKEND)
app.conf.broker_connection_retry_on_startup = True
app.conf.broker_connection_timeout = 3
app.conf.redis_socket_timeout = 3
celery_app: Celery = app

# ─────────────────────────────────────────────────────────
# Resultattyper och sink
# ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RenderResult:
    html: str
    css: str
    forest: List[FIR.IRNode] = field(default_factory=list)
    registry: StyleRegistry = field(default_factory=StyleRegistry)


@dataclass(frozen=True)
class ExportResult:
    out_dir: Path
    html_path: Path
    css_path: Path
    styles: Dict[str, int] = field(default_factory=dict)


class ArtifactSink(Protocol):
    def write(self, html: str, css: str) -> ExportResult: ...


class DirectoryArtifactSink:
    """index.html + styles.css i out_dir. Filnamnen är samma som HTML:en länkar till."""

    def __init__(self, out_dir: Union[str, Path] = EXPORT_OUT_DIR) -> None:
        self.out_dir = Path(out_dir)

    def write(self, html: str, css: str) -> ExportResult:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        css_path = self.out_dir / STYLESHEET_NAME
        html_path = self.out_dir / DOCUMENT_NAME
        css_path.write_text(css, encoding="utf-8")
        html_path.write_text(html, encoding="utf-8")
        log.info("Artifacts written", extra={"out_dir": str(self.out_dir), "html_len": len(html), "css_len": len(css)})
        return ExportResult(out_dir=self.out_dir, html_path=html_path, css_path=css_path)

# ─────────────────────────────────────────────────────────
# Pipeline
# ─────────────────────────────────────────────────────────

def render_document(file_json: Dict[str, Any]) -> RenderResult:
    """Rå fil-JSON → (html, css). Ren funktion; kastar StructuralError."""
    t0 = time.time()
    log.info("Normalizing document...")
    forest = FIR.file_to_ir(file_json)

    registry = collect_styles(forest)

    log.info("Generating CSS...")
    css = generate_css(forest, registry)

    log.info("Generating HTML...")
    html = generate_html(forest, registry)

    if CODEGEN_TIMING:
        log.info("render.timing", extra={"ms": round((time.time() - t0) * 1000, 1)})
    return RenderResult(html=html, css=css, forest=forest, registry=registry)


def build_source(*, use_cache: bool = True, cache_dir: Optional[Union[str, Path]] = None,
                 token: Optional[str] = None) -> DocumentSource:
    source: DocumentSource = FigmaDocumentSource(token)
    if not use_cache:
        return source
    cache = DocumentCache(cache_dir) if cache_dir is not None else DocumentCache()
    return CachedDocumentSource(source, cache)


def export_file(file_key: str, source: DocumentSource, sink: ArtifactSink) -> ExportResult:
    """Källa → render → sink. Fel från källan och StructuralError propageras."""
    log.info("Export start", extra={"file_key": file_key})
    file_json = source.fetch(file_key)
    rendered = render_document(file_json)
    summary = rendered.registry.summary()
    result = replace(sink.write(rendered.html, rendered.css), styles=summary)
    log.info("Export done", extra={"file_key": file_key, **summary})
    return result

# ─────────────────────────────────────────────────────────
# Celery-task
# ─────────────────────────────────────────────────────────

@app.task(name="backend.tasks.codegen.export_figma_file")
def export_figma_file(*, file_key: str, out_dir: Optional[str] = None, use_cache: bool = True) -> Dict[str, Any]:
    result = export_file(
        file_key,
        build_source(use_cache=use_cache),
        DirectoryArtifactSink(out_dir or EXPORT_OUT_DIR),
    )
    return {
        "out_dir": str(result.out_dir),
        "html_path": str(result.html_path),
        "css_path": str(result.css_path),
        **result.styles,
    }


__all__ = [
    "app",
    "celery_app",
    "RenderResult",
    "ExportResult",
    "ArtifactSink",
    "DirectoryArtifactSink",
    "render_document",
    "build_source",
    "export_file",
    "export_figma_file",
]
