# backend/tasks/cli.py
"""
Kommandorad: Figma-fil → index.html + styles.css

    python -m backend.tasks.cli <FILE_KEY> [OUT_DIR] [--no-cache] [--cache-dir DIR]
    figma-export <FILE_KEY> [OUT_DIR]

Exit-koder: 0 ok, 1 fel (saknad token, API-fel, ingen huvudram), 2 argumentfel (argparse).
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Iterable, Optional

from .codegen import EXPORT_OUT_DIR, DirectoryArtifactSink, build_source, export_file
from .figma_ir import StructuralError
from .figma_proxy import FigmaApiError

log = logging.getLogger("figma-static-export/cli")


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="figma-export",
        description="Exportera huvudramen i en Figma-fil till statisk HTML + CSS.",
    )
    p.add_argument("file_key", help="Figma-filens nyckel (från URL:en).")
    p.add_argument("out_dir", nargs="?", default=EXPORT_OUT_DIR, help=f"Utkatalog (default: {EXPORT_OUT_DIR}).")
    p.add_argument("--no-cache", action="store_true", help="Hämta alltid från API:t och skriv inte cache.")
    p.add_argument("--cache-dir", default=None, help="Katalog för cache av rå fil-JSON.")
    return p.parse_args(list(argv) if argv is not None else None)


def main(argv: Optional[Iterable[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = parse_args(argv)

    source = build_source(use_cache=not args.no_cache, cache_dir=args.cache_dir)
    try:
        result = export_file(args.file_key, source, DirectoryArtifactSink(args.out_dir))
    except FigmaApiError as e:
        sys.stderr.write(f"error: {e}\n")
        return 1
    except StructuralError as e:
        sys.stderr.write(f"error: {e}\n")
        return 1

    print(f"Done! Open {os.path.join(str(result.out_dir), result.html_path.name)} in a browser.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
