#!/usr/bin/env python3
import os
import sys
import argparse
from pathlib import Path

from pagemapper.config import ERROR_POLICIES, PAGE_SIZES, DEFAULT_PAGE_SIZE, DEFAULT_FONT_FAMILY

# --- Helpers ---------------------------------------------------------------

def _die(msg: str, code: int = 2):
    print(f"Error: {msg}", file=sys.stderr)
    sys.exit(code)

def _norm(p: Path) -> Path:
    """Expand ~ and resolve to absolute (non-strict)."""
    return p.expanduser().resolve()


# --- Argparse --------------------------------------------------------------

def build_parser():
    p = argparse.ArgumentParser(
        prog="pagemapper",
        description="Export editor page annotations (text and images) to PDF"
    )
    p.add_argument("annotations", help="annotation file (JSON)")
    p.add_argument("--output", "-o", dest="output", required=True,
                   help="PDF file to write")
    p.add_argument("--debug", "-d", action="store_true",
                   help="Print the computed center, ratios and matrices of every object")
    p.add_argument("--on-error", choices=ERROR_POLICIES, default="skip",
                   help="Skip objects that fail to render, or abort the export")
    p.add_argument("--font", dest="font_family", default=DEFAULT_FONT_FAMILY,
                   help="Font family for text objects without one")
    p.add_argument("--page-size", choices=sorted(PAGE_SIZES), default=DEFAULT_PAGE_SIZE,
                   help="Page size for pages without a crop box")
    return p


# --- Main ------------------------------------------------------------------

def main(argv=None):
    args = build_parser().parse_args(argv)

    source = _norm(Path(args.annotations))
    if not source.is_file():
        _die(f"annotation file does not exist or is not a file: {args.annotations}")
    target = _norm(Path(args.output))
    if target.suffix.lower() != ".pdf":
        _die(f"invalid PDF path: {args.output}")

    # Headless by default; fonts and PDF output still need a GUI application
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtGui import QGuiApplication
    app = QGuiApplication.instance() or QGuiApplication(sys.argv[:1])

    from pagemapper.models.page_annotation import AnnotationDocument
    from pagemapper.services.export_manager import ExportError, ExportManager
    from pagemapper.services.export_settings import ExportSettings

    try:
        document = AnnotationDocument.load(source)
    except (OSError, ValueError) as e:
        _die(f"could not read {source}: {e}")

    settings = ExportSettings(
        debug=args.debug,
        on_error=args.on_error,
        default_font_family=args.font_family,
        page_size=args.page_size,
    )
    manager = ExportManager(settings)
    try:
        out = manager.export_pdf(document, target)
    except (ExportError, ValueError) as e:
        _die(str(e), code=1)

    stats = manager.stats
    print(f"Wrote {len(document)} page(s) to {out}: "
          f"{stats['rendered']} rendered, {stats['skipped']} skipped")
    return 0

if __name__ == "__main__":
    sys.exit(main())
