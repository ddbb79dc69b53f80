"""Output format detection from file extensions.

Vector formats and PNG are encoded by cairo surfaces; the remaining raster
formats go through Pillow from a rendered ARGB image.
"""

from __future__ import annotations

from pathlib import Path

from penscope.errors import EngineError

CAIRO_FORMATS = {
    ".png": "png",
    ".svg": "svg",
    ".pdf": "pdf",
    ".ps": "ps",
    ".eps": "eps",
}

PILLOW_FORMATS = {
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".bmp": "bmp",
    ".gif": "gif",
    ".tif": "tiff",
    ".tiff": "tiff",
    ".webp": "webp",
}


def format_for_path(path: str | Path) -> str:
    """Return the output format name implied by *path*'s extension.

    Raises
    ------
    EngineError
        If the extension is missing or not supported.
    """
    suffix = Path(path).suffix.lower()
    if suffix in CAIRO_FORMATS:
        return CAIRO_FORMATS[suffix]
    if suffix in PILLOW_FORMATS:
        return PILLOW_FORMATS[suffix]
    supported = ", ".join(sorted({*CAIRO_FORMATS, *PILLOW_FORMATS}))
    raise EngineError(
        f"Cannot infer output format from {str(path)!r} (supported: {supported})"
    )


def is_vector(fmt: str) -> bool:
    return fmt in ("svg", "pdf", "ps", "eps")
