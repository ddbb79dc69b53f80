"""Cairo-backed rendering engine.

Drawing goes to a ``cairo.RecordingSurface`` sized to the paper.  Nothing is
rasterised until ``write`` replays the recording onto the surface type the
output format needs (image, SVG, PDF, PostScript), so one drawing can be
written to several formats.

Pillow covers the raster formats cairo does not encode itself (JPEG, BMP,
GIF, TIFF, WebP).  Encoded bytes are written with ``atomic_write_bytes``.
"""

from __future__ import annotations

import io
import logging
import math
from pathlib import Path
from typing import Callable

import cairo
import numpy as np
from PIL import Image

from penscope.colors import RGBA
from penscope.engine.base import Engine, LineCap, LineJoin
from penscope.engine.formats import is_vector
from penscope.errors import EngineError
from penscope.path.tracker import PathSegments
from penscope.transform.affine import Affine
from penscope.utils.fs import atomic_write_bytes

logger = logging.getLogger(__name__)

_CAPS = {
    "butt": cairo.LINE_CAP_BUTT,
    "round": cairo.LINE_CAP_ROUND,
    "square": cairo.LINE_CAP_SQUARE,
}

_JOINS = {
    "miter": cairo.LINE_JOIN_MITER,
    "round": cairo.LINE_JOIN_ROUND,
    "bevel": cairo.LINE_JOIN_BEVEL,
}

# Formats without an alpha channel are flattened onto white.
_OPAQUE_FORMATS = ("jpeg", "bmp")


class CairoEngine(Engine):
    """``Engine`` implementation on pycairo.

    One instance backs exactly one drawing; a second drawing needs a second
    engine.
    """

    def __init__(self) -> None:
        self._surface: cairo.RecordingSurface | None = None
        self._ctx: cairo.Context | None = None
        self._width = 0.0
        self._height = 0.0
        self._depth = 0

    # ------------------------------------------------------------------
    # Surface lifecycle
    # ------------------------------------------------------------------

    def create_surface(self, width: float, height: float, background: RGBA) -> None:
        if self._surface is not None:
            raise EngineError("Engine already owns a surface")
        if width <= 0 or height <= 0:
            raise EngineError(f"Surface size must be positive, got {width} x {height}")
        try:
            self._surface = cairo.RecordingSurface(
                cairo.CONTENT_COLOR_ALPHA, cairo.Rectangle(0, 0, width, height)
            )
            self._ctx = cairo.Context(self._surface)
            self._ctx.set_source_rgba(*background)
            self._ctx.paint()
        except cairo.Error as exc:
            raise EngineError(f"Failed to create {width} x {height} surface: {exc}") from exc
        self._width = float(width)
        self._height = float(height)
        logger.debug("Created %.1f x %.1f recording surface", width, height)

    @property
    def has_surface(self) -> bool:
        return self._ctx is not None

    @property
    def size(self) -> tuple[float, float]:
        return self._width, self._height

    @property
    def raw(self) -> cairo.Context:
        return self._context()

    def _context(self) -> cairo.Context:
        if self._ctx is None:
            raise EngineError("No surface: the outermost scope needs a Paper attribute")
        return self._ctx

    # ------------------------------------------------------------------
    # Graphics state
    # ------------------------------------------------------------------

    def save(self) -> None:
        self._context().save()
        self._depth += 1

    def restore(self) -> None:
        if self._depth == 0:
            raise EngineError("restore() without a matching save()")
        self._context().restore()
        self._depth -= 1

    def set_source(self, rgba: RGBA) -> None:
        self._context().set_source_rgba(*rgba)

    def set_stroke(self, width: float, cap: LineCap, join: LineJoin) -> None:
        ctx = self._context()
        try:
            ctx.set_line_width(width)
            ctx.set_line_cap(_CAPS[cap])
            ctx.set_line_join(_JOINS[join])
        except KeyError as exc:
            raise EngineError(f"Unsupported stroke property: {exc}") from exc

    def set_transform(self, transform: Affine) -> None:
        try:
            self._context().set_matrix(cairo.Matrix(*transform.as_cairo_args()))
        except cairo.Error as exc:
            raise EngineError(f"Engine rejected transform {transform!r}: {exc}") from exc

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def stroke(self, path: PathSegments) -> None:
        self._paint_path(path, cairo.Context.stroke)

    def fill(self, path: PathSegments) -> None:
        self._paint_path(path, cairo.Context.fill)

    def _paint_path(
        self, path: PathSegments, paint: Callable[[cairo.Context], None]
    ) -> None:
        ctx = self._context()
        ctx.save()
        try:
            ctx.identity_matrix()
            ctx.new_path()
            for subpath in path:
                ctx.move_to(*subpath[0])
                for point in subpath[1:]:
                    ctx.line_to(*point)
            paint(ctx)
        except cairo.Error as exc:
            raise EngineError(f"Failed to paint path: {exc}") from exc
        finally:
            ctx.restore()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def write(self, path: Path, fmt: str) -> None:
        if self._surface is None:
            raise EngineError("Nothing to write: no surface was created")
        try:
            if is_vector(fmt):
                data = self._encode_vector(fmt)
            elif fmt == "png":
                data = self._encode_png()
            else:
                data = self._encode_pillow(fmt)
            atomic_write_bytes(path, data)
        except (cairo.Error, OSError, ValueError) as exc:
            raise EngineError(f"Failed to write {path} as {fmt}: {exc}") from exc
        logger.info("Wrote %s (%s, %d bytes)", path, fmt, len(data))

    def _replay_onto(self, target: cairo.Surface) -> None:
        ctx = cairo.Context(target)
        ctx.set_source_surface(self._surface, 0, 0)
        ctx.paint()
        target.flush()

    def _rasterise(self) -> cairo.ImageSurface:
        image = cairo.ImageSurface(
            cairo.FORMAT_ARGB32,
            max(1, math.ceil(self._width)),
            max(1, math.ceil(self._height)),
        )
        self._replay_onto(image)
        return image

    def _encode_png(self) -> bytes:
        buf = io.BytesIO()
        self._rasterise().write_to_png(buf)
        return buf.getvalue()

    def _encode_vector(self, fmt: str) -> bytes:
        buf = io.BytesIO()
        if fmt == "svg":
            target = cairo.SVGSurface(buf, self._width, self._height)
        elif fmt == "pdf":
            target = cairo.PDFSurface(buf, self._width, self._height)
        else:
            target = cairo.PSSurface(buf, self._width, self._height)
            target.set_eps(fmt == "eps")
        self._replay_onto(target)
        target.finish()
        return buf.getvalue()

    def _encode_pillow(self, fmt: str) -> bytes:
        rgba = argb32_to_rgba(self._rasterise())
        img = Image.fromarray(rgba)
        if fmt in _OPAQUE_FORMATS:
            flat = Image.new("RGBA", img.size, (255, 255, 255, 255))
            img = Image.alpha_composite(flat, img).convert("RGB")
        buf = io.BytesIO()
        img.save(buf, format=fmt.upper())
        return buf.getvalue()


def argb32_to_rgba(surface: cairo.ImageSurface) -> np.ndarray:
    """Convert a premultiplied ARGB32 surface to straight RGBA uint8 (H, W, 4)."""
    surface.flush()
    width = surface.get_width()
    height = surface.get_height()
    stride = surface.get_stride()
    raw = np.frombuffer(surface.get_data(), dtype=np.uint8).reshape(height, stride)
    bgra = raw[:, : width * 4].reshape(height, width, 4).astype(np.float32)

    alpha = bgra[:, :, 3:4]
    safe = np.where(alpha > 0, alpha, 1.0)
    rgb = np.where(alpha > 0, bgra[:, :, 2::-1] * 255.0 / safe, 0.0)

    out = np.empty((height, width, 4), dtype=np.uint8)
    out[:, :, :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    out[:, :, 3] = bgra[:, :, 3].astype(np.uint8)
    return out
