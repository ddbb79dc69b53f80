"""Rendering engine adapter (pycairo, with Pillow for extra raster formats)."""

from penscope.engine.base import Engine, LineCap, LineJoin
from penscope.engine.cairo_engine import CairoEngine
from penscope.engine.formats import format_for_path

__all__ = ["CairoEngine", "Engine", "LineCap", "LineJoin", "format_for_path"]
