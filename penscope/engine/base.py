"""Engine contract -- the only calls the drawing core makes.

The scope machinery never touches a rendering library directly; it talks
to an ``Engine``.  ``CairoEngine`` is the production implementation.  The
contract mirrors the primitives a stack-based 2D vector library offers:

    create_surface   save / restore   set_source   set_stroke
    set_transform    stroke / fill    write

``stroke`` and ``fill`` take **device-space** subpaths: the path is built
under the identity matrix, so the stroke width set by ``set_stroke`` is
also in device units.  Every failure surfaces as ``EngineError``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Literal

from penscope.colors import RGBA
from penscope.path.tracker import PathSegments
from penscope.transform.affine import Affine

LineCap = Literal["butt", "round", "square"]
LineJoin = Literal["miter", "round", "bevel"]


class Engine(ABC):
    """Abstract rendering engine."""

    @abstractmethod
    def create_surface(self, width: float, height: float, background: RGBA) -> None:
        """Create the drawing surface and its context, painted with *background*."""

    @property
    @abstractmethod
    def has_surface(self) -> bool:
        ...

    @abstractmethod
    def save(self) -> None:
        """Push the engine graphics state."""

    @abstractmethod
    def restore(self) -> None:
        """Pop the engine graphics state pushed by the matching ``save``."""

    @abstractmethod
    def set_source(self, rgba: RGBA) -> None:
        ...

    @abstractmethod
    def set_stroke(self, width: float, cap: LineCap, join: LineJoin) -> None:
        """Set stroke properties; *width* is in device units."""

    @abstractmethod
    def set_transform(self, transform: Affine) -> None:
        """Install *transform* as the user → device mapping."""

    @abstractmethod
    def stroke(self, path: PathSegments) -> None:
        ...

    @abstractmethod
    def fill(self, path: PathSegments) -> None:
        ...

    @abstractmethod
    def write(self, path: Path, fmt: str) -> None:
        """Encode the surface as *fmt* and write it to *path*."""

    @property
    @abstractmethod
    def raw(self) -> Any:
        """The underlying library context (unvalidated escape hatch)."""
