"""State attributes: ``Ink``, ``Pen``, ``Scale``, ``Translate``, ``Rotate``.

State attributes are legal at any depth.  Within one scope they apply left
to right, each seeing the state left by the previous one, so later
attributes win and transforms compose in order.  None of them has an
inverse: the scope's saved frame undoes them all at exit.
"""

from __future__ import annotations

import math
from abc import abstractmethod
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from penscope.attributes.model import GraphicsState, PenState, StateAttribute
from penscope.colors import RGBA, ColorSpec, parse_color
from penscope.transform.affine import Affine

if TYPE_CHECKING:
    from penscope.engine.base import Engine, LineCap, LineJoin

_CAPS = ("butt", "round", "square")
_JOINS = ("miter", "round", "bevel")


@dataclass(frozen=True, slots=True)
class Ink(StateAttribute):
    """Source color for strokes and fills.

    Parameters
    ----------
    color : ColorSpec
        Color name, hex string, or RGB(A) tuple.  Parsed eagerly.
    """

    color: ColorSpec
    rgba: RGBA = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "rgba", parse_color(self.color))

    def apply(self, engine: Engine, state: GraphicsState) -> GraphicsState:
        engine.set_source(self.rgba)
        return replace(state, ink=self.rgba)


@dataclass(frozen=True, slots=True)
class Pen(StateAttribute):
    """Stroke width, cap and join.

    *width* is in the user units in effect when the pen applies; it is
    converted to device units at that moment and is not rescaled by later
    ``Scale`` attributes.  ``None`` keeps the current value.
    """

    width: float | None = None
    cap: LineCap | None = None
    join: LineJoin | None = None

    def __post_init__(self) -> None:
        if self.width is not None and not self.width > 0:
            raise ValueError(f"Pen width must be > 0, got {self.width}")
        if self.cap is not None and self.cap not in _CAPS:
            raise ValueError(f"Pen cap must be one of {_CAPS}, got {self.cap!r}")
        if self.join is not None and self.join not in _JOINS:
            raise ValueError(f"Pen join must be one of {_JOINS}, got {self.join!r}")

    def apply(self, engine: Engine, state: GraphicsState) -> GraphicsState:
        current = state.pen
        pen = PenState(
            width=(
                self.width * state.transform.linear_scale()
                if self.width is not None
                else current.width
            ),
            cap=self.cap if self.cap is not None else current.cap,
            join=self.join if self.join is not None else current.join,
        )
        engine.set_stroke(pen.width, pen.cap, pen.join)
        return replace(state, pen=pen)


@dataclass(frozen=True, slots=True)
class _TransformAttribute(StateAttribute):
    @abstractmethod
    def local(self) -> Affine:
        """Incremental transform in the current user space."""

    def apply(self, engine: Engine, state: GraphicsState) -> GraphicsState:
        transform = state.transform.then(self.local())
        engine.set_transform(transform)
        return replace(state, transform=transform)


@dataclass(frozen=True, slots=True)
class Scale(_TransformAttribute):
    """Scale the current user space; ``Scale(f)`` scales both axes by *f*."""

    sx: float
    sy: float | None = None

    def __post_init__(self) -> None:
        if self.sy is None:
            object.__setattr__(self, "sy", self.sx)
        if self.sx == 0 or self.sy == 0:
            raise ValueError(f"Scale factors must be non-zero, got ({self.sx}, {self.sy})")

    def local(self) -> Affine:
        return Affine.scaling(self.sx, self.sy)


@dataclass(frozen=True, slots=True)
class Translate(_TransformAttribute):
    """Move the origin by ``(dx, dy)`` current user units."""

    dx: float
    dy: float

    def local(self) -> Affine:
        return Affine.translation(self.dx, self.dy)


@dataclass(frozen=True, slots=True)
class Rotate(_TransformAttribute):
    """Rotate counter-clockwise by *theta* radians about the current origin."""

    theta: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.theta):
            raise ValueError(f"Rotate angle must be finite, got {self.theta}")

    def local(self) -> Affine:
        return Affine.rotation(self.theta)
