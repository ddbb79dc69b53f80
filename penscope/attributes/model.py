"""Attribute model -- the vocabulary of scope entry arguments.

Every attribute is an immutable dataclass tagged with a category.  The
scope stack dispatches on the tag, never on the concrete type:

BOOTSTRAP
    Establishes the drawing surface (``Paper``).  Outermost scope only.
    ``bootstrap(engine, defaults)`` returns the base graphics state.
OUTPUT
    Consumes the finished drawing (``File``).  Outermost scope only.
    ``release(engine)`` runs once, when the outermost scope exits cleanly.
STATE
    Mutates graphics state for the scope's duration (``Ink``, ``Pen``,
    ``Scale``, ``Translate``, ``Rotate``).  ``apply(engine, state)`` returns
    the new state; there is no inverse -- the frame saved at scope entry is
    restored on exit instead.

``GraphicsState`` is the Python-side mirror of what the engine holds
between save/restore pairs.  It is immutable so a frame can keep the
previous state by reference.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

from penscope.colors import RGBA
from penscope.transform.affine import Affine

if TYPE_CHECKING:
    from penscope.configs.loader import DrawingDefaults
    from penscope.engine.base import Engine, LineCap, LineJoin


class AttributeCategory(Enum):
    """Placement and lifecycle class of an attribute."""

    BOOTSTRAP = "bootstrap"
    OUTPUT = "output"
    STATE = "state"

    @property
    def outermost_only(self) -> bool:
        return self is not AttributeCategory.STATE


# ---------------------------------------------------------------------------
# Graphics state
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PenState:
    """Stroke properties.

    Parameters
    ----------
    width : float
        Stroke width in **device** units, fixed when ``Pen`` applied.
    cap, join : str
        Cairo-style line cap and join names.
    """

    width: float
    cap: LineCap
    join: LineJoin


@dataclass(frozen=True, slots=True)
class GraphicsState:
    """Transform, source color and stroke properties in effect."""

    transform: Affine
    ink: RGBA
    pen: PenState


# ---------------------------------------------------------------------------
# Base classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Attribute(ABC):
    """Base class for all scope attributes."""

    category: ClassVar[AttributeCategory]


@dataclass(frozen=True, slots=True)
class BootstrapAttribute(Attribute):
    category: ClassVar[AttributeCategory] = AttributeCategory.BOOTSTRAP

    @abstractmethod
    def bootstrap(self, engine: Engine, defaults: DrawingDefaults) -> GraphicsState:
        """Create the surface and return the base graphics state."""


@dataclass(frozen=True, slots=True)
class OutputAttribute(Attribute):
    category: ClassVar[AttributeCategory] = AttributeCategory.OUTPUT

    @abstractmethod
    def release(self, engine: Engine) -> None:
        """Consume the finished drawing."""


@dataclass(frozen=True, slots=True)
class StateAttribute(Attribute):
    category: ClassVar[AttributeCategory] = AttributeCategory.STATE

    @abstractmethod
    def apply(self, engine: Engine, state: GraphicsState) -> GraphicsState:
        """Push this attribute's effect to *engine*; return the new state."""
