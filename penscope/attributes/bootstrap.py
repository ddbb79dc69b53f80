"""Bootstrap attribute: ``Paper``.

``Paper`` creates the engine surface, paints the background and installs
the unit-space transform together with the default ink and pen.  Sizes
are either explicit device units (``Paper(800, 600)``) or a named paper
size rendered at a DPI (``Paper.from_size("A4", dpi=150)``, or
positionally ``Paper("A4", 150, "landscape")``).

Fields left as ``None`` fall back to the drawing defaults
(``penscope/configs/defaults.yaml``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from penscope.attributes.model import BootstrapAttribute, GraphicsState, PenState
from penscope.colors import ColorSpec, parse_color
from penscope.transform.affine import initial_transform

if TYPE_CHECKING:
    from penscope.configs.loader import DrawingDefaults
    from penscope.engine.base import Engine

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4

Orientation = Literal["portrait", "landscape"]


@dataclass(frozen=True, slots=True)
class Paper(BootstrapAttribute):
    """Drawing surface.

    Parameters
    ----------
    width, height : float | None
        Surface size in device units (pixels for raster output, points for
        vector output).  Required unless *size* is given.
    background : ColorSpec | None
        Color painted under the drawing.
    border : float | None
        Margin as a fraction of the shorter axis, in [0, 0.5).
    centered : bool | None
        Put the unit-space origin at the surface centre.
    size : str | None
        Named paper size (``"A4"``, ``"letter"``, ...); see ``from_size``.
    dpi : float | None
        Device units per inch for named sizes.
    orientation : ``"portrait"`` | ``"landscape"`` | None
        Orientation for named sizes.
    """

    width: float | None = None
    height: float | None = None
    background: ColorSpec | None = None
    border: float | None = None
    centered: bool | None = None
    size: str | None = None
    dpi: float | None = None
    orientation: Orientation | None = None

    def __post_init__(self) -> None:
        if isinstance(self.width, str):
            self._shift_named_size()
        if self.size is None:
            if self.width is None or self.height is None:
                raise ValueError("Paper needs width and height, or a named size")
            if self.width <= 0 or self.height <= 0:
                raise ValueError(
                    f"Paper size must be positive, got {self.width} x {self.height}"
                )
        elif self.width is not None or self.height is not None:
            raise ValueError("Paper takes either width/height or a named size, not both")
        if self.border is not None and not 0.0 <= self.border < 0.5:
            raise ValueError(f"Paper border must be in [0, 0.5), got {self.border}")
        if self.dpi is not None and self.dpi <= 0:
            raise ValueError(f"Paper dpi must be > 0, got {self.dpi}")
        if self.orientation not in (None, "portrait", "landscape"):
            raise ValueError(
                f"orientation must be 'portrait' or 'landscape', got {self.orientation!r}"
            )
        if self.background is not None:
            parse_color(self.background)

    def _shift_named_size(self) -> None:
        # Paper("A4", 150, "landscape") fills width/height/background
        # positionally; move them to size/dpi/orientation.
        if self.size is not None:
            raise ValueError(
                f"Paper got named size {self.width!r} twice; use Paper.from_size"
            )
        object.__setattr__(self, "size", self.width)
        object.__setattr__(self, "width", None)
        if self.height is not None:
            if self.dpi is not None:
                raise ValueError(
                    f"Paper got dpi {self.height!r} and dpi={self.dpi!r}; use Paper.from_size"
                )
            object.__setattr__(self, "dpi", self.height)
            object.__setattr__(self, "height", None)
        if self.background in ("portrait", "landscape") and self.orientation is None:
            object.__setattr__(self, "orientation", self.background)
            object.__setattr__(self, "background", None)
        if self.dpi is not None and not isinstance(self.dpi, (int, float)):
            raise ValueError(f"Paper dpi must be a number, got {self.dpi!r}")

    @classmethod
    def from_size(
        cls,
        size: str,
        dpi: float | None = None,
        orientation: Orientation | None = None,
        background: ColorSpec | None = None,
        border: float | None = None,
        centered: bool | None = None,
    ) -> Paper:
        """Paper of a named size, resolved against the paper-size table."""
        return cls(
            size=size,
            dpi=dpi,
            orientation=orientation,
            background=background,
            border=border,
            centered=centered,
        )

    def dimensions(self, defaults: DrawingDefaults) -> tuple[float, float]:
        """Surface ``(width, height)`` in device units."""
        if self.size is None:
            return float(self.width), float(self.height)

        w_mm, h_mm = defaults.paper_size_mm(self.size)
        orientation = self.orientation or defaults.paper.orientation
        if orientation == "landscape":
            w_mm, h_mm = max(w_mm, h_mm), min(w_mm, h_mm)
        else:
            w_mm, h_mm = min(w_mm, h_mm), max(w_mm, h_mm)
        dpi = self.dpi if self.dpi is not None else defaults.paper.dpi
        return round(w_mm / MM_PER_INCH * dpi), round(h_mm / MM_PER_INCH * dpi)

    def bootstrap(self, engine: Engine, defaults: DrawingDefaults) -> GraphicsState:
        width, height = self.dimensions(defaults)
        background = parse_color(
            self.background if self.background is not None else defaults.paper.background
        )
        border = self.border if self.border is not None else defaults.paper.border
        centered = self.centered if self.centered is not None else defaults.paper.centered

        engine.create_surface(width, height, background)
        transform = initial_transform(width, height, border, centered)
        engine.set_transform(transform)

        ink = parse_color(defaults.ink.color)
        engine.set_source(ink)

        pen = PenState(
            width=defaults.pen.width * transform.linear_scale(),
            cap=defaults.pen.cap,
            join=defaults.pen.join,
        )
        engine.set_stroke(pen.width, pen.cap, pen.join)

        logger.debug(
            "Paper %.0f x %.0f, border=%.3f, centered=%s", width, height, border, centered
        )
        return GraphicsState(transform=transform, ink=ink, pen=pen)
