"""Color spec parsing.

Accepted specs:
    - CSS color names and ``#rgb`` / ``#rrggbb`` / ``#rrggbbaa`` /
      ``rgb()`` / ``hsl()`` strings (parsed by Pillow's ``ImageColor``)
    - 3- or 4-tuples of floats in [0, 1]
    - 3- or 4-tuples of ints in [0, 255]

Output is always an RGBA tuple of floats in [0, 1], the form the engine's
``set_source`` takes.
"""

from __future__ import annotations

from typing import Sequence, Union

from PIL import ImageColor

RGBA = tuple[float, float, float, float]

ColorSpec = Union[str, Sequence[float], Sequence[int]]


def parse_color(spec: ColorSpec) -> RGBA:
    """Convert a color spec to RGBA floats.

    Raises
    ------
    ValueError
        If the spec is not a recognised color.
    """
    if isinstance(spec, str):
        try:
            channels = ImageColor.getrgb(spec)
        except ValueError as exc:
            raise ValueError(f"Unknown color spec {spec!r}") from exc
        return _from_ints(channels)

    try:
        values = tuple(spec)
    except TypeError as exc:
        raise ValueError(f"Color spec must be a string or sequence, got {spec!r}") from exc

    if len(values) not in (3, 4):
        raise ValueError(f"Color tuple must have 3 or 4 channels, got {len(values)}")

    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        if not all(0 <= v <= 255 for v in values):
            raise ValueError(f"Integer color channels must be in [0, 255], got {values}")
        return _from_ints(values)

    floats = tuple(float(v) for v in values)
    if not all(0.0 <= v <= 1.0 for v in floats):
        raise ValueError(f"Float color channels must be in [0, 1], got {values}")
    if len(floats) == 3:
        floats = floats + (1.0,)
    return floats  # type: ignore[return-value]


def _from_ints(channels: Sequence[int]) -> RGBA:
    r, g, b = (c / 255.0 for c in channels[:3])
    a = channels[3] / 255.0 if len(channels) == 4 else 1.0
    return (r, g, b, a)
