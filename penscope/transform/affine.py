"""Coordinate transform builder.

Affines are 3×3 numpy matrices in the column-vector convention, mapping
user space to device space::

    [xd, yd, 1]^T = M · [xu, yu, 1]^T

Coordinate frames:
    - Device space: surface pixels (points for vector outputs), top-left
      origin, +Y down.
    - Unit space: installed by ``initial_transform``.  The shorter surface
      axis (less its border) has length 1, origin bottom-left of the
      margin box, +Y up.  With ``centered=True`` the origin sits at the
      surface centre and the shorter axis spans [-1, 1].

Composition:
    ``Scale``/``Translate``/``Rotate`` are expressed in the *current* user
    space, so applying ``A`` on top of ``M`` yields ``M · A``.  Attributes
    listed left to right therefore compose left to right, and
    ``Scale(0.5), Translate(1, 1)`` moves the origin half as far (in the
    parent space) as ``Translate(1, 1), Scale(0.5)``.

Nothing here clips: the transform only fixes the coordinate mapping.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class Affine:
    """Immutable 2D affine transform (user → device).

    Parameters
    ----------
    matrix : np.ndarray
        3×3 float matrix whose last row is ``[0, 0, 1]``.
    """

    matrix: np.ndarray

    def __post_init__(self) -> None:
        m = np.asarray(self.matrix, dtype=np.float64)
        if m.shape != (3, 3):
            raise ValueError(f"Affine matrix must be 3x3, got shape {m.shape}")
        m = m.copy()
        m.setflags(write=False)
        object.__setattr__(self, "matrix", m)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def identity(cls) -> Affine:
        return cls(np.eye(3))

    @classmethod
    def scaling(cls, sx: float, sy: float | None = None) -> Affine:
        if sy is None:
            sy = sx
        return cls(np.diag([float(sx), float(sy), 1.0]))

    @classmethod
    def translation(cls, dx: float, dy: float) -> Affine:
        m = np.eye(3)
        m[0, 2] = dx
        m[1, 2] = dy
        return cls(m)

    @classmethod
    def rotation(cls, theta: float) -> Affine:
        """Counter-clockwise rotation by *theta* radians about the origin."""
        c = math.cos(theta)
        s = math.sin(theta)
        return cls(np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]]))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def then(self, local: Affine) -> Affine:
        """Compose *local*, expressed in this transform's user space."""
        return Affine(self.matrix @ local.matrix)

    def apply(self, x: float, y: float) -> tuple[float, float]:
        """Map a user-space point to device space."""
        xd, yd, _ = self.matrix @ np.array([x, y, 1.0])
        return float(xd), float(yd)

    def inverse(self) -> Affine:
        if abs(self.determinant()) < 1e-15:
            raise ValueError("Affine transform is singular and has no inverse")
        return Affine(np.linalg.inv(self.matrix))

    def determinant(self) -> float:
        return float(np.linalg.det(self.matrix[:2, :2]))

    def linear_scale(self) -> float:
        """Geometric-mean scale factor of the linear part.

        Used to convert a user-space length (pen width) to device units.
        """
        return math.sqrt(abs(self.determinant()))

    def as_cairo_args(self) -> tuple[float, float, float, float, float, float]:
        """``(xx, yx, xy, yy, x0, y0)`` in ``cairo.Matrix`` argument order."""
        m = self.matrix
        return (
            float(m[0, 0]), float(m[1, 0]),
            float(m[0, 1]), float(m[1, 1]),
            float(m[0, 2]), float(m[1, 2]),
        )

    def almost_equal(self, other: Affine, tol: float = 1e-9) -> bool:
        return bool(np.allclose(self.matrix, other.matrix, atol=tol))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Affine):
            return NotImplemented
        return bool(np.array_equal(self.matrix, other.matrix))

    def __hash__(self) -> int:
        return hash(self.matrix.tobytes())

    def __repr__(self) -> str:
        xx, yx, xy, yy, x0, y0 = self.as_cairo_args()
        return f"Affine(xx={xx:g}, yx={yx:g}, xy={xy:g}, yy={yy:g}, x0={x0:g}, y0={y0:g})"


def initial_transform(
    width: float,
    height: float,
    border: float = 0.0,
    centered: bool = False,
) -> Affine:
    """Build the paper-to-unit-axis transform.

    Parameters
    ----------
    width, height : float
        Surface size in device units.  Must be positive.
    border : float
        Fraction of the shorter axis reserved as margin on each side,
        in ``[0, 0.5)``.
    centered : bool
        Place the origin at the surface centre (shorter axis spans
        ``[-1, 1]``) instead of the bottom-left margin corner.

    Returns
    -------
    Affine
        Unit space → device space, +Y up.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Surface size must be positive, got {width} x {height}")
    if not 0.0 <= border < 0.5:
        raise ValueError(f"border must be in [0, 0.5), got {border}")

    short = min(width, height)
    margin = border * short
    unit = short - 2.0 * margin

    if centered:
        s = unit / 2.0
        return Affine(np.array([
            [s, 0.0, width / 2.0],
            [0.0, -s, height / 2.0],
            [0.0, 0.0, 1.0],
        ]))

    return Affine(np.array([
        [unit, 0.0, margin],
        [0.0, -unit, height - margin],
        [0.0, 0.0, 1.0],
    ]))
