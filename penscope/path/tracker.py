"""Path/action tracker.

Keeps the current point and the accumulated subpaths independently of the
engine's own path cursor.  The engine forgets its current point after a
stroke or fill; the tracker does not, so a scope that starts with
``line`` continues from wherever the previous scope stopped.

All points are **device space**.  The drawing context converts user-space
operands through the active transform before they reach the tracker, which
keeps the current point meaningful when the next scope installs a
different transform.
"""

from __future__ import annotations

Point = tuple[float, float]

Subpath = tuple[Point, ...]
"""Connected polyline vertices; always holds at least two points."""

PathSegments = tuple[Subpath, ...]


class PathTracker:
    """Current point plus pending subpaths for the open draw/paint scope."""

    def __init__(self) -> None:
        self._current: Point | None = None
        self._subpaths: list[list[Point]] = []
        self._open: list[Point] | None = None

    def move_to(self, x: float, y: float) -> None:
        """Set the current point without adding a drawable segment."""
        self._current = (float(x), float(y))
        self._open = None

    def line_to(self, x: float, y: float) -> None:
        """Append a straight segment from the current point to ``(x, y)``.

        With no current point the call behaves as ``move_to``.
        """
        target = (float(x), float(y))
        if self._current is None:
            self.move_to(*target)
            return
        if self._open is None:
            self._open = [self._current]
            self._subpaths.append(self._open)
        self._open.append(target)
        self._current = target

    def current_point(self) -> Point | None:
        return self._current

    def has_path(self) -> bool:
        return bool(self._subpaths)

    def segment_count(self) -> int:
        return sum(len(sp) - 1 for sp in self._subpaths)

    def consume_path(self) -> PathSegments:
        """Return the accumulated subpaths and clear them.

        The current point is left untouched.
        """
        path = tuple(tuple(sp) for sp in self._subpaths)
        self._subpaths = []
        self._open = None
        return path
