"""Shared fixtures: a cairo engine that records every call it receives."""

from __future__ import annotations

import pytest

from penscope.context import DrawingContext
from penscope.engine.cairo_engine import CairoEngine


class RecordingEngine(CairoEngine):
    """``CairoEngine`` that logs calls and captures painted paths.

    ``strokes`` / ``fills`` hold ``(path, rgba, line_width)`` tuples read
    from the live cairo context at paint time.
    """

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []
        self.strokes: list[tuple] = []
        self.fills: list[tuple] = []

    def _snapshot(self, path):
        ctx = self.raw
        return path, tuple(ctx.get_source().get_rgba()), ctx.get_line_width()

    def save(self) -> None:
        self.calls.append("save")
        super().save()

    def restore(self) -> None:
        self.calls.append("restore")
        super().restore()

    def set_source(self, rgba) -> None:
        self.calls.append("set_source")
        super().set_source(rgba)

    def set_stroke(self, width, cap, join) -> None:
        self.calls.append("set_stroke")
        super().set_stroke(width, cap, join)

    def set_transform(self, transform) -> None:
        self.calls.append("set_transform")
        super().set_transform(transform)

    def stroke(self, path) -> None:
        self.calls.append("stroke")
        self.strokes.append(self._snapshot(path))
        super().stroke(path)

    def fill(self, path) -> None:
        self.calls.append("fill")
        self.fills.append(self._snapshot(path))
        super().fill(path)

    def write(self, path, fmt) -> None:
        self.calls.append("write")
        super().write(path, fmt)


@pytest.fixture()
def engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture()
def canvas(engine: RecordingEngine) -> DrawingContext:
    return DrawingContext(engine=engine)


def approx_point(p, q, tol: float = 1e-9) -> bool:
    return abs(p[0] - q[0]) <= tol and abs(p[1] - q[1]) <= tol
