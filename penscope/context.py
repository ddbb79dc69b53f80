"""Drawing context -- the public, call-stack-scoped drawing surface.

A ``DrawingContext`` owns one engine, one scope stack and one path tracker.
It is passed explicitly (the object bound by ``with ... as canvas``), never
stored globally, so independent drawings can coexist.

Usage::

    import penscope as ps

    with ps.with_scope(ps.Paper(100, 100), ps.Ink("red"), ps.File("out.png")) as canvas:
        with canvas.draw_scope(ps.Ink("blue")):
            canvas.move(0, 0)
            canvas.line(1, 0)
            canvas.line(1, 1)
        with canvas.draw_scope():
            canvas.line(0, 1)       # continues from (1, 1), stroked red
            canvas.line(0, 0)

Each scope method returns a context manager; leaving the ``with`` block
runs the closing action and restores the graphics state, also when the
body raises.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from penscope.attributes.model import Attribute, GraphicsState
from penscope.configs.loader import DrawingDefaults, load_config
from penscope.engine.base import Engine
from penscope.engine.cairo_engine import CairoEngine
from penscope.path.tracker import PathTracker, Point
from penscope.scope.grammar import ActionKind, ScopeKind
from penscope.scope.stack import ScopeStack


class DrawingContext:
    """One drawing: engine, scope stack, current point.

    Parameters
    ----------
    engine : Engine | None
        Rendering engine; a fresh ``CairoEngine`` when ``None``.
    config : DrawingDefaults | None
        Drawing defaults; the shipped ``defaults.yaml`` when ``None``.
    """

    def __init__(
        self,
        engine: Engine | None = None,
        config: DrawingDefaults | None = None,
    ) -> None:
        self._engine = engine if engine is not None else CairoEngine()
        self._config = config if config is not None else load_config()
        self._tracker = PathTracker()
        self._stack = ScopeStack(self._engine, self._tracker, self._config)

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def with_scope(self, *attributes: Attribute):
        """Scope holding nested scopes only; no closing action."""
        return self._scope(ScopeKind.WITH, attributes)

    def draw_scope(self, *attributes: Attribute):
        """Scope holding actions only; strokes the path on exit."""
        return self._scope(ScopeKind.DRAW, attributes)

    def paint_scope(self, *attributes: Attribute):
        """Scope holding actions only; fills the path on exit."""
        return self._scope(ScopeKind.PAINT, attributes)

    @contextmanager
    def _scope(
        self, kind: ScopeKind, attributes: tuple[Attribute, ...]
    ) -> Iterator[DrawingContext]:
        handle = self._stack.enter(kind, attributes)
        failed = False
        try:
            yield self
        except BaseException:
            failed = True
            raise
        finally:
            self._stack.exit(handle, failed=failed)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def move(self, x: float, y: float) -> None:
        """Set the current point to user-space ``(x, y)``."""
        self._stack.validator.validate_action(ActionKind.MOVE, self._stack.current_kind)
        self._tracker.move_to(*self._to_device(x, y))

    def line(self, x: float, y: float) -> None:
        """Add a segment from the current point to user-space ``(x, y)``."""
        self._stack.validator.validate_action(ActionKind.LINE, self._stack.current_kind)
        self._tracker.line_to(*self._to_device(x, y))

    def _to_device(self, x: float, y: float) -> Point:
        state = self._stack.state
        assert state is not None
        return state.transform.apply(x, y)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def current_point(self) -> Point | None:
        """Current point in the active user space, or ``None`` if unset."""
        device = self._tracker.current_point()
        state = self._stack.state
        if device is None or state is None:
            return None
        return state.transform.inverse().apply(*device)

    @property
    def state(self) -> GraphicsState | None:
        return self._stack.state

    @property
    def depth(self) -> int:
        return self._stack.depth

    @property
    def finished(self) -> bool:
        return self._stack.finished

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def tracker(self) -> PathTracker:
        return self._tracker

    @property
    def config(self) -> DrawingDefaults:
        return self._config

    @property
    def raw(self) -> Any:
        """Underlying engine context (``cairo.Context`` for ``CairoEngine``).

        Calls made through it bypass grammar validation and the path
        tracker entirely; keeping engine state consistent is the caller's
        responsibility.
        """
        return self._engine.raw


# ---------------------------------------------------------------------------
# Outermost-scope entry points
# ---------------------------------------------------------------------------


def with_scope(
    *attributes: Attribute,
    engine: Engine | None = None,
    config: DrawingDefaults | None = None,
):
    """Start a new drawing with an outermost ``with`` scope."""
    return DrawingContext(engine=engine, config=config).with_scope(*attributes)


def draw_scope(
    *attributes: Attribute,
    engine: Engine | None = None,
    config: DrawingDefaults | None = None,
):
    """Start a new drawing with an outermost ``draw`` scope."""
    return DrawingContext(engine=engine, config=config).draw_scope(*attributes)


def paint_scope(
    *attributes: Attribute,
    engine: Engine | None = None,
    config: DrawingDefaults | None = None,
):
    """Start a new drawing with an outermost ``paint`` scope."""
    return DrawingContext(engine=engine, config=config).paint_scope(*attributes)
