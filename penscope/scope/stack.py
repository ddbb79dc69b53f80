"""Scope stack -- the state machine behind nested drawing scopes.

Lifecycle of one scope::

    enter(kind, attributes)
        validate grammar (placement, nesting, bootstrap)
        depth 0 only: Paper creates the surface and base state
        engine.save(), push Frame(previous state, current point)
        apply State attributes left to right
        -> ScopeHandle
    ... body: nested scopes or actions ...
    exit(handle, failed)
        handle must be top of stack, else ScopeOrderingError
        normal exit: run closing action (stroke / fill / nothing)
        failed exit: discard the pending path
        engine.restore(), reinstate the frame's state, pop
        depth 0, normal exit: run Output attributes

Frames are released exactly once and strictly LIFO.  The current point is
recorded in the frame but never restored: it outlives the
scope that moved it.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Sequence

from penscope.attributes.model import (
    Attribute,
    AttributeCategory,
    BootstrapAttribute,
    GraphicsState,
    OutputAttribute,
    StateAttribute,
)
from penscope.configs.loader import DrawingDefaults
from penscope.engine.base import Engine
from penscope.errors import GrammarError, ScopeOrderingError
from penscope.path.tracker import PathTracker, Point
from penscope.scope.closing import close
from penscope.scope.grammar import GrammarValidator, ScopeKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScopeHandle:
    """Token for one open scope; required to exit it."""

    serial: int
    kind: ScopeKind
    depth: int


@dataclass(slots=True)
class Frame:
    """State captured at scope entry, restored at scope exit."""

    handle: ScopeHandle
    saved: GraphicsState
    entry_point: Point | None
    outputs: tuple[OutputAttribute, ...] = ()


class ScopeStack:
    """Open scopes for one drawing.

    A scope whose body raised does not stroke or fill its pending path;
    the path is dropped with a warning and the frame is still restored.
    Output attributes of a failed root scope are skipped.

    Parameters
    ----------
    engine : Engine
        Rendering engine; owned by the drawing, never shared.
    tracker : PathTracker
        Current point and pending path.
    defaults : DrawingDefaults
        Fallbacks for the bootstrap attribute.
    validator : GrammarValidator | None
        Grammar rules; a default instance when ``None``.
    """

    def __init__(
        self,
        engine: Engine,
        tracker: PathTracker,
        defaults: DrawingDefaults,
        validator: GrammarValidator | None = None,
    ) -> None:
        self._engine = engine
        self._tracker = tracker
        self._defaults = defaults
        self._validator = validator or GrammarValidator()
        self._frames: list[Frame] = []
        self._state: GraphicsState | None = None
        self._serials = itertools.count(1)
        self._finished = False

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def depth(self) -> int:
        """Number of open scopes."""
        return len(self._frames)

    @property
    def current_kind(self) -> ScopeKind | None:
        return self._frames[-1].handle.kind if self._frames else None

    @property
    def state(self) -> GraphicsState | None:
        """Graphics state in effect; ``None`` before the surface exists."""
        return self._state

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def validator(self) -> GrammarValidator:
        return self._validator

    # ------------------------------------------------------------------
    # Enter / exit
    # ------------------------------------------------------------------

    def enter(self, kind: ScopeKind, attributes: Sequence[Attribute]) -> ScopeHandle:
        """Open a scope and apply its attributes.

        Raises
        ------
        GrammarError, PlacementError, MissingBootstrapError
            Grammar violations, before any state changes.
        EngineError
            If the engine rejects an attribute; the half-opened scope is
            unwound first.
        """
        depth = self.depth
        if depth == 0 and self._finished:
            raise GrammarError(
                "This drawing is finished; start a new DrawingContext for another one"
            )
        self._validator.validate_scope(kind, attributes, depth, self.current_kind)

        if depth == 0:
            paper = next(
                a for a in attributes if a.category is AttributeCategory.BOOTSTRAP
            )
            assert isinstance(paper, BootstrapAttribute)
            self._state = paper.bootstrap(self._engine, self._defaults)
        assert self._state is not None

        handle = ScopeHandle(serial=next(self._serials), kind=kind, depth=depth)
        outputs = tuple(
            a for a in attributes if a.category is AttributeCategory.OUTPUT
        )
        self._engine.save()
        frame = Frame(
            handle=handle,
            saved=self._state,
            entry_point=self._tracker.current_point(),
            outputs=outputs,  # type: ignore[arg-type]
        )
        self._frames.append(frame)

        try:
            for attr in attributes:
                if attr.category is AttributeCategory.STATE:
                    assert isinstance(attr, StateAttribute)
                    self._state = attr.apply(self._engine, self._state)
        except BaseException:
            self._release(frame)
            raise

        logger.debug("enter %s scope #%d at depth %d", kind.value, handle.serial, depth)
        return handle

    def exit(self, handle: ScopeHandle, failed: bool = False) -> None:
        """Close the scope identified by *handle*.

        Parameters
        ----------
        handle : ScopeHandle
            Must be the innermost open scope.
        failed : bool
            The body raised.  The pending path is discarded instead of
            painted and no output is written.

        Raises
        ------
        ScopeOrderingError
            If *handle* is not the innermost open scope.
        """
        if not self._frames or self._frames[-1].handle != handle:
            top = self._frames[-1].handle if self._frames else None
            raise ScopeOrderingError(
                f"Cannot exit scope {handle}: innermost open scope is {top}"
            )
        frame = self._frames[-1]

        try:
            path = self._tracker.consume_path()
            if failed:
                if path:
                    logger.warning(
                        "Discarding %d unpainted subpath(s) from failed %s scope",
                        len(path), handle.kind.value,
                    )
            else:
                close(handle.kind, path, self._engine)
        finally:
            self._release(frame)

        logger.debug(
            "exit %s scope #%d%s, current point %s (was %s at entry)",
            handle.kind.value, handle.serial, " (failed)" if failed else "",
            self._tracker.current_point(), frame.entry_point,
        )

        if handle.depth == 0:
            if failed:
                if frame.outputs:
                    logger.warning(
                        "Drawing aborted; skipping %d output(s)", len(frame.outputs)
                    )
                return
            for output in frame.outputs:
                output.release(self._engine)

    def _release(self, frame: Frame) -> None:
        self._engine.restore()
        self._state = frame.saved
        self._frames.pop()
        if not self._frames:
            self._finished = True
