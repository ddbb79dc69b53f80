"""penscope: scoped, composable attributes for imperative 2D vector drawing.

Graphics-state changes (ink, pen, scale, translation, rotation) are bound
to nested ``with`` blocks and undone when the block exits.  Drawing is
delegated to pycairo; this package owns the composition rules.

Architecture layers (strict one-way dependency):
    context, sketch → scope/ → attributes/ → engine/ → {transform, path, colors} → utils/

Key invariants:
    - One outermost scope per drawing; Paper and File only there
    - State attributes apply left to right; the last one wins
    - ``with`` scopes nest scopes, ``draw``/``paint`` scopes hold actions
    - Every scope restores the engine state it found, LIFO, even on error
    - The current point survives strokes and fills

Quick start::

    import penscope as ps

    with ps.with_scope(ps.Paper(200, 200), ps.File("square.png")) as canvas:
        with canvas.draw_scope(ps.Ink("navy"), ps.Pen(0.02)):
            canvas.move(0, 0)
            for x, y in [(1, 0), (1, 1), (0, 1), (0, 0)]:
                canvas.line(x, y)
"""

from penscope.attributes import (
    Attribute,
    AttributeCategory,
    File,
    GraphicsState,
    Ink,
    Paper,
    Pen,
    PenState,
    Rotate,
    Scale,
    Translate,
)
from penscope.context import DrawingContext, draw_scope, paint_scope, with_scope
from penscope.errors import (
    EngineError,
    GrammarError,
    MissingBootstrapError,
    PenscopeError,
    PlacementError,
    ScopeOrderingError,
)

__version__ = "0.3.0"

__all__ = [
    "Attribute",
    "AttributeCategory",
    "DrawingContext",
    "EngineError",
    "File",
    "GrammarError",
    "GraphicsState",
    "Ink",
    "MissingBootstrapError",
    "Paper",
    "Pen",
    "PenState",
    "PenscopeError",
    "PlacementError",
    "Rotate",
    "Scale",
    "ScopeOrderingError",
    "Translate",
    "draw_scope",
    "paint_scope",
    "with_scope",
]
