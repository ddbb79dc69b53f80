"""YAML sketch files rendered through the scope grammar.

A sketch is one root node.  A node is a single-key mapping whose key is
the scope kind (``with``, ``draw``, ``paint``) and whose value maps
attribute names to arguments, in order, plus an optional ``do`` list::

    with:
      paper: {width: 400, height: 400, border: 0.05}
      file: out.png
      ink: red
      do:
        - draw:
            ink: blue
            pen: {width: 0.01, cap: round}
            do:
              - [move, 0, 0]
              - [line, 1, 0]
              - [line, 1, 1]
        - draw:
            do:
              - [line, 0, 1]

``do`` items are either actions (``[move, x, y]`` / ``[line, x, y]``) or
nested nodes.  Items run in order against a ``DrawingContext``, so the
grammar rules of the core apply unchanged: an action under ``with`` raises
``GrammarError``, a ``file`` below the root raises ``PlacementError``.

Attribute arguments:
    paper      {width, height, ...} or {size, dpi, orientation, ...}
    file       path or list of paths
    ink        color spec (name, hex, or [r, g, b(, a)])
    pen        width, or {width, cap, join}
    scale      factor, or [sx, sy]
    translate  [dx, dy]
    rotate     radians, or {degrees: d}
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Callable, Sequence

import yaml

from penscope.attributes import File, Ink, Paper, Pen, Rotate, Scale, Translate
from penscope.attributes.model import Attribute
from penscope.configs.loader import DrawingDefaults
from penscope.context import DrawingContext
from penscope.engine.base import Engine
from penscope.errors import PenscopeError
from penscope.utils.fs import load_yaml

logger = logging.getLogger(__name__)

_SCOPE_KEYS = ("with", "draw", "paint")


class SketchError(PenscopeError):
    """Raised when a sketch document is malformed."""

    pass


# ---------------------------------------------------------------------------
# Attribute parsing
# ---------------------------------------------------------------------------


def _paper(arg: Any) -> list[Attribute]:
    if not isinstance(arg, dict):
        raise SketchError(f"paper expects a mapping, got {arg!r}")
    if "size" in arg:
        return [Paper.from_size(**arg)]
    return [Paper(**arg)]


def _file(arg: Any) -> list[Attribute]:
    paths = arg if isinstance(arg, list) else [arg]
    return [File(p) for p in paths]


def _ink(arg: Any) -> list[Attribute]:
    return [Ink(tuple(arg) if isinstance(arg, list) else arg)]


def _pen(arg: Any) -> list[Attribute]:
    if isinstance(arg, dict):
        return [Pen(**arg)]
    return [Pen(width=float(arg))]


def _scale(arg: Any) -> list[Attribute]:
    if isinstance(arg, list):
        return [Scale(*(float(v) for v in arg))]
    return [Scale(float(arg))]


def _translate(arg: Any) -> list[Attribute]:
    dx, dy = (float(v) for v in arg)
    return [Translate(dx, dy)]


def _rotate(arg: Any) -> list[Attribute]:
    if isinstance(arg, dict):
        if set(arg) != {"degrees"}:
            raise SketchError(f"rotate mapping takes only 'degrees', got {sorted(arg)}")
        return [Rotate(math.radians(float(arg["degrees"])))]
    return [Rotate(float(arg))]


_ATTRIBUTE_PARSERS: dict[str, Callable[[Any], list[Attribute]]] = {
    "paper": _paper,
    "file": _file,
    "ink": _ink,
    "pen": _pen,
    "scale": _scale,
    "translate": _translate,
    "rotate": _rotate,
}


def parse_attributes(spec: dict[str, Any]) -> list[Attribute]:
    """Build attributes from a node mapping, preserving key order."""
    attributes: list[Attribute] = []
    for key, arg in spec.items():
        if key == "do":
            continue
        parser = _ATTRIBUTE_PARSERS.get(key)
        if parser is None:
            known = ", ".join(sorted(_ATTRIBUTE_PARSERS))
            raise SketchError(f"Unknown attribute '{key}' (known: {known})")
        try:
            attributes.extend(parser(arg))
        except (TypeError, ValueError) as exc:
            raise SketchError(f"Invalid '{key}' attribute {arg!r}: {exc}") from exc
    return attributes


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def _split_node(node: Any) -> tuple[str, dict[str, Any]]:
    if not isinstance(node, dict) or len(node) != 1:
        raise SketchError(f"A scope node is a single-key mapping, got {node!r}")
    (kind, spec), = node.items()
    if kind not in _SCOPE_KEYS:
        raise SketchError(f"Unknown scope kind '{kind}' (expected one of {_SCOPE_KEYS})")
    if spec is None:
        spec = {}
    if not isinstance(spec, dict):
        raise SketchError(f"'{kind}' node body must be a mapping, got {spec!r}")
    return kind, spec


def _open(canvas: DrawingContext, kind: str, attributes: Sequence[Attribute]):
    if kind == "with":
        return canvas.with_scope(*attributes)
    if kind == "draw":
        return canvas.draw_scope(*attributes)
    return canvas.paint_scope(*attributes)


def _run_items(canvas: DrawingContext, items: Any) -> None:
    if items is None:
        return
    if not isinstance(items, list):
        raise SketchError(f"'do' must be a list, got {items!r}")
    for item in items:
        if isinstance(item, list):
            _run_action(canvas, item)
        else:
            _run_node(canvas, item)


def _run_action(canvas: DrawingContext, item: list) -> None:
    if len(item) != 3 or item[0] not in ("move", "line"):
        raise SketchError(f"Action must be [move|line, x, y], got {item!r}")
    name, x, y = item
    try:
        x, y = float(x), float(y)
    except (TypeError, ValueError) as exc:
        raise SketchError(f"Action coordinates must be numbers, got {item!r}") from exc
    if name == "move":
        canvas.move(x, y)
    else:
        canvas.line(x, y)


def _run_node(
    canvas: DrawingContext,
    node: Any,
    extra: Sequence[Attribute] = (),
) -> None:
    kind, spec = _split_node(node)
    attributes = parse_attributes(spec) + list(extra)
    with _open(canvas, kind, attributes):
        _run_items(canvas, spec.get("do"))


def run_sketch(
    data: Any,
    outputs: Sequence[str | Path] = (),
    engine: Engine | None = None,
    config: DrawingDefaults | None = None,
) -> DrawingContext:
    """Render a parsed sketch document.

    Parameters
    ----------
    data : Any
        Root node, as loaded from YAML.
    outputs : Sequence[str | Path]
        Extra output paths attached to the root scope as ``File`` attributes.
    engine, config
        Passed to the new ``DrawingContext``.

    Returns
    -------
    DrawingContext
        The finished drawing (its engine still holds the surface).

    Raises
    ------
    SketchError
        If the document is malformed.
    PenscopeError
        Grammar, placement or engine errors from the drawing itself.
    """
    canvas = DrawingContext(engine=engine, config=config)
    _run_node(canvas, data, extra=[File(p) for p in outputs])
    return canvas


def load_sketch(path: str | Path) -> Any:
    """Load a sketch document from YAML.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    SketchError
        If the file is not valid YAML or is empty.
    """
    try:
        data = load_yaml(path)
    except yaml.YAMLError as exc:
        raise SketchError(str(exc)) from exc
    if data is None:
        raise SketchError(f"Empty sketch file: {path}")
    return data


def render_sketch_file(
    path: str | Path,
    outputs: Sequence[str | Path] = (),
    config: DrawingDefaults | None = None,
) -> DrawingContext:
    """Load and render a sketch file."""
    logger.info("Rendering sketch %s", path)
    return run_sketch(load_sketch(path), outputs=outputs, config=config)
