"""Closing actions run when a scope exits normally."""

from __future__ import annotations

import logging

from penscope.engine.base import Engine
from penscope.path.tracker import PathSegments
from penscope.scope.grammar import ClosingAction, ScopeKind

logger = logging.getLogger(__name__)


def close(kind: ScopeKind, path: PathSegments, engine: Engine) -> None:
    """Stroke (``draw``) or fill (``paint``) *path*; ``with`` does nothing.

    An empty path is a no-op for every kind.
    """
    action = kind.closing_action
    if action is ClosingAction.NONE or not path:
        return

    if action is ClosingAction.STROKE:
        engine.stroke(path)
    else:
        engine.fill(path)
    logger.debug("%s %d subpath(s)", action.value, len(path))
