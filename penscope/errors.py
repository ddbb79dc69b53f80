"""Exception taxonomy for scoped drawing.

Every error is raised synchronously at the point of misuse and propagates
through the open scopes, each of which restores its saved engine state on
the way out.  Nothing here is retried: these are usage errors, not
transient faults.
"""

from __future__ import annotations


class PenscopeError(Exception):
    """Base class for all drawing errors."""

    pass


class PlacementError(PenscopeError):
    """Bootstrap or output attribute used below the outermost scope."""

    pass


class GrammarError(PenscopeError):
    """Action or scope used where the nesting grammar forbids it.

    Raised for an action inside a ``with`` scope, a scope nested inside a
    ``draw``/``paint`` scope, duplicate ``Paper`` attributes, or reuse of a
    finished drawing context.
    """

    pass


class MissingBootstrapError(PenscopeError):
    """Outermost scope opened without a ``Paper`` attribute."""

    pass


class ScopeOrderingError(PenscopeError):
    """Scope handles released out of LIFO order.

    Only reachable when the context-manager wrappers are bypassed.
    """

    pass


class EngineError(PenscopeError):
    """Failure reported by the rendering engine (cairo or Pillow)."""

    pass
