"""Scope stack, nesting grammar and closing actions."""

from penscope.scope.closing import close
from penscope.scope.grammar import ActionKind, ClosingAction, GrammarValidator, ScopeKind
from penscope.scope.stack import Frame, ScopeHandle, ScopeStack

__all__ = [
    "ActionKind",
    "ClosingAction",
    "Frame",
    "GrammarValidator",
    "ScopeHandle",
    "ScopeKind",
    "ScopeStack",
    "close",
]
