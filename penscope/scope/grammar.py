"""Nesting grammar for scopes, attributes and actions.

Rules, checked eagerly at the point of misuse:

    A  Bootstrap/Output attribute below the outermost scope → PlacementError
    B  Action while the innermost scope is ``with`` (or none is open)
       → GrammarError
    C  Scope nested inside a ``draw``/``paint`` scope → GrammarError
    D  Outermost scope without a ``Paper`` → MissingBootstrapError

Plus: at most one ``Paper``, and only ``Attribute`` instances are accepted.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from penscope.attributes.model import Attribute, AttributeCategory
from penscope.errors import GrammarError, MissingBootstrapError, PlacementError


class ClosingAction(Enum):
    NONE = "none"
    STROKE = "stroke"
    FILL = "fill"


class ScopeKind(Enum):
    """Scope flavours and the closing action each implies."""

    WITH = "with"
    DRAW = "draw"
    PAINT = "paint"

    @property
    def closing_action(self) -> ClosingAction:
        if self is ScopeKind.DRAW:
            return ClosingAction.STROKE
        if self is ScopeKind.PAINT:
            return ClosingAction.FILL
        return ClosingAction.NONE

    @property
    def accepts_actions(self) -> bool:
        return self is not ScopeKind.WITH

    @property
    def accepts_scopes(self) -> bool:
        return self is ScopeKind.WITH


class ActionKind(Enum):
    MOVE = "move"
    LINE = "line"


class GrammarValidator:
    """Stateless checks; the scope stack supplies depth and parent kind."""

    def validate_scope(
        self,
        kind: ScopeKind,
        attributes: Sequence[Attribute],
        depth: int,
        parent: ScopeKind | None,
    ) -> None:
        """Validate entering a *kind* scope at *depth* under *parent*.

        Raises
        ------
        TypeError
            If any attribute is not an ``Attribute``.
        GrammarError
            Rule C, or more than one ``Paper``.
        PlacementError
            Rule A.
        MissingBootstrapError
            Rule D.
        """
        for attr in attributes:
            if not isinstance(attr, Attribute):
                raise TypeError(
                    f"Scope attributes must be Attribute instances, got {attr!r}"
                )

        if parent is not None and not parent.accepts_scopes:
            raise GrammarError(
                f"Cannot open a '{kind.value}' scope inside a '{parent.value}' scope: "
                f"'{parent.value}' scopes hold actions only"
            )

        if depth > 0:
            for attr in attributes:
                if attr.category.outermost_only:
                    raise PlacementError(
                        f"{type(attr).__name__} is a {attr.category.value} attribute and "
                        f"is only allowed on the outermost scope (found at depth {depth})"
                    )
            return

        bootstraps = [
            a for a in attributes if a.category is AttributeCategory.BOOTSTRAP
        ]
        if not bootstraps:
            raise MissingBootstrapError(
                "The outermost scope needs a Paper attribute to create the drawing surface"
            )
        if len(bootstraps) > 1:
            raise GrammarError(
                f"The outermost scope takes exactly one Paper, got {len(bootstraps)}"
            )

    def validate_action(self, action: ActionKind, current: ScopeKind | None) -> None:
        """Validate issuing *action* inside the innermost open scope.

        Raises
        ------
        GrammarError
            Rule B.
        """
        if current is None:
            raise GrammarError(f"'{action.value}' called with no open scope")
        if not current.accepts_actions:
            raise GrammarError(
                f"'{action.value}' is not allowed in a '{current.value}' scope; "
                "open a draw or paint scope"
            )
