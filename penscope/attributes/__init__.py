"""
Attribute model.

Defines every scope attribute as an immutable, category-tagged dataclass:
``Paper`` (bootstrap), ``File`` (output), and ``Ink``, ``Pen``, ``Scale``,
``Translate``, ``Rotate`` (state).
"""

from penscope.attributes.bootstrap import Paper
from penscope.attributes.model import (
    Attribute,
    AttributeCategory,
    BootstrapAttribute,
    GraphicsState,
    OutputAttribute,
    PenState,
    StateAttribute,
)
from penscope.attributes.output import File
from penscope.attributes.state import Ink, Pen, Rotate, Scale, Translate

__all__ = [
    "Attribute",
    "AttributeCategory",
    "BootstrapAttribute",
    "File",
    "GraphicsState",
    "Ink",
    "OutputAttribute",
    "Paper",
    "Pen",
    "PenState",
    "Rotate",
    "Scale",
    "StateAttribute",
    "Translate",
]
