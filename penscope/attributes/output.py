"""Output attribute: ``File``."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from penscope.attributes.model import OutputAttribute
from penscope.engine.formats import format_for_path

if TYPE_CHECKING:
    from penscope.engine.base import Engine


@dataclass(frozen=True, slots=True)
class File(OutputAttribute):
    """Write the finished drawing to *path* when the outermost scope exits.

    The format comes from the extension and is checked at construction, so
    an unsupported extension fails before any drawing happens.

    Raises
    ------
    EngineError
        If the extension maps to no supported format.
    """

    path: Path
    fmt: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        object.__setattr__(self, "fmt", format_for_path(self.path))

    def release(self, engine: Engine) -> None:
        engine.write(self.path, self.fmt)
