"""Configuration loader for drawing defaults.

Loads and validates ``defaults.yaml`` into pydantic models.  Every value an
attribute may leave unset (paper background, border, DPI, default ink and
pen, the paper-size table) comes from here -- nothing is hardcoded in the
attribute classes.

Usage::

    from penscope.configs.loader import load_config
    cfg = load_config()                        # shipped defaults
    cfg = load_config("/custom/defaults.yaml") # explicit path
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Literal, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from penscope.errors import PenscopeError
from penscope.utils.fs import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


class ConfigError(PenscopeError):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Schema -- mirrors the YAML structure
# ---------------------------------------------------------------------------


class PaperDefaults(BaseModel):
    """Fallbacks for ``Paper`` fields left as ``None``."""

    background: str = Field("white", description="Color spec painted under the drawing")
    border: float = Field(0.0, ge=0.0, lt=0.5, description="Margin fraction of the shorter axis")
    centered: bool = False
    dpi: float = Field(72.0, gt=0.0, description="Pixels per inch for named paper sizes")
    orientation: Literal["portrait", "landscape"] = "portrait"


class InkDefaults(BaseModel):
    """Source color installed at bootstrap."""

    color: str = "black"


class PenDefaults(BaseModel):
    """Stroke properties installed at bootstrap."""

    width: float = Field(0.005, gt=0.0, description="Width in unit space")
    cap: Literal["butt", "round", "square"] = "butt"
    join: Literal["miter", "round", "bevel"] = "miter"


class DrawingDefaults(BaseModel):
    """Complete defaults file (penscope.defaults.v1 schema)."""

    schema_version: str = Field("penscope.defaults.v1", alias="schema")
    paper: PaperDefaults = Field(default_factory=PaperDefaults)
    ink: InkDefaults = Field(default_factory=InkDefaults)
    pen: PenDefaults = Field(default_factory=PenDefaults)
    paper_sizes_mm: Dict[str, Tuple[float, float]] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "penscope.defaults.v1":
            raise ValueError(f"Expected schema 'penscope.defaults.v1', got '{v}'")
        return v

    @field_validator('paper_sizes_mm')
    @classmethod
    def validate_paper_sizes(
        cls, v: Dict[str, Tuple[float, float]]
    ) -> Dict[str, Tuple[float, float]]:
        for name, (w, h) in v.items():
            if w <= 0 or h <= 0:
                raise ValueError(f"Paper size '{name}' must be positive, got {w} x {h}")
        return v

    def paper_size_mm(self, name: str) -> Tuple[float, float]:
        """Return portrait ``(width, height)`` in mm for a named size.

        Lookup is case-insensitive.

        Raises
        ------
        ConfigError
            If the size is not in the table.
        """
        for key, size in self.paper_sizes_mm.items():
            if key.lower() == name.lower():
                return size
        known = ", ".join(sorted(self.paper_sizes_mm))
        raise ConfigError(f"Unknown paper size '{name}' (known: {known})")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


_default_cache: DrawingDefaults | None = None


def load_config(path: str | Path | None = None) -> DrawingDefaults:
    """Load and validate drawing defaults from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to a defaults file.  ``None`` loads the file shipped alongside
        this module (parsed once and cached).

    Returns
    -------
    DrawingDefaults
        Validated configuration.

    Raises
    ------
    ConfigError
        If the file is not valid YAML, is empty, or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    global _default_cache

    if path is None:
        if _default_cache is not None:
            return _default_cache
        path = DEFAULT_CONFIG_PATH
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.debug("Loading configuration from %s", path)

    try:
        data = load_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigError(str(exc)) from exc
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration in {path} must be a mapping, got {type(data).__name__}"
        )

    try:
        config = DrawingDefaults(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc

    if path == DEFAULT_CONFIG_PATH:
        _default_cache = config
    return config
