"""Drawing defaults loading and validation."""

from penscope.configs.loader import (
    ConfigError,
    DrawingDefaults,
    InkDefaults,
    PaperDefaults,
    PenDefaults,
    load_config,
)

__all__ = [
    "ConfigError",
    "DrawingDefaults",
    "InkDefaults",
    "PaperDefaults",
    "PenDefaults",
    "load_config",
]
