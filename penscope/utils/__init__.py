"""Cross-cutting utilities (lowest dependency layer).

    - Atomic I/O and YAML loading (fs)
    - Unified logging (logging_config)

No module in utils/ may import from the drawing layers.
"""

from . import fs
from . import logging_config

from .logging_config import get_logger, push_context, setup_logging

__all__ = [
    'fs',
    'logging_config',
    'setup_logging',
    'get_logger',
    'push_context',
]
