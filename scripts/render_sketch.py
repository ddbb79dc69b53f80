"""Render a YAML sketch to one or more image files.

Pipeline:
    1. Configure logging (console, optional rotating file)
    2. Load drawing defaults (shipped or --config)
    3. Load the sketch document
    4. Run it through the scope grammar; outputs named in the sketch and
       on the command line are written when the root scope exits

CLI:
    python scripts/render_sketch.py --sketch sketches/nested_ink.yaml
    python scripts/render_sketch.py --sketch spiral.yaml --output out.png --output out.svg
    python scripts/render_sketch.py --sketch spiral.yaml --output out.pdf \\
                                    --config my_defaults.yaml --log-level DEBUG

Exit status is 0 on success, 1 when the sketch is invalid or a drawing
error occurs (the error is logged, no partial output is kept).
"""

import argparse
import logging
import sys
from pathlib import Path

from penscope.configs.loader import ConfigError, load_config
from penscope.errors import PenscopeError
from penscope.sketch import render_sketch_file
from penscope.utils.logging_config import install_excepthook, push_context, setup_logging

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Render a YAML sketch through penscope's scoped drawing grammar"
    )
    parser.add_argument(
        "--sketch",
        type=str,
        required=True,
        help="Path to sketch YAML file",
    )
    parser.add_argument(
        "--output",
        type=str,
        action="append",
        default=[],
        help="Extra output file (format from extension); repeatable",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Drawing defaults YAML (default: shipped defaults.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional log file (rotated at 5 MB)",
    )

    args = parser.parse_args(argv)

    setup_logging(
        log_level=args.log_level,
        log_file=args.log_file,
        rotate={"mode": "size", "max_bytes": 5_000_000, "backup_count": 3} if args.log_file else None,
        quiet_libs=["PIL"],
        context={"app": "render_sketch"},
    )
    install_excepthook()
    push_context(sketch=Path(args.sketch).name)

    try:
        config = load_config(args.config)
        render_sketch_file(args.sketch, outputs=args.output, config=config)
    except (ConfigError, FileNotFoundError) as e:
        logger.error("Cannot start: %s", e)
        return 1
    except PenscopeError as e:
        logger.error("Drawing failed: %s", e)
        return 1

    logger.info("Sketch rendered")
    return 0


if __name__ == "__main__":
    sys.exit(main())
