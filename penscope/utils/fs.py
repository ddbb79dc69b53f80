"""Filesystem helpers for drawing output and YAML input.

Provides:
    - ensure_dir: mkdir -p returning the Path
    - atomic_write_bytes: write to ``<name>.tmp``, fsync, rename over the target
    - load_yaml: ``yaml.safe_load`` with the file name in parse errors

Drawings are encoded to bytes in memory first and only then handed to
``atomic_write_bytes``, so a failed encode never leaves a truncated file
behind and a reader never sees a half-written one.

Usage:
    from penscope.utils import fs
    fs.atomic_write_bytes("out/drawing.png", png_bytes)
    data = fs.load_yaml("sketch.yaml")
"""

import os
from pathlib import Path
from typing import Any, Union

import yaml

PathLike = Union[str, Path]


def ensure_dir(p: PathLike) -> Path:
    """Create *p* (and parents) if missing; return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(path: PathLike, data: bytes, tmp_suffix: str = ".tmp") -> None:
    """Replace *path* with *data* in one rename.

    Parameters
    ----------
    path : str | Path
        Target file; its directory is created if needed.
    data : bytes
        Complete file contents.
    tmp_suffix : str
        Appended to the target name for the staging file.  The staging file
        sits next to the target so the rename never crosses filesystems.

    Raises
    ------
    OSError
        If staging or renaming fails.  The staging file is removed first.
    """
    target = Path(path)
    ensure_dir(target.parent)
    staging = target.with_name(target.name + tmp_suffix)

    try:
        with open(staging, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        staging.replace(target)
    except OSError:
        staging.unlink(missing_ok=True)
        raise


def load_yaml(path: PathLike) -> Any:
    """Parse a YAML file with ``safe_load``.

    Returns ``None`` for an empty file; callers decide whether that is an
    error.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    yaml.YAMLError
        If parsing fails; the message names the file.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e
