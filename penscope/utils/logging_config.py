"""Logging setup for penscope entry points.

Library modules only call ``logging.getLogger(__name__)``.  Whoever owns
the process (the sketch CLI, a notebook, a test) installs handlers once
through ``setup_logging``:

    - stderr handler, human-readable, optionally colored
    - optional file handler, human or JSON lines, optionally rotated
    - context fields (``app``, ``sketch``, ...) stamped on every line
    - Python warnings and uncaught exceptions routed into logging

Public API:
    setup_logging(log_level="INFO", context={"app": "render_sketch"})
    get_logger(name)
    push_context(sketch="logo.yaml") / pop_context(["sketch"])
    install_excepthook()

Line formats:
    2026-10-18T13:45:12.345Z | INFO     | app=render_sketch | Wrote out.png (png, 5312 bytes)
    {"t": "2026-10-18T13:45:12.345000+00:00", "lvl": "INFO", "name": "...", "app": "render_sketch", "msg": "..."}

Context lives in a ``contextvars.ContextVar`` so threads do not see each
other's fields.  Calling ``setup_logging`` again replaces the handlers it
installed before instead of stacking new ones.
"""

import contextvars
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


_context_var: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    'penscope_log_context', default={}
)

_configured = False

_LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
_RESET = '\033[0m'


class ContextFormatter(logging.Formatter):
    """Render records as ``ts | LEVEL | k=v ... | message`` or as JSON.

    Parameters
    ----------
    fmt_mode : str
        ``"human"`` or ``"json"``.
    use_color : bool
        Color the level name; ignored unless stderr is a terminal.
    tz : str
        ``"UTC"`` or ``"local"`` timestamps.
    """

    def __init__(
        self,
        fmt_mode: str = "human",
        use_color: bool = True,
        tz: str = "UTC"
    ):
        super().__init__()
        if fmt_mode not in ("human", "json"):
            raise ValueError(f"fmt_mode must be 'human' or 'json', got {fmt_mode!r}")
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()
        self.tz = tz

    def _timestamp(self, record: logging.LogRecord) -> datetime:
        if self.tz == "UTC":
            return datetime.fromtimestamp(record.created, tz=timezone.utc)
        return datetime.fromtimestamp(record.created)

    def format(self, record: logging.LogRecord) -> str:
        ts = self._timestamp(record)
        context = _context_var.get()
        if self.fmt_mode == "json":
            return self._as_json(record, ts, context)
        return self._as_text(record, ts, context)

    def _as_json(self, record: logging.LogRecord, ts: datetime, context: dict) -> str:
        payload: Dict[str, Any] = {
            't': ts.isoformat(),
            'lvl': record.levelname,
            'name': record.name,
            'pid': os.getpid(),
        }
        payload.update(context)
        payload['msg'] = record.getMessage()
        if record.exc_info:
            payload['exc'] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)

    def _as_text(self, record: logging.LogRecord, ts: datetime, context: dict) -> str:
        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{_LEVEL_COLORS.get(record.levelname, '')}{level}{_RESET}"

        fields = [ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z', level]
        if context:
            fields.append(' '.join(f"{k}={v}" for k, v in context.items()))
        fields.append(record.getMessage())

        text = ' | '.join(fields)
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    rotate: Optional[Dict[str, Any]] = None,
    tz: str = "UTC",
    capture_warnings: bool = True,
    quiet_libs: Optional[List[str]] = None,
    context: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Configure the root logger.

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL".
    log_file : str, optional
        Also log to this file.  Parent directories are created.
    json : bool
        JSON lines in the file handler (the console stays human-readable).
    color : bool
        Colored level names on the console.
    to_stderr : bool
        Install the console handler.
    rotate : dict, optional
        ``{"mode": "size", "max_bytes": ..., "backup_count": ...}`` or
        ``{"mode": "time", "when": "D", "interval": 1, "backup_count": ...}``.
    tz : str
        "UTC" or "local".
    capture_warnings : bool
        Route ``warnings.warn`` through logging.
    quiet_libs : list[str], optional
        Loggers raised to WARNING (e.g. ``["PIL"]``).
    context : dict, optional
        Fields pushed with ``push_context``.

    Returns
    -------
    dict
        ``{"handlers": [...]}``, the handlers installed by this call.

    Raises
    ------
    ValueError
        If *rotate* names an unknown mode.
    """
    global _configured

    root = logging.getLogger()
    if _configured:
        root.handlers.clear()
    root.setLevel(getattr(logging, log_level.upper()))

    installed: List[logging.Handler] = []
    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter("human", color, tz))
        installed.append(console)
    if log_file:
        installed.append(_create_file_handler(log_file, rotate, json, tz))
    for handler in installed:
        root.addHandler(handler)

    if context:
        push_context(**context)
    for lib in quiet_libs or ():
        logging.getLogger(lib).setLevel(logging.WARNING)
    if capture_warnings:
        route_warnings()

    _configured = True
    return {'handlers': installed}


def _create_file_handler(
    log_file: str,
    rotate: Optional[Dict[str, Any]],
    json_format: bool,
    tz: str
) -> logging.Handler:
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    mode = rotate.get('mode', 'size') if rotate else None
    if mode is None:
        handler: logging.Handler = logging.FileHandler(log_file, encoding='utf-8')
    elif mode == 'size':
        handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=rotate.get('max_bytes', 5_000_000),
            backupCount=rotate.get('backup_count', 3),
            encoding='utf-8',
        )
    elif mode == 'time':
        handler = logging.handlers.TimedRotatingFileHandler(
            log_file,
            when=rotate.get('when', 'D'),
            interval=rotate.get('interval', 1),
            backupCount=rotate.get('backup_count', 7),
            encoding='utf-8',
        )
    else:
        raise ValueError(f"Unknown rotation mode: {mode}. Use 'size' or 'time'.")

    handler.setFormatter(
        ContextFormatter("json" if json_format else "human", use_color=False, tz=tz)
    )
    return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def push_context(**kwargs: Any) -> None:
    """Stamp *kwargs* on every following log line (in this context)."""
    _context_var.set({**_context_var.get(), **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Remove context fields; all of them when *keys* is None."""
    if keys is None:
        _context_var.set({})
        return
    remaining = {k: v for k, v in _context_var.get().items() if k not in keys}
    _context_var.set(remaining)


def install_excepthook() -> None:
    """Log uncaught exceptions at CRITICAL; Ctrl+C keeps the default hook."""
    def _hook(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logging.getLogger(__name__).critical(
            "Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = _hook


def route_warnings() -> None:
    logging.captureWarnings(True)
    logging.getLogger('py.warnings').setLevel(logging.WARNING)
