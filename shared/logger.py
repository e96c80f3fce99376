"""
jinspect Logging
=================

Provides :class:`InspectLogger`, a facade over a stdlib logger named
``jinspect.<component>``.  Human-readable records go to stderr through a
Rich handler; an optional rotating log file receives plain text or JSON
lines.

Every record carries two context fields:

``component``
    The part of jinspect that emitted it (``cli``, ``engine``, ...).
``stage``
    The decode stage active at the time (``constant_pool``, ``methods``,
    ...), set with :meth:`InspectLogger.stage`.  A length-mismatch warning
    therefore says which member list it was found in.

Keyword arguments beyond the standard logging ones are collected into a
``details`` mapping and written to the JSON log.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from shared.config import GlobalConfig

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)

_PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(component)s/%(stage_label)s | %(message)s"
_STANDARD_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel"})


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


# ========================== Record context =================================


class _ContextFilter(logging.Filter):
    """Stamp ``component`` and the active ``stage`` onto every record."""

    def __init__(self, owner: InspectLogger) -> None:
        super().__init__()
        self._owner = owner

    def filter(self, record: logging.LogRecord) -> bool:
        record.component = self._owner.component
        record.stage = self._owner.current_stage
        record.stage_label = self._owner.current_stage or "-"
        return True


class _JSONFormatter(logging.Formatter):
    """One JSON object per line::

        {"timestamp": "...", "level": "WARNING", "logger": "jinspect.engine",
         "component": "engine", "stage": "methods",
         "message": "...", "details": {"declared": 12}}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "component": getattr(record, "component", None),
            "message": record.getMessage(),
        }
        stage = getattr(record, "stage", None)
        if stage is not None:
            entry["stage"] = stage

        details = getattr(record, "details", None)
        if details:
            entry["details"] = details

        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class _StderrRichHandler(RichHandler):
    """Rich handler bound to stderr so stdout stays clean for ``--json``."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(
            console=Console(theme=_LOG_THEME, stderr=True),
            show_path=False,
            show_time=True,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=False,
            **kwargs,
        )


# ========================== InspectLogger ==================================


class InspectLogger:
    """Stage-aware logger for jinspect components.

    Usage::

        log = InspectLogger("engine", log_level="DEBUG")
        with log.stage("constant_pool"):
            log.debug("Pool entries: %d", count)
        log.warning("Length mismatch", attribute="Code", declared=12)

    Args:
        component:       Component name; the stdlib logger is ``jinspect.<component>``.
        log_level:       Minimum severity (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file:        Rotating log file path.  ``None`` disables file logging.
        json_logs:       Write the log file as JSON lines instead of plain text.
        max_bytes:       Log-file size that triggers rotation (default 10 MiB).
        backup_count:    Rotated files to keep.
        console_output:  Attach the Rich stderr handler.
    """

    def __init__(
        self,
        component: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = True,
    ) -> None:
        self._component = component
        self._stage: str | None = None
        level = _level(log_level)

        self._logger = logging.getLogger(f"jinspect.{component}")
        self._logger.setLevel(level)
        self._logger.propagate = False

        # Re-instantiation replaces the previous instance's handlers and filter
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()
        for old in list(self._logger.filters):
            self._logger.removeFilter(old)
        self._logger.addFilter(_ContextFilter(self))

        if console_output:
            self._logger.addHandler(_StderrRichHandler(level=level))

        if log_file is not None:
            file_path = Path(log_file)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(
                filename=str(file_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            fh.setLevel(level)
            if json_logs:
                fh.setFormatter(_JSONFormatter())
            else:
                fh.setFormatter(
                    logging.Formatter(fmt=_PLAIN_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
                )
            self._logger.addHandler(fh)

    @classmethod
    def from_config(
        cls,
        component: str,
        settings: GlobalConfig,
        *,
        debug: bool = False,
        console_output: bool = True,
    ) -> InspectLogger:
        """Build a logger from the ``[global]`` configuration section.

        *debug* forces the DEBUG level regardless of ``settings.log_level``.
        """
        return cls(
            component,
            log_level="DEBUG" if debug else settings.log_level,
            log_file=settings.log_file,
            json_logs=settings.log_json,
            console_output=console_output,
        )

    # ------------------------------------------------------------------ #
    #  Stage scope
    # ------------------------------------------------------------------ #

    class _StageContext:
        def __init__(self, owner: InspectLogger, stage: str) -> None:
            self._owner = owner
            self._stage = stage
            self._prev: str | None = None

        def __enter__(self) -> InspectLogger:
            self._prev = self._owner._stage
            self._owner._stage = self._stage
            return self._owner

        def __exit__(self, *exc: Any) -> None:
            self._owner._stage = self._prev

    def stage(self, name: str) -> _StageContext:
        """Context manager that sets the *stage* field; scopes nest."""
        return self._StageContext(self, name)

    @property
    def current_stage(self) -> str | None:
        return self._stage

    # ------------------------------------------------------------------ #
    #  Log methods
    # ------------------------------------------------------------------ #

    @staticmethod
    def _split(kwargs: dict[str, Any]) -> dict[str, Any]:
        """Move non-standard keyword arguments into ``extra['details']``."""
        extra = kwargs.pop("extra", None) or {}
        details = {k: kwargs.pop(k) for k in list(kwargs) if k not in _STANDARD_KWARGS}
        if details:
            extra["details"] = details
        kwargs["extra"] = extra
        return kwargs

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **self._split(kwargs))

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **self._split(kwargs))

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **self._split(kwargs))

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **self._split(kwargs))

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """ERROR-level record with the active traceback attached."""
        kwargs.setdefault("exc_info", True)
        self._logger.error(msg, *args, **self._split(kwargs))

    # ------------------------------------------------------------------ #
    #  Timing
    # ------------------------------------------------------------------ #

    class _TimingContext:
        def __init__(self, owner: InspectLogger, label: str) -> None:
            self._owner = owner
            self._label = label
            self._start: float = 0.0

        def __enter__(self) -> InspectLogger._TimingContext:
            self._start = time.perf_counter()
            self._owner.debug("Started: %s", self._label)
            return self

        def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
            if exc_type is None:
                self._owner.debug("Finished: %s (%.3f sec)", self._label, self.elapsed)
            else:
                self._owner.debug(
                    "Failed: %s after %.3f sec (%s)",
                    self._label, self.elapsed, exc_type.__name__,
                )

        @property
        def elapsed(self) -> float:
            return time.perf_counter() - self._start

    def timed(self, label: str) -> _TimingContext:
        """Context manager logging start, finish or failure with elapsed time."""
        return self._TimingContext(self, label)

    # ------------------------------------------------------------------ #
    #  Properties
    # ------------------------------------------------------------------ #

    @property
    def component(self) -> str:
        return self._component

    @property
    def underlying(self) -> logging.Logger:
        """Direct access to the stdlib :class:`logging.Logger`."""
        return self._logger
