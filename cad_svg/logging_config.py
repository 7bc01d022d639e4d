"""
Structured logging configuration for the cad_svg package.

Provides:
- JSON formatter for machine-readable log output
- Console formatter for human-readable output
- Timing context manager
- Context fields (e.g. the DXF file being converted) for every record

Usage:
    import logging

    from cad_svg.logging_config import setup_logging

    # Setup at application start
    setup_logging(level=logging.INFO, json_file="cad_svg.log.json")

    # Get logger in any module
    logger = logging.getLogger(__name__)
    logger.info("Converted entity", extra={"handle": "1F", "dxftype": "LINE"})
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

PACKAGE_LOGGER = "cad_svg"

# Standard LogRecord attributes, never reported as extra fields
_RESERVED_KEYS = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'message', 'asctime', 'taskName',
})


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Collect fields passed via `extra={}` (or installed by LogContext)."""
    return {
        key: value for key, value in record.__dict__.items()
        if key not in _RESERVED_KEYS
    }


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging.

    Outputs each log record as a single JSON line with standardized fields.
    Extra fields passed via `extra={}` are included in the output.

    Output format:
        {"timestamp": "...", "level": "INFO", "logger": "...", "message": "...", ...}
    """

    def __init__(self, include_extra: bool = True):
        """Initialize JSON formatter.

        Args:
            include_extra: Include extra fields from log records
        """
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single-line JSON string."""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Location only where it helps: debug output and problems
        if record.levelno >= logging.WARNING or record.levelno <= logging.DEBUG:
            log_entry["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            for key, value in _extra_fields(record).items():
                try:
                    json.dumps(value)
                    log_entry[key] = value
                except (TypeError, ValueError):
                    log_entry[key] = str(value)

        return json.dumps(log_entry, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter with optional colors.

    Format: [TIME] LEVEL logger: message [extra_key=value ...]
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def __init__(self, use_colors: bool = True, show_extra: bool = True):
        """Initialize console formatter.

        Args:
            use_colors: Use ANSI colors (disable for file output)
            show_extra: Show extra fields inline
        """
        super().__init__()
        self.use_colors = use_colors
        self.show_extra = show_extra

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output."""
        time_str = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level_str = f"{self.COLORS[level]}{level:8}{self.COLORS['RESET']}"
        else:
            level_str = f"{level:8}"

        logger_name = record.name
        prefix = PACKAGE_LOGGER + "."
        if logger_name.startswith(prefix):
            logger_name = logger_name[len(prefix):]

        extra_str = ""
        if self.show_extra:
            extras = []
            for key, value in _extra_fields(record).items():
                if isinstance(value, float):
                    extras.append(f"{key}={value:.3g}")
                elif isinstance(value, (list, tuple)) and len(value) > 3:
                    extras.append(f"{key}=[...{len(value)} items]")
                else:
                    extras.append(f"{key}={value}")
            if extras:
                extra_str = " [" + ", ".join(extras) + "]"

        result = f"[{time_str}] {level_str} {logger_name}: {record.getMessage()}{extra_str}"

        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)

        return result


def setup_logging(
    level: int = logging.INFO,
    json_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    use_colors: bool = True,
    root_logger: bool = False,
) -> logging.Logger:
    """Configure logging for the cad_svg package.

    Sets up handlers for console (human-readable) and optionally
    JSON file output (machine-readable).

    Args:
        level: Minimum log level (default INFO)
        json_file: Optional path for JSON log file
        console: Enable console output (default True)
        use_colors: Use ANSI colors in console (default True)
        root_logger: Configure root logger instead of cad_svg

    Returns:
        Configured logger instance

    Example:
        setup_logging(level=logging.DEBUG, json_file="cad_svg.log.json")
    """
    logger_name = "" if root_logger else PACKAGE_LOGGER
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(ConsoleFormatter(use_colors=use_colors))
        logger.addHandler(console_handler)

    if json_file:
        json_handler = logging.FileHandler(Path(json_file), encoding='utf-8')
        json_handler.setLevel(level)
        json_handler.setFormatter(JSONFormatter())
        logger.addHandler(json_handler)

    _install_context_filter(logger)

    if not root_logger:
        logger.propagate = False

    return logger


@contextmanager
def log_timing(
    logger: logging.Logger,
    operation: str,
    level: int = logging.DEBUG,
    **extra_fields: Any
):
    """Context manager to log operation timing.

    Args:
        logger: Logger instance
        operation: Operation description
        level: Log level (default DEBUG)
        **extra_fields: Additional fields to include in log

    Example:
        with log_timing(logger, "Converting document", path=dxf_path):
            drawing = convert_document(doc, ctx)

    Yields:
        dict that can be updated with additional timing info
    """
    timing_info: Dict[str, Any] = {}
    start_time = time.perf_counter()

    logger.log(level, f"Starting: {operation}", extra={
        "event": "start",
        "operation": operation,
        **extra_fields
    })

    try:
        yield timing_info
    except Exception as e:
        elapsed = time.perf_counter() - start_time
        logger.error(f"Failed: {operation} ({elapsed:.3f}s) - {e}", extra={
            "event": "error",
            "operation": operation,
            "elapsed_seconds": elapsed,
            "error": str(e),
            **extra_fields
        })
        raise

    elapsed = time.perf_counter() - start_time
    timing_info['elapsed_seconds'] = elapsed
    logger.log(level, f"Completed: {operation} ({elapsed:.3f}s)", extra={
        "event": "complete",
        "operation": operation,
        **extra_fields,
        **timing_info
    })


_context_fields = ContextVar('cad_svg_log_context', default={})
_current_context = ContextVar('cad_svg_log_context_owner', default=None)


class ContextFilter(logging.Filter):
    """Copies the fields of the active LogContext onto every passing record.

    One instance is installed permanently on the package handlers; the
    fields come from a context variable, so each worker thread of a
    parallel batch tags its records with its own file.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _context_fields.get().items():
            if key not in record.__dict__:
                setattr(record, key, value)
        return True


_CONTEXT_FILTER = ContextFilter()


def _install_context_filter(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        if _CONTEXT_FILTER not in handler.filters:
            handler.addFilter(_CONTEXT_FILTER)


class LogContext:
    """Context holder for adding common fields to log records.

    Used by file conversion to tag every message with the source file.
    Records of child loggers (cad_svg.conversion.*) are tagged as well,
    since the filter sits on the package logger's handlers.

    Example:
        with LogContext(source="plan.dxf"):
            logger.info("Converting")  # includes source=plan.dxf
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._tokens: list = []

    def __enter__(self) -> 'LogContext':
        _install_context_filter(logging.getLogger(PACKAGE_LOGGER))
        self._tokens.append((
            _context_fields.set({**_context_fields.get(), **self.fields}),
            _current_context.set(self),
        ))
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        fields_token, current_token = self._tokens.pop()
        _current_context.reset(current_token)
        _context_fields.reset(fields_token)

    @classmethod
    def current(cls) -> Optional['LogContext']:
        """Get the context active in the calling thread."""
        return _current_context.get()


def configure_default_logging(verbose: bool = False) -> logging.Logger:
    """Configure logging with sensible defaults (DEBUG if verbose, else INFO)."""
    level = logging.DEBUG if verbose else logging.INFO
    return setup_logging(level=level, console=True, use_colors=True)
