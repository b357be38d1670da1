"""
logging.py - Process-wide logging configuration

Structured logging through structlog on top of the stdlib root logger:
- Color-coded levels when stderr is a TTY
- Logger name visible on every line
- key=value context rendered after the message

Example output:
    2026-10-19 10:30:45 [INFO    ] inkmatch.sessions: Session created session_id=inkmatch-...
    2026-10-19 10:30:46 [WARNING ] inkmatch.generation: Image generation disabled

Usage:
    from inkmatch.config.logging import configure_logging, get_logger
    configure_logging(level="INFO")
    logger = get_logger("inkmatch.router")
    logger.info("Request routed", path="/mcp")
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import Any

import structlog


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    DIM = "\033[2m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BRIGHT_BLACK = "\033[90m"


LOG_COLORS = {
    "DEBUG": f"{Colors.BRIGHT_BLACK}{Colors.DIM}",
    "INFO": Colors.GREEN,
    "WARNING": Colors.YELLOW,
    "ERROR": f"{Colors.RED}{Colors.BOLD}",
    "CRITICAL": f"{Colors.RED}{Colors.BOLD}",
}

_RESERVED_KEYS = ("logger", "logger_name", "event", "level", "timestamp", "_colors")

_configured = False
_use_colors = False


def format_log(_logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
    """Render an event dict as a single log line.

    Args:
        _logger: The wrapped logger (unused)
        method_name: The log method name (info, error, ...)
        event_dict: Event dictionary produced by the processor chain

    Returns:
        The formatted line, colored when colors are enabled
    """
    colors = event_dict.pop("_colors", None)
    if colors is None:
        colors = _use_colors

    level = method_name.upper()
    timestamp = event_dict.get("timestamp") or datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    logger_name = event_dict.get("logger", "") or event_dict.get("logger_name", "")
    msg = str(event_dict.get("event", ""))
    extra = {k: v for k, v in event_dict.items() if k not in _RESERVED_KEYS}

    if not colors:
        parts = [f"{timestamp} [{level:<8}]"]
        if logger_name:
            parts.append(f"{logger_name}:")
        parts.append(msg)
        parts.extend(f"{k}={v}" for k, v in extra.items())
        return " ".join(parts)

    color = LOG_COLORS.get(level, "")
    parts = [
        f"{Colors.BRIGHT_BLACK}{timestamp}{Colors.RESET}",
        f"{color}[{level:<8}]{Colors.RESET}",
    ]
    if logger_name:
        parts.append(f"{Colors.CYAN}{logger_name}:{Colors.RESET}")
    parts.append(msg)
    parts.extend(
        f"{Colors.MAGENTA}{k}={Colors.RESET}{Colors.GREEN}{v}{Colors.RESET}"
        for k, v in extra.items()
    )
    return " ".join(parts)


def _quiet_third_party(level: int) -> None:
    """Keep server and HTTP client chatter out of the log unless debugging."""
    noisy_loggers = [
        ("uvicorn.access", logging.WARNING),
        ("uvicorn.error", logging.INFO if level <= logging.DEBUG else logging.WARNING),
        ("httpx", logging.INFO if level <= logging.DEBUG else logging.WARNING),
        ("httpcore", logging.WARNING),
        ("mcp.server.lowlevel.server", logging.WARNING),
        ("mcp.server.streamable_http", logging.WARNING),
    ]
    for logger_name, log_lvl in noisy_loggers:
        logging.getLogger(logger_name).setLevel(log_lvl)


def configure_logging(
    level: str = "INFO",
    colors: bool | None = None,
    verbose: bool = False,
    force: bool = False,
) -> None:
    """Configure global logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        colors: Enable ANSI colors. If None, auto-detect from TTY.
        verbose: Force DEBUG level
        force: Reconfigure even if already configured
    """
    global _configured, _use_colors

    if _configured and not force:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)
    if verbose:
        log_level = logging.DEBUG

    if colors is None:
        colors = sys.stderr.isatty()
    _use_colors = colors

    root_logger = logging.getLogger()
    root_logger.handlers = []
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            format_log,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _quiet_third_party(log_level)
    _configured = True


def get_logger(name: str = "inkmatch") -> structlog.stdlib.BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (usually the dotted component name)
    """
    return structlog.get_logger(name)


__all__ = [
    "Colors",
    "configure_logging",
    "format_log",
    "get_logger",
]
