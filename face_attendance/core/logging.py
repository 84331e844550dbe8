"""
Centralized logging configuration.
One console handler on the root logger; modules use get_logger(__name__).
"""

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = (
    "httpx",
    "httpcore",
    "hpack",
    "postgrest",
    "storage3",
    "supabase",
    "uvicorn.access",
    "insightface",
)


class ColoredFormatter(logging.Formatter):
    """
    Colored log formatter for console output.
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # Color a copy so other handlers keep the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    use_colors: Optional[bool] = None
) -> None:
    """
    Configure application logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string (optional)
        use_colors: Colored level names; defaults to on when stdout is a terminal
    """
    if use_colors is None:
        use_colors = sys.stdout.isatty()
    format_class = ColoredFormatter if use_colors else logging.Formatter

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(format_class(format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers = [handler]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Usage:
        from face_attendance.core.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


# === Request log helpers ===

def _fields(kwargs) -> str:
    return " ".join(f"{k}={v}" for k, v in kwargs.items() if v is not None)


def log_request(logger: logging.Logger, method: str, path: str, **kwargs):
    """Log an incoming request, e.g. `→ POST /recognitions request_id=3f2a`."""
    logger.info(f"→ {method} {path} {_fields(kwargs)}".strip())


def log_response(logger: logging.Logger, status: int, duration_ms: float, **kwargs):
    """Log the response; 5xx at ERROR, 4xx at WARNING."""
    if status >= 500:
        level = logging.ERROR
    elif status >= 400:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger.log(level, f"← {status} ({duration_ms:.1f}ms) {_fields(kwargs)}".strip())


def log_error(logger: logging.Logger, error: Exception, context: str = None):
    """Log an error with traceback and optional context."""
    msg = f"{type(error).__name__}: {error}"
    if context:
        msg = f"[{context}] {msg}"
    logger.error(msg, exc_info=True)
