"""
Structured logging configuration.
Outputs JSON logs for production, human-readable for development.

Django wires the formatters through settings.LOGGING; the offline sync CLI
calls configure_logging() directly.
"""
import logging
import json
import sys
from typing import Any, Dict

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RECORD_ATTRS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'taskName', 'message',
))


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith('_')
    }


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        log_data.update(_extra_fields(record))

        return json.dumps(log_data, ensure_ascii=False, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, '')

        parts = [
            f"{color}{record.levelname:8}{self.RESET}",
            f"[{record.name}]",
            record.getMessage()
        ]

        extra = _extra_fields(record)
        if extra:
            parts.append('(' + ', '.join(f"{k}={v}" for k, v in extra.items()) + ')')

        if record.exc_info:
            parts.append('\n' + self.formatException(record.exc_info))

        return ' '.join(parts)


def configure_logging(is_production: bool = False, level: str = 'INFO'):
    """
    Configure logging for the application.

    Args:
        is_production: Use JSON formatter if True, otherwise colored output
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if is_production:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter())

    root_logger.addHandler(handler)

    logging.getLogger('pika').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)

