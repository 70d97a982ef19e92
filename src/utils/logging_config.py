"""
Structured Logging Configuration for the AutoCRM assistant

One JSON object per line in production, a colored single-line format for
development. Context is attached to records through `extra={...}`.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in through `extra`.
_STANDARD_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
    'taskName', 'getMessage',
}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for attr_name, attr_value in record.__dict__.items():
        if attr_name in _STANDARD_ATTRS:
            continue
        # Only include serializable types
        if isinstance(attr_value, (str, int, float, bool, type(None), dict, list)):
            fields[attr_name] = attr_value
    return fields


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs single-line JSON objects that CloudWatch and jq can both read.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        for key, value in _extra_fields(record).items():
            log_data.setdefault(key, value)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class PrettyFormatter(logging.Formatter):
    """Readable console formatter for development."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m',
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']
        timestamp = datetime.now(timezone.utc).strftime('%H:%M:%S.%f')[:-3]

        parts = [
            f"{color}[{record.levelname}]{reset}",
            timestamp,
            f"{record.name}:",
            record.getMessage(),
        ]
        extras = _extra_fields(record)
        if extras:
            parts.append("(" + ", ".join(f"{k}={v}" for k, v in extras.items()) + ")")

        result = ' '.join(parts)
        if record.exc_info:
            result += '\n' + self.formatException(record.exc_info)
        return result


def setup_logging(
    log_level: str = 'INFO',
    log_format: str = 'json',
    logger_name: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type ('json' or 'pretty')
        logger_name: Logger to configure; the root logger when None

    Returns:
        The configured logger

    Example:
        >>> logger = setup_logging('INFO', 'json')
        >>> logger.info('run_started', extra={'run_id': 'abc'})
    """
    numeric_level = getattr(logging, str(log_level).upper(), logging.INFO)

    logger = logging.getLogger(logger_name)
    logger.setLevel(numeric_level)
    logger.handlers = []

    formatter = PrettyFormatter() if log_format == 'pretty' else JSONFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # The OpenAI client and botocore are chatty at DEBUG
    for noisy in ('httpx', 'openai', 'botocore', 'urllib3'):
        logging.getLogger(noisy).setLevel(max(numeric_level, logging.WARNING))

    return logger
