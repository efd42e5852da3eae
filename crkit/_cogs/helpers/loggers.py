"""
Logging setup for the command-line usage.

The library itself never configures the logging: it only logs to its own
loggers (``crkit.clients``, ``crkit.schemes``), and it is up to the caller
to route or silence them. The CLI configures the root logger here.
"""
import enum
import logging
from typing import Any, Mapping, MutableMapping, Optional

import pythonjsonlogger.jsonlogger

# The libraries below are too chatty for anything but debugging.
NOISY_LOGGERS = ['asyncio', 'aiohttp']

# The upper bounds of the levels, checked in order; everything above is fatal.
SEVERITIES: Mapping[int, str] = {
    logging.DEBUG: 'debug',
    logging.INFO: 'info',
    logging.WARNING: 'warn',
    logging.ERROR: 'error',
}


class LogFormat(enum.Enum):
    """ The output formats of the CLI logs. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(levelname)-8s %(name)s: %(message)s'
    JSON = 'json'


class JsonFormatter(pythonjsonlogger.jsonlogger.JsonFormatter):  # type: ignore
    """ JSON lines with a timestamp and a log-collector-friendly severity. """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, **kwargs)

    def add_fields(
            self,
            log_record: MutableMapping[str, object],
            record: logging.LogRecord,
            message_dict: MutableMapping[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault('severity', _severity(record.levelno))


def _severity(levelno: int) -> str:
    for limit, severity in SEVERITIES.items():
        if levelno <= limit:
            return severity
    return 'fatal'


def make_formatter(log_format: LogFormat = LogFormat.FULL) -> logging.Formatter:
    if not isinstance(log_format, LogFormat):
        raise ValueError(f"Unsupported log format: {log_format!r}")
    elif log_format is LogFormat.JSON:
        return JsonFormatter()
    else:
        return logging.Formatter(log_format.value)


def configure(
        debug: Optional[bool] = None,
        verbose: Optional[bool] = None,
        quiet: Optional[bool] = None,
        log_format: LogFormat = LogFormat.FULL,
) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(make_formatter(log_format))

    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug or verbose else logging.WARNING if quiet else logging.INFO)

    # Unless debugging, the noisy loggers neither propagate nor print with the last-resort handler.
    for name in NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        noisy.propagate = bool(debug)
        if not debug:
            noisy.handlers[:] = [logging.NullHandler()]
