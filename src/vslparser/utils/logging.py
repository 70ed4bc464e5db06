"""Structured logging setup for vslparser."""

import structlog
from pathlib import Path
from typing import Any, Optional
import os


VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

# Handle the current configuration writes to; replaced on reconfiguration
_log_stream = None


def configure_logging(log_file: Optional[Path] = None, level: Optional[str] = None) -> Path:
    """
    Configure structlog for JSON logging to ~/.cache/vslparser/logs/vslparser.log.

    Log level can be controlled via VSLPARSER_LOG_LEVEL environment variable:
    - Set to "DEBUG" for more detail
    - Defaults to "INFO" if not set

    Only the CLI logs; the parser and line sources never do, so library
    callers see no output unless they configure structlog themselves.

    Log levels:
    - INFO: Config loaded, commands started/finished with entry counts
    - ERROR: Invalid configuration, runs aborted by a parse error

    Reconfiguring closes the handle of the previous configuration.

    Example:
        VSLPARSER_LOG_LEVEL=DEBUG vslparse parse varnish.log

        # View logs with jq for readability:
        tail -f ~/.cache/vslparser/logs/vslparser.log | jq .

    Args:
        log_file: Override the log file location
        level: Override the log level (takes precedence over the environment)

    Returns:
        Path of the log file in use
    """
    global _log_stream

    if log_file is None:
        log_dir = Path.home() / ".cache" / "vslparser" / "logs"
        log_file = log_dir / "vslparser.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    log_level = (level or os.environ.get("VSLPARSER_LOG_LEVEL", "INFO")).upper()
    if log_level not in VALID_LEVELS:
        log_level = "INFO"

    stream = open(log_file, "a")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )

    # Loggers are not cached, so nothing still writes to the old handle
    if _log_stream is not None:
        _log_stream.close()
    _log_stream = stream
    return log_file


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Structured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("command_started", argv=["varnishlog"])
    """
    return structlog.get_logger(name)
