"""
Logging Utilities for the media server.

This module provides centralized logging configuration for the FastAPI
application and its services. It ensures consistent log formatting with
request ID tracing, so a single upload's probe, per-stream extraction and
linking lines can be followed end to end.
"""
import logging
from typing import Optional


ROOT_LOGGER_NAME = "homereel"


class RequestIdFilter(logging.Filter):
    """Fill in ``request_id`` for records that were not logged via an adapter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def setup_logger(
    log_level: int = logging.INFO,
    logger_name: str = ROOT_LOGGER_NAME
) -> logging.Logger:
    """
    Configure the application logger.

    Module loggers (``logging.getLogger(__name__)`` inside the ``homereel``
    package) propagate to this logger, so configuring it once at startup is
    enough.

    Args:
        log_level: Logging level constant from logging module.
                  Defaults to logging.INFO (20).
        logger_name: Name for the logger instance. Defaults to "homereel".

    Returns:
        Configured Logger instance ready for use with get_request_logger().

    Example:
        >>> logger = setup_logger(log_level=logging.DEBUG)
        >>> upload_logger = get_request_logger("upload-123")
        >>> upload_logger.info("Probing container")
        2026-10-18 10:30:45 | INFO | [upload-123] Probing container
    """
    log_format = logging.Formatter(
        '%(asctime)s | %(levelname)s | [%(request_id)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)

    # Prevent duplicate handlers if logger already configured
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(log_format)
        console_handler.addFilter(RequestIdFilter())
        logger.addHandler(console_handler)

    return logger


def get_request_logger(
    request_id: str,
    base_logger: Optional[logging.Logger] = None
) -> logging.LoggerAdapter:
    """
    Create a logger adapter with the request ID for tracing.

    Args:
        request_id: Identifier of the upload or registration being processed.
        base_logger: Optional base logger to wrap. If None, uses the
                    "homereel" application logger.

    Returns:
        LoggerAdapter configured to inject request_id into all log messages.
    """
    if base_logger is None:
        base_logger = logging.getLogger(ROOT_LOGGER_NAME)

    return logging.LoggerAdapter(base_logger, {"request_id": request_id})
