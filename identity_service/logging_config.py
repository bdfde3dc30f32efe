"""
Logging configuration for Identity Service.

Provides structured logging with service name context.
"""

import logging
import sys


class ServiceContextFilter(logging.Filter):
    """Add service context to log records."""

    def __init__(self, service: str):
        super().__init__()
        self.service = service

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        return True


def setup_logging(service: str, debug: bool = False) -> None:
    """
    Configure logging for the service.

    Args:
        service: Service name for log context
        debug: Enable debug level logging
    """
    level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '[%(levelname)s] [service=%(service)s] %(message)s'
    ))
    console_handler.addFilter(ServiceContextFilter(service))

    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
