"""
Service Logger Setup

Configures one named logger per service with console and optional
rotating file output.

Usage:
    from core.logger import setup_service_logger

    logger = setup_service_logger("identity_service")
    logger.info("Service started")
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from .config import LoggingConfig

_configured_loggers = {}


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    config: Optional[LoggingConfig] = None
) -> logging.Logger:
    """
    Create or return the logger for a service

    Args:
        service_name: Logger name (usually the service name)
        level: Log level override, defaults to LOG_LEVEL
        config: Logging configuration, defaults to environment

    Returns:
        Configured logger
    """
    if service_name in _configured_loggers:
        return _configured_loggers[service_name]

    config = config or LoggingConfig.from_env()
    logger = logging.getLogger(service_name)
    logger.setLevel((level or config.log_level).upper())
    logger.propagate = False

    formatter = logging.Formatter(config.log_format)

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if config.log_file:
        file_handler = RotatingFileHandler(
            config.log_file,
            maxBytes=config.log_file_max_bytes,
            backupCount=config.log_file_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _configured_loggers[service_name] = logger
    return logger


__all__ = ["setup_service_logger"]
