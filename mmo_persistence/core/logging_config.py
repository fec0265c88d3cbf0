"""
Logging configuration for the persistence engine.

Provides structured logging with different levels for development, testing, and production.
Configures formatters, handlers, and loggers for the storage components.
"""

import logging
import logging.config
import os
import sys
from typing import Dict, Any


def get_log_level() -> str:
    """Get the log level from environment variables."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_logging_config() -> Dict[str, Any]:
    """
    Get the logging configuration dictionary.

    Returns a logging configuration that can be used with logging.config.dictConfig().
    Production uses JSON lines so `extra` context stays machine readable;
    development and testing use a human-readable format.
    """
    log_level = get_log_level()
    environment = os.getenv("ENVIRONMENT", "development").lower()

    if environment == "production":
        formatter_class = "pythonjsonlogger.json.JsonFormatter"
        formatter_format = "%(asctime)s %(name)s %(levelname)s %(message)s"
    else:
        formatter_class = "logging.Formatter"
        formatter_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    component_logger = {
        "level": log_level,
        "handlers": ["console", "error_console"],
        "propagate": False,
    }

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "class": formatter_class,
                "format": formatter_format,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "class": formatter_class,
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "default",
                "stream": sys.stdout,
            },
            "error_console": {
                "class": "logging.StreamHandler",
                "level": "ERROR",
                "formatter": "detailed",
                "stream": sys.stderr,
            },
        },
        "loggers": {
            # Application loggers
            "persistence": dict(component_logger),
            "persistence.core": dict(component_logger),
            "persistence.services": dict(component_logger),
            "persistence.accounts": dict(component_logger),
            "persistence.characters": dict(component_logger),
            "persistence.guilds": dict(component_logger),
            # Third-party loggers
            "sqlalchemy.engine": {
                "level": "WARNING",  # Reduce SQLAlchemy verbosity
                "handlers": ["console"],
                "propagate": False,
            },
        },
        "root": {
            "level": log_level,
            "handlers": ["console", "error_console"],
        },
    }

    return config


def setup_logging() -> None:
    """
    Configure logging for the application.

    This should be called once at server startup, before any other
    logging occurs.
    """
    config = get_logging_config()
    logging.config.dictConfig(config)

    logger = logging.getLogger("persistence.logging")
    logger.info(
        "Logging configured",
        extra={
            "log_level": get_log_level(),
            "environment": os.getenv("ENVIRONMENT", "development"),
        },
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given name.

    Args:
        name: The logger name, typically __name__ from the calling module

    Returns:
        A configured logger instance
    """
    # Ensure the logger name starts with 'persistence.' for proper hierarchy
    if not name.startswith("persistence."):
        if name.startswith("mmo_persistence."):
            # mmo_persistence.services.persistence.guild_manager -> persistence.guilds
            parts = name.split(".")
            leaf = parts[-1]
            if leaf in ("account_manager",):
                name = "persistence.accounts"
            elif leaf.startswith("guild"):
                name = "persistence.guilds"
            elif len(parts) >= 3 and parts[2] == "persistence":
                name = "persistence.characters"
            else:
                name = f"persistence.{parts[1]}"
        else:
            name = f"persistence.{name}"

    return logging.getLogger(name)
