"""
Logging configuration.

The service logs through the standard ``logging`` module; every module
asks for ``logging.getLogger(__name__)`` and this dict config routes the
``workspace_browser`` and uvicorn loggers to the console.
"""

import logging
import logging.config

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def build_logging_config(level: str = "INFO") -> dict:
    """Build a dictConfig mapping for the given log level."""
    level = level.upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"
    
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "basic": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "basic",
                "level": level,
            },
        },
        "loggers": {
            "workspace_browser": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["console"], "level": level, "propagate": False},
        },
    }


def setup_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(build_logging_config(level))
