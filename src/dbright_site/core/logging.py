"""Logging configuration for the service."""

from __future__ import annotations

import logging

from dbright_site.core.settings import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(config: Settings) -> None:
    """Configure the root logger from settings.

    Debug mode forces DEBUG level; otherwise LOG_LEVEL applies and unknown
    names fall back to INFO.
    """
    if config.debug:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(config.log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if config.sql_debug else logging.WARNING
    )


def report_environment(config: Settings) -> list[str]:
    """Log which security-sensitive options still use their defaults."""
    logger = logging.getLogger("dbright_site.config")
    insecure = config.insecure_defaults()
    for name in insecure:
        if config.debug:
            logger.warning("%s is not set; using the development default", name)
        else:
            logger.error("%s is not set; the development default is unsafe in production", name)
    return insecure
