"""Logging setup for the application process."""

from __future__ import annotations

import logging

from phoenix_blog.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once, honouring ``LOG_LEVEL``."""
    resolved = (level or settings.log_level).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("phoenix_blog").setLevel(resolved)
    # SQL echo is controlled separately through SQL_DEBUG.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.sql_debug else logging.WARNING
    )
