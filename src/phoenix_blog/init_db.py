"""Create the database schema without running migrations."""

import logging

from phoenix_blog.core.logging_config import configure_logging
from phoenix_blog.db.session import create_tables

logger = logging.getLogger(__name__)


def main() -> None:
    """Initialize the database by creating all tables."""
    configure_logging()
    create_tables()
    logger.info("Database initialized.")


if __name__ == "__main__":
    main()
