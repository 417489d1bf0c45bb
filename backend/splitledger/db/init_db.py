"""
Database initialization script.
"""
import logging

from splitledger.core.config import settings
from splitledger.core.log import configure_logging
from splitledger.db.session import init_db

logger = logging.getLogger(__name__)


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized successfully!")
