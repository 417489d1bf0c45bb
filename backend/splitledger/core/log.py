"""
Logging setup for the API process.
"""
import logging


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once, at application start-up."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # SQL echo is controlled by DB_ECHO, keep engine chatter out of INFO logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
