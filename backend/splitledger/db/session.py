"""
Database session management.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from splitledger.core.config import settings
from splitledger.db.base import Base


def build_engine(database_url: str, echo: bool = False):
    """Create an engine whose waits on locks are bounded by DB_TIMEOUT_SECONDS."""
    if database_url.startswith("sqlite"):
        # Busy timeout for writers waiting on the SQLite lock
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": settings.DB_TIMEOUT_SECONDS},
        )
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_timeout=settings.DB_TIMEOUT_SECONDS,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Initialize database tables."""
    # Import models so every table is registered on the metadata
    import splitledger.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
