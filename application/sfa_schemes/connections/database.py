"""
SQLAlchemy ORM Database Configuration
Scheme master reads go through the read engine; override logs and order
snapshots are written through the primary.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator
from contextlib import contextmanager


# Logger
from sfa_schemes.logging.utils import get_app_logger
logger = get_app_logger("sfa_schemes.database")

# Settings
from sfa_schemes.config.settings import SchemeEngineConfigs
configs = SchemeEngineConfigs()


def normalize_database_url(url: str) -> str:
    # psycopg3 driver for postgres
    if url and url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def build_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False}, echo=False)
    return create_engine(
        url,
        pool_size=10,           # Number of connections to maintain in pool
        max_overflow=20,        # Additional connections beyond pool_size
        pool_pre_ping=True,     # Validate connections before use
        pool_recycle=3600,      # Recycle connections after 1 hour
        echo=False,
    )


DATABASE_URL = normalize_database_url(configs.DATABASE_URL)
DATABASE_READ_URL = normalize_database_url(configs.DATABASE_READ_URL)

# Base class for ORM models
Base = declarative_base()

engine = build_engine(DATABASE_URL)
read_engine = build_engine(DATABASE_READ_URL) if DATABASE_READ_URL != DATABASE_URL else engine

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
ReadSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=read_engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency for write database sessions."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_session(read_only: bool = False, session_factory=None):
    """
    Get database session with transaction management.

    Args:
        read_only: Whether to use the read-only session
        session_factory: Optional sessionmaker overriding the module defaults

    Yields:
        SQLAlchemy session object
    """
    session_class = session_factory or (ReadSessionLocal if read_only else SessionLocal)
    db = session_class()
    try:
        yield db
        if not read_only:
            db.commit()
    except Exception:
        if not read_only:
            db.rollback()
        raise
    finally:
        db.close()


def close_db_pool():
    engine.dispose()
    if read_engine is not engine:
        read_engine.dispose()
    logger.info("database_pool_closed")
