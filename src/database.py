"""Database configuration and session management."""

import os

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

# Get database URL from environment
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./workout.db")

engine = create_engine(DATABASE_URL, echo=os.environ.get("SQL_ECHO") == "1")

# Create SessionLocal class for database sessions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create Base class for declarative models
Base = declarative_base()


def init_database(bind=None) -> None:
    """Create all tables that don't exist yet."""
    import models  # noqa: F401  registers the tables on Base

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database initialized")
