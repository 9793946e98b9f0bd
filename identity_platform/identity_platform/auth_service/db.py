from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

from .config import settings

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {},
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


def init_db():
    """Create all tables and make sure the default roles exist. Safe to run repeatedly."""
    # Import here to avoid circular dependency
    from . import models  # noqa: F401
    from .sql_store import SqlCredentialStore
    from .store import seed_roles

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        created = seed_roles(SqlCredentialStore(db))
    finally:
        db.close()

    if created:
        logger.info("Seeded roles: %s", ", ".join(created))
    logger.info("Database initialized successfully")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> bool:
    """
    Check if database connection is working.

    Returns:
        bool: True if connection is successful, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("Database connection check failed: %s", e)
        return False
