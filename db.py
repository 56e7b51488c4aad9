import os

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool

from config import settings
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("database")

STATEMENT_TIMEOUT = "30s"


def build_engine():
    """SQLite when NODE_ENV=test, pooled PostgreSQL otherwise"""
    if os.getenv("NODE_ENV", settings.NODE_ENV) == "test":
        url = os.getenv("SQLALCHEMY_TEST_DATABASE_URL", "sqlite:///./test.db")
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        settings.POSTGRES_URL,
        poolclass=QueuePool,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_timeout=30,
        connect_args={"connect_timeout": 10, "application_name": "lms_assessment_api"},
    )


engine = build_engine()


@event.listens_for(engine, "connect")
def apply_session_settings(dbapi_connection, connection_record):
    """Cap statement time on PostgreSQL connections"""
    if engine.dialect.name != "postgresql":
        return
    try:
        with dbapi_connection.cursor() as cursor:
            cursor.execute(f"SET statement_timeout = '{STATEMENT_TIMEOUT}'")
    except Exception as e:
        logger.warning(f"Could not apply PostgreSQL settings: {e}", category=LogCategory.DATABASE)


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
