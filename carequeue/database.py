import logging
import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL

logger = logging.getLogger(__name__)

# Pool settings for server databases; SQLite ignores them
POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "20"))
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "300"))


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
    # Needed for staff deletes to null appointments.staff_id (ON DELETE SET NULL)
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, **options) -> Engine:
    """Create an engine for url with backend-appropriate settings"""
    if url.startswith("sqlite"):
        options.setdefault("connect_args", {"check_same_thread": False})
        db_engine = create_engine(url, **options)
        event.listen(db_engine, "connect", _enable_sqlite_foreign_keys)
        return db_engine

    options.setdefault("pool_pre_ping", True)
    options.setdefault("pool_recycle", POOL_RECYCLE)
    options.setdefault("pool_size", POOL_SIZE)
    options.setdefault("max_overflow", MAX_OVERFLOW)
    return create_engine(url, **options)


try:
    engine = build_engine(DATABASE_URL)
    logger.info(f"✅ Database engine created ({engine.dialect.name})")
except Exception as e:
    logger.error(f"❌ Failed to create database engine: {e}")
    raise

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
