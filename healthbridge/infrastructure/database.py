from typing import Callable, TypeVar
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.orm.exc import StaleDataError
from healthbridge.core.config import settings
from healthbridge.core.exceptions import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Check if using SQLite
is_sqlite = "sqlite" in settings.DATABASE_URL.lower()

connect_args = {"check_same_thread": False, "timeout": 30} if is_sqlite else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=settings.DEBUG,
    connect_args=connect_args
)
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)

# Base model
Base = declarative_base()


def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_versioned(db: Session, operation: Callable[[], T], max_attempts: int = None) -> T:
    """
    Run operation and commit, retrying from a fresh read when a versioned row
    was changed by another transaction in between.

    The operation must re-read every row it modifies on each call. Any other
    exception rolls the transaction back and propagates.
    """
    attempts = max_attempts or settings.BOOKING_MAX_RETRIES
    for attempt in range(1, attempts + 1):
        try:
            result = operation()
            db.commit()
            return result
        except StaleDataError:
            db.rollback()
            logger.debug(f"Version conflict, retrying (attempt {attempt}/{attempts})")
        except Exception:
            db.rollback()
            raise

    logger.warning(f"Giving up after {attempts} conflicting attempts")
    raise ConflictError("Concurrent update, please retry", error_code="CONCURRENT_UPDATE")


def init_db(bind=None):
    """Initialize database tables"""
    # Models must be imported so they register on Base.metadata
    from healthbridge.domain.users import models as _users  # noqa: F401
    from healthbridge.domain.doctors import models as _doctors  # noqa: F401
    from healthbridge.domain.appointments import models as _appointments  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def close_db():
    """Close database connections"""
    engine.dispose()
