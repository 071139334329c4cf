# bookstore/data/database.py
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from bookstore.domain.errors import ConflictError, InsufficientStockError, ValidationError
from bookstore.utils.settings import DATABASE_URL
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)

_is_sqlite = (DATABASE_URL or "").startswith("sqlite")

engine = create_engine(
    DATABASE_URL or "sqlite:///./bookstore.db",
    pool_pre_ping=True,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)

if _is_sqlite:
    # sqlite ignores FK constraints (and ON DELETE) unless asked per connection
    @event.listens_for(engine, "connect")
    def _enable_sqlite_fk(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def translate_integrity_error(exc: IntegrityError, deleting: bool = False):
    msg = str(exc.orig).lower()
    if "unique" in msg or "duplicate" in msg:
        return ConflictError("Resource already exists")
    if "ck_book_stock_non_negative" in msg:
        return InsufficientStockError()
    if "foreign key" in msg:
        if deleting:
            return ConflictError("Cannot delete resource due to existing references")
        return ValidationError("Invalid reference to a related resource")
    return ValidationError("Database constraint violated")


@contextmanager
def transaction(db: Session, deleting: bool = False):
    """
    Unit of work: commit on success, rollback on any exception.
    IntegrityError from the store is translated to the domain error taxonomy.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error rolled back: {e.orig}")
        raise translate_integrity_error(e, deleting=deleting) from e
    except Exception:
        db.rollback()
        raise
