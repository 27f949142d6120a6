import logging

from datetime import timezone

from sqlalchemy import DateTime, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.types import TypeDecorator
from backoffice.core.config import settings
from backoffice.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

# Support both PostgreSQL and SQLite via centralized settings
DATABASE_URL = settings.database_url

if DATABASE_URL.startswith("postgresql"):
    engine = create_engine(DATABASE_URL, pool_pre_ping=True)
else:
    # SQLite configuration for local development/testing
    engine = create_engine(
        DATABASE_URL, connect_args={"check_same_thread": False}
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


class UtcDateTime(TypeDecorator):
    """
    Timezone-aware timestamp stored as UTC.
    SQLite drops the offset, so naive values read back are tagged as UTC.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value

def get_db():
    """
    Session Provider: Provides a database session per request.
    Transaction management is handled explicitly in the repositories.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    """
    Registers all domain models and initializes the database schema.
    Raises StoreUnavailableError when the database cannot be reached so the
    caller can fall back to the in-process stores.
    """
    # Import all models to ensure they are registered with Base.metadata before create_all
    from backoffice.models import leave_request, salary_slip  # noqa: F401
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        raise StoreUnavailableError(f"Database unavailable: {e}") from e
