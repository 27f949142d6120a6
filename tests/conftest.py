import pytest
import os
from datetime import datetime, timedelta, timezone
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["STORAGE_BACKEND"] = "sql"

from backoffice.database import Base, get_db
from backoffice.dependencies import get_documents_dir
from backoffice.main import app
from backoffice.repositories import (
    MemoryLeaveStore,
    MemorySalarySlipStore,
    SqlLeaveStore,
    SqlSalarySlipStore,
    Storage,
)
from backoffice.services.notification import LeaveNotifier
from fastapi.testclient import TestClient
import backoffice.models  # noqa: F401  (register tables)

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# pysqlite defers BEGIN on its own, so the outer per-test transaction would
# not exist and released SAVEPOINTs would persist. Emit BEGIN explicitly.
@event.listens_for(engine, "connect")
def _disable_pysqlite_autobegin(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None

@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    # Commits inside the stores become savepoint releases; the outer transaction is rolled back
    session = TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")
    
    yield session
    
    session.close()
    transaction.rollback()
    connection.close()

@pytest.fixture(params=["sql", "memory"])
def leave_store(request, db_session):
    """Every service-level leave test runs against both store implementations."""
    if request.param == "sql":
        return SqlLeaveStore(db_session)
    return MemoryLeaveStore()

@pytest.fixture(params=["sql", "memory"])
def slip_store(request, db_session):
    if request.param == "sql":
        return SqlSalarySlipStore(db_session)
    return MemorySalarySlipStore()

@pytest.fixture
def notifier():
    return LeaveNotifier()

@pytest.fixture
def events(notifier):
    """Collects every event the notifier publishes."""
    received = []
    notifier.subscribe(received.append)
    return received

@pytest.fixture
def clock():
    """Controllable 'now'; advance it with clock.tick()."""
    class _Clock:
        def __init__(self):
            self.now = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)

        def __call__(self):
            return self.now

        def tick(self, seconds=1):
            self.now = self.now + timedelta(seconds=seconds)
            return self.now

    return _Clock()

@pytest.fixture
def documents_dir(tmp_path):
    path = tmp_path / "documents"
    path.mkdir()
    return path

@pytest.fixture(scope="function")
def client(db_session, documents_dir):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
            
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_documents_dir] = lambda: documents_dir
    with TestClient(app) as c:
        app.state.storage = Storage("sql")
        yield c
    app.dependency_overrides.clear()

@pytest.fixture(scope="function")
def degraded_client(documents_dir):
    """TestClient running on the in-process stores, as when the database is down."""
    app.dependency_overrides[get_documents_dir] = lambda: documents_dir
    with TestClient(app) as c:
        app.state.storage = Storage("memory")
        yield c
    app.dependency_overrides.clear()

@pytest.fixture(scope="function")
def server_error_client(db_session, documents_dir):
    """Like `client`, but unhandled errors come back as responses instead of being re-raised."""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_documents_dir] = lambda: documents_dir
    with TestClient(app, raise_server_exceptions=False) as c:
        app.state.storage = Storage("sql")
        yield c
    app.dependency_overrides.clear()
