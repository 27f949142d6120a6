import pytest
from fastapi import status
from sqlalchemy.exc import OperationalError

from backoffice import main
from backoffice.core.exceptions import StoreUnavailableError
from backoffice.repositories import SqlLeaveStore

def test_health_check(client):
    """Test the /health endpoint returns 200 and up status."""
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "up"
    assert "version" in data
    assert "timestamp" in data

def test_readiness_check(client):
    """Test the /readiness endpoint returns 200 and database status."""
    response = client.get("/readiness")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "ready"
    assert data["components"]["database"] == "connected"

def test_readiness_reports_degraded_mode(degraded_client):
    data = degraded_client.get("/readiness").json()
    assert data["status"] == "degraded"
    assert data["components"]["storage"] == "memory"

def test_root_endpoint(client):
    """Test the API root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert "HR Back Office API" in response.json()["message"]

def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"

# --- storage selection at startup ---

def test_select_storage_uses_database_when_reachable(monkeypatch):
    monkeypatch.setattr(main, "init_db", lambda: None)
    assert main.select_storage().degraded is False

def test_select_storage_falls_back_when_database_unreachable(monkeypatch):
    def unreachable():
        raise StoreUnavailableError("Database unavailable: connection refused")

    monkeypatch.setattr(main, "init_db", unreachable)
    storage = main.select_storage()

    assert storage.degraded is True
    assert storage.mode == "memory"

def test_memory_backend_skips_database(monkeypatch):
    def must_not_run():
        raise AssertionError("init_db called with STORAGE_BACKEND=memory")

    monkeypatch.setattr(main.settings, "storage_backend", "memory")
    monkeypatch.setattr(main, "init_db", must_not_run)
    assert main.select_storage().degraded is True

# --- unexpected failures ---

def test_store_failure_is_a_generic_500(server_error_client, monkeypatch):
    def broken_search(self, *args, **kwargs):
        raise OperationalError("SELECT * FROM leave_requests", {}, Exception("disk I/O error on /var/lib/hr.db"))

    monkeypatch.setattr(SqlLeaveStore, "search", broken_search)
    response = server_error_client.get("/api/leaves", headers={"X-Request-ID": "req-500"})

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "errors": [{"msg": "An unexpected server error occurred.", "code": "INTERNAL_ERROR"}],
    }
    assert "disk I/O" not in response.text
    assert "leave_requests" not in response.text
    assert response.headers["X-Request-ID"] == "req-500"
