"""
HR Back Office - FastAPI Application

Leave approval workflow and salary slips.

1. Storage mode decided once at startup (database, or in-process fallback)
2. Middleware order: CORS → CorrelationId
3. Complete exception handling with a uniform error body
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Union

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from backoffice.core.config import settings
from backoffice.core.exceptions import AppException, StoreUnavailableError
from backoffice.core.logging import setup_logging
from backoffice.core.middleware import CorrelationIdMiddleware
from backoffice.core.schemas import ErrorItem, ErrorResponse
from backoffice.database import get_db, init_db
from backoffice.dependencies import get_storage
from backoffice.repositories import Storage
from backoffice.routers.api_router import api_router
from backoffice.services.notification import LeaveNotifier, log_leave_change

# ============================================================================
# LOGGING SETUP
# ============================================================================
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


def select_storage() -> Storage:
    """Durable store if it answers, otherwise the in-process fallback."""
    if settings.storage_backend == "memory":
        logger.warning("STORAGE_BACKEND=memory; running on in-process stores")
        return Storage("memory")
    try:
        init_db()
        logger.info("✓ Database initialized successfully")
        return Storage("sql")
    except StoreUnavailableError as e:
        logger.warning(f"✗ {e.message}; falling back to in-process stores")
        return Storage("memory")


# ============================================================================
# LIFESPAN MANAGEMENT
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    # === STARTUP ===
    logger.info(f"Starting {settings.app_name} v{settings.version} ({settings.environment})")

    app.state.storage = select_storage()
    app.state.leave_notifier = LeaveNotifier()
    app.state.leave_notifier.subscribe(log_leave_change)

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Gracefully shutting down...")


# ============================================================================
# FASTAPI INSTANCE
# ============================================================================
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="HR back office - leave approvals and salary slips",
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# ============================================================================
# MIDDLEWARE STACK
# Add in REVERSE order (last added runs first)
# ============================================================================
app.add_middleware(CorrelationIdMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[settings.request_id_header],
)

# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or incomplete request bodies are a 400, checked before any mutation."""
    errors = []
    for error in exc.errors():
        # Clean up field name (loc is usually ('body', 'field_name'))
        field = error["loc"][-1] if len(error["loc"]) > 0 else "unknown"
        errors.append(ErrorItem(field=str(field), msg=error["msg"], code="VALIDATION_ERROR"))

    logger.warning(f"Validation Error: {[e.model_dump(exclude_none=True) for e in errors]}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(errors=errors).to_dict()
    )


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Handle domain-specific application exceptions."""
    if exc.status_code >= 500:
        logger.error(f"AppException: {exc.message}", extra={"code": exc.error_code, "path": request.url.path})
    else:
        logger.warning(f"AppException: {exc.message}", extra={"code": exc.error_code})
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse.fail(exc.message, exc.error_code).to_dict()
    )


@app.exception_handler(StarletteHTTPException)
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: Union[HTTPException, StarletteHTTPException]):
    """Handle standard HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse.fail(exc.detail if isinstance(exc.detail, str) else "Request failed").to_dict()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Fallback handler for unhandled server errors (store failures included)."""
    logger.exception("Unhandled server error", extra={"path": request.url.path})
    # Runs outside CorrelationIdMiddleware, which never sees this response
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse.fail("An unexpected server error occurred.", "INTERNAL_ERROR").to_dict(),
        headers={settings.request_id_header: request_id} if request_id else None
    )


# ============================================================================
# ROUTER INCLUSION
# ============================================================================
app.include_router(api_router, prefix=settings.api_prefix)

# ============================================================================
# OPERATIONAL ENDPOINTS (at root level)
# ============================================================================
@app.get("/", tags=["Health"])
def root():
    """API root endpoint."""
    return {
        "message": "HR Back Office API",
        "version": settings.version,
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
def health_check():
    """Liveness probe for load balancers and orchestrators."""
    return {
        "status": "up",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
        "environment": settings.environment,
    }


@app.get("/readiness", tags=["Health"])
def readiness_check(storage: Storage = Depends(get_storage), db: Session = Depends(get_db)):
    """Readiness probe. Degraded mode is reported, not treated as a failure."""
    if storage.degraded:
        return {
            "status": "degraded",
            "components": {"database": "unavailable", "storage": "memory"},
        }
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        raise HTTPException(status_code=503, detail="Service not ready")
    return {
        "status": "ready",
        "components": {"database": "connected", "storage": "sql"},
    }
