import os
import logging
from pydantic import BaseModel, Field
from typing import List
from dotenv import load_dotenv

load_dotenv()

class Config(BaseModel):
    app_name: str = "HR Back Office"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    version: str = "1.0.0"

    # Storage: "sql" falls back to in-process stores when the database is unreachable
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./backoffice.db")
    storage_backend: str = os.getenv("STORAGE_BACKEND", "sql").lower()

    # Leave workflow
    monthly_leave_quota: int = int(os.getenv("MONTHLY_LEAVE_QUOTA", "2"))

    # Salary slip documents
    documents_dir: str = os.getenv("DOCUMENTS_DIR", "uploads")
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "Rs.")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    request_id_header: str = "X-Request-ID"

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173,"
                "http://127.0.0.1:3000,http://127.0.0.1:5173",
            ).split(",")
            if o.strip()
        ]
    )

settings = Config()

_logger = logging.getLogger(__name__)
if settings.storage_backend not in ("sql", "memory"):
    raise RuntimeError(
        f"FATAL: STORAGE_BACKEND must be 'sql' or 'memory', got '{settings.storage_backend}'."
    )
if settings.monthly_leave_quota < 0:
    raise RuntimeError("FATAL: MONTHLY_LEAVE_QUOTA must not be negative.")
if settings.environment != "development" and settings.storage_backend == "memory":
    _logger.warning("⚠ In-process storage selected; data will not survive a restart.")
