import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Union

from pythonjsonlogger import jsonlogger

# Correlation id of the request being served, set by CorrelationIdMiddleware
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Libraries whose INFO chatter drowns the workflow events
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "reportlab", "multipart")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per line: timestamp, level, logger, message, request_id, extras."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        request_id = request_id_var.get()
        if request_id:
            log_record["request_id"] = request_id

        # Time of the event, not of formatting
        log_record.setdefault(
            "timestamp",
            datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        )
        log_record["level"] = record.levelname
        log_record["logger"] = log_record.pop("name", record.name)


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)

    # Repeated imports (tests, reloaders) keep the single JSON handler
    if not any(isinstance(h.formatter, CustomJsonFormatter) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(CustomJsonFormatter("%(timestamp) %(level) %(name) %(message)"))
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
