"""
Structured Logging with Correlation IDs
JSON log lines carrying the request, the caller and the assessment being worked on
"""

import json
import logging
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Request
from pydantic import BaseModel, Field

correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

CORRELATION_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# ============================================================================
# LOG CATEGORIES
# ============================================================================


class LogCategory(str, Enum):
    """Log categories for filtering and analysis"""

    REQUEST = "request"
    DATABASE = "database"
    AUTHENTICATION = "authentication"
    ERROR = "error"
    ASSESSMENT = "assessment"
    GRADING = "grading"
    ANALYTICS = "analytics"
    AI = "ai"
    CODE_EXECUTION = "code_execution"
    SYSTEM = "system"


# ============================================================================
# LOG ENTRY
# ============================================================================


class LogEntry(BaseModel):
    """One JSON log line"""

    timestamp: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
    level: str
    category: str
    message: str
    logger: str
    correlation_id: Optional[str] = None
    user_id: Optional[str] = None

    request_id: Optional[str] = None
    request_method: Optional[str] = None
    request_path: Optional[str] = None
    response_status: Optional[int] = None
    response_time_ms: Optional[float] = None

    assessment_id: Optional[str] = None
    session_id: Optional[str] = None

    error_type: Optional[str] = None
    error_message: Optional[str] = None
    error_stack: Optional[str] = None

    extra: Dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# LOGGER
# ============================================================================


class StructuredLogger:
    """Thin wrapper over a stdlib logger that emits LogEntry JSON"""

    def __init__(self, name: str, level: str = "INFO"):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        self.logger.handlers = []
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        self.logger.addHandler(handler)
        self.logger.propagate = False

    def _emit(self, level: int, category: str, message: str, exception: Optional[Exception] = None, **fields):
        if not self.logger.isEnabledFor(level):
            return
        if exception is not None:
            fields["error_type"] = type(exception).__name__
            fields["error_message"] = str(exception)
            fields["error_stack"] = traceback.format_exc()
        if fields.get("user_id") is not None:
            fields["user_id"] = str(fields["user_id"])

        entry = LogEntry(
            level=logging.getLevelName(level),
            category=category,
            message=message,
            logger=self.name,
            correlation_id=correlation_id_var.get(),
            **fields,
        )
        self.logger.log(level, entry.model_dump_json(exclude_none=True))

    def debug(self, message: str, category: str = LogCategory.SYSTEM, **fields):
        self._emit(logging.DEBUG, category, message, **fields)

    def info(self, message: str, category: str = LogCategory.SYSTEM, **fields):
        self._emit(logging.INFO, category, message, **fields)

    def warning(self, message: str, category: str = LogCategory.SYSTEM, **fields):
        self._emit(logging.WARNING, category, message, **fields)

    def error(self, message: str, category: str = LogCategory.ERROR, exception: Optional[Exception] = None, **fields):
        self._emit(logging.ERROR, category, message, exception=exception, **fields)

    def critical(
        self, message: str, category: str = LogCategory.ERROR, exception: Optional[Exception] = None, **fields
    ):
        self._emit(logging.CRITICAL, category, message, exception=exception, **fields)


class StructuredFormatter(logging.Formatter):
    """JSON formatter; records that are already JSON pass through"""

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, str) and record.msg.startswith("{"):
            return record.msg

        entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": correlation_id_var.get(),
        }
        if record.exc_info:
            entry["error_stack"] = self.formatException(record.exc_info)

        return json.dumps(entry)


_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str, level: str = "INFO") -> StructuredLogger:
    """Get or create a structured logger"""
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name, level)
    return _loggers[name]


# ============================================================================
# CORRELATION IDS AND REQUEST LOGGING
# ============================================================================


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """Adopt the caller's correlation ID or mint a new one"""
    correlation_id = correlation_id or f"corr_{uuid.uuid4().hex[:16]}"
    correlation_id_var.set(correlation_id)
    return correlation_id


async def log_request_middleware(request: Request, call_next):
    """Tag the request with correlation and request IDs and write one access line when it completes"""
    correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
    request.state.correlation_id = correlation_id
    request.state.request_id = f"req_{uuid.uuid4().hex[:8]}"

    logger = get_logger("api.request")
    start_time = time.time()

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            f"Request failed: {e}",
            exception=e,
            request_id=request.state.request_id,
            request_method=request.method,
            request_path=request.url.path,
            response_time_ms=round((time.time() - start_time) * 1000, 2),
        )
        raise

    response.headers[CORRELATION_HEADER] = correlation_id
    response.headers[REQUEST_ID_HEADER] = request.state.request_id

    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code}",
        category=LogCategory.REQUEST,
        request_id=request.state.request_id,
        request_method=request.method,
        request_path=request.url.path,
        response_status=response.status_code,
        response_time_ms=round((time.time() - start_time) * 1000, 2),
        user_id=getattr(request.state, "user_id", None),
    )
    return response


# ============================================================================
# DOMAIN EVENTS
# ============================================================================


def log_authentication_event(
    event_type: str,
    user_id: Optional[str] = None,
    success: bool = True,
    details: Optional[Dict] = None,
):
    """Log the outcome of resolving a caller"""
    logger = get_logger("auth")
    extra = {"success": success, **(details or {})}

    if success:
        logger.debug(f"Authenticated: {event_type}", category=LogCategory.AUTHENTICATION, user_id=user_id, extra=extra)
    else:
        logger.warning(
            f"Authentication failed: {event_type}", category=LogCategory.AUTHENTICATION, user_id=user_id, extra=extra
        )


def log_assessment_event(
    action: str,
    assessment_id: str,
    user_id: Optional[str] = None,
    session_id: Optional[str] = None,
    category: str = LogCategory.ASSESSMENT,
    **details: Any,
):
    """Record a state change of an assessment or one of its sessions"""
    get_logger("assessments").info(
        action,
        category=category,
        assessment_id=assessment_id,
        session_id=session_id,
        user_id=user_id,
        extra=details,
    )


def configure_logging(level: str = "INFO", json_output: bool = True):
    """Set the root level and, optionally, JSON formatting on root handlers"""
    logging.getLogger().setLevel(getattr(logging, level.upper()))

    if json_output:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(StructuredFormatter())

    get_logger("system").info("Logging configured", extra={"level": level, "json_output": json_output})
