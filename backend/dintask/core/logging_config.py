"""
DinTask - Centralized Logging Configuration
Plain text in development, JSON structured records in production
"""

import logging
import sys
import json
import traceback
import uuid
from datetime import datetime
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Dict
from contextvars import ContextVar

from dintask.core.config import settings


# Context variables for request tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')
user_id_var: ContextVar[str] = ContextVar('user_id', default='')
workspace_id_var: ContextVar[str] = ContextVar('workspace_id', default='')

_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'exc_info', 'exc_text',
    'thread', 'threadName', 'message', 'taskName',
}


def get_request_id() -> str:
    return request_id_var.get() or ''


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def get_user_id() -> str:
    return user_id_var.get() or ''


def set_user_id(user_id: str) -> None:
    user_id_var.set(user_id)


def get_workspace_id() -> str:
    return workspace_id_var.get() or ''


def set_workspace_id(workspace_id: str) -> None:
    workspace_id_var.set(workspace_id)


def generate_request_id() -> str:
    """Short id echoed back in the X-Request-ID header"""
    return uuid.uuid4().hex[:8]


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log shippers"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in (
            ("request_id", get_request_id()),
            ("user_id", get_user_id()),
            ("workspace_id", get_workspace_id()),
        ):
            if value:
                log_data[key] = value

        if record.exc_info and record.exc_info[0]:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        # extra={...} fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ContextualFormatter(logging.Formatter):
    """Readable formatter that fills in request/user/workspace ids"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = get_request_id() or '-'
        record.user_id = get_user_id() or '-'
        record.workspace_id = get_workspace_id() or '-'
        return super().format(record)


class DinTaskLogger(logging.Logger):
    """Logger with helpers for the events the API emits most"""

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, **kwargs) -> None:
        self.info(
            f"HTTP {method} {path} - {status_code} ({duration_ms:.2f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": duration_ms,
                **kwargs
            }
        )

    def log_auth_event(self, event: str, success: bool, user_email: str = None,
                       reason: str = None, **kwargs) -> None:
        level = logging.INFO if success else logging.WARNING
        self.log(
            level,
            f"Auth {event}: {'success' if success else 'failed'}" +
            (f" - {user_email}" if user_email else "") +
            (f" - {reason}" if reason else ""),
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_tenant_event(self, event: str, admin_id: str, **kwargs) -> None:
        """Workspace-level changes: plan activation, member approval, expiry"""
        self.info(
            f"Workspace {admin_id}: {event}",
            extra={
                "event_type": "tenant",
                "tenant_event": event,
                "admin_id": admin_id,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: str = None,
                               **kwargs) -> None:
        self.error(
            f"Error in {context}: {type(error).__name__}: {error}",
            exc_info=True,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_message": str(error),
                "error_context": context,
                **kwargs
            }
        )

    def log_performance(self, operation: str, duration_ms: float,
                        threshold_ms: float = 1000, **kwargs) -> None:
        """Warn when an operation crosses threshold_ms"""
        exceeded = duration_ms > threshold_ms
        self.log(
            logging.WARNING if exceeded else logging.DEBUG,
            f"Performance: {operation} took {duration_ms:.2f}ms" +
            (f" (threshold: {threshold_ms}ms)" if exceeded else ""),
            extra={
                "event_type": "performance",
                "operation": operation,
                "duration_ms": duration_ms,
                "threshold_ms": threshold_ms,
                "exceeded_threshold": exceeded,
                **kwargs
            }
        )


def _file_handler(formatter: logging.Formatter, backup_count: int) -> RotatingFileHandler:
    log_file = Path(settings.LOG_FILE)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=10485760, backupCount=backup_count)  # 10MB
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> DinTaskLogger:
    """Setup logging configuration based on environment"""
    logging.setLoggerClass(DinTaskLogger)

    logger = logging.getLogger("dintask")
    logger.__class__ = DinTaskLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.handlers.clear()

    is_production = settings.ENVIRONMENT == "production"

    if is_production:
        console_formatter = file_formatter = JSONFormatter()
        backup_count = 10
    else:
        console_formatter = ContextualFormatter("%(levelname)-8s | %(message)s")
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | "
            "[%(request_id)s] [%(user_id)s] [%(workspace_id)s] | "
            "%(funcName)s:%(lineno)d | %(message)s"
        )
        backup_count = 5

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if settings.LOG_FILE:
        logger.addHandler(_file_handler(file_formatter, backup_count))

    # Suppress noisy loggers
    for noisy in ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine", "celery.redirected"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug(
        "Logging initialized",
        extra={
            "environment": settings.ENVIRONMENT,
            "log_level": settings.LOG_LEVEL,
            "json_logging": is_production
        }
    )
    return logger


logger: DinTaskLogger = setup_logging()


__all__ = [
    'logger',
    'setup_logging',
    'get_request_id',
    'set_request_id',
    'get_user_id',
    'set_user_id',
    'get_workspace_id',
    'set_workspace_id',
    'generate_request_id',
    'DinTaskLogger',
]
