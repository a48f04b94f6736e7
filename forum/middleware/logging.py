"""
Structured access logging

One JSON line per request, tagged with a request id that is also echoed in
the ``X-Request-ID`` response header. Besides method, path, status and
timing, each line carries the client address, the signed-in user (when the
request had one) and whether the visitor has given cookie consent.
"""

import json
import logging
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Record attributes copied into the JSON line when present
EXTRA_FIELDS = ("method", "path", "status_code", "duration_ms", "client_ip", "user_id", "has_consent", "errors")

# Paths left out of the access log
QUIET_PATHS = {"/health"}


def get_request_id() -> str:
    return request_id_var.get()


class RequestIdFilter(logging.Filter):
    """Stamps every record with the id of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True


class StructuredFormatter(logging.Formatter):
    """Render records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", ""),
        }
        entry.update({field: getattr(record, field) for field in EXTRA_FIELDS if hasattr(record, field)})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def client_address(request: Request) -> str:
    """First hop of ``X-Forwarded-For``/``X-Real-IP``, else the peer address."""
    forwarded = request.headers.get("X-Forwarded-For") or request.headers.get("X-Real-IP")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is None:
        return "unknown"
    return request.client.host


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Outermost middleware: assigns the request id and writes the access log."""

    def __init__(self, app, logger_name: str = "forum.access"):
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception:
                self._access_log(request, 500, started)
                raise
            response.headers[REQUEST_ID_HEADER] = request_id
            self._access_log(request, response.status_code, started)
            return response
        finally:
            request_id_var.reset(token)

    def _access_log(self, request: Request, status_code: int, started: float) -> None:
        if request.url.path in QUIET_PATHS:
            return

        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        fields = {
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": elapsed_ms,
            "client_ip": client_address(request),
        }

        # Filled in further down the pipeline, absent on early failures
        identity = getattr(request.state, "identity", None)
        if identity is not None:
            fields["user_id"] = identity.user_id
        consent = getattr(request.state, "consent", None)
        if consent is not None:
            fields["has_consent"] = consent.has_consent

        self.logger.log(
            _level_for(status_code),
            f"{request.method} {request.url.path} {status_code} {elapsed_ms}ms",
            extra=fields,
        )


def setup_structured_logging(log_level: str = "INFO", json_format: bool = True) -> None:
    """
    Install a single stream handler on the root logger.

    Args:
        log_level: Level name for the root and ``forum`` loggers
        json_format: JSON lines when true, a readable text format otherwise
    """
    level = logging.getLevelName(log_level.upper())

    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s [%(request_id)s] %(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    logging.getLogger("forum").setLevel(level)
    for noisy in ("uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
