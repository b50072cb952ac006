"""
Access logging for the Book Tracker API.

One log line per request on the ``booktracker.access`` logger, tagged with
the request id that is echoed back in ``X-Request-ID``. Bearer tokens and
passwords never reach the log.
"""

import json
import logging
import time
import uuid
from contextvars import ContextVar
from typing import Any, Callable, Iterable, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

# Keys holding credentials in register/login bodies and token responses
SECRET_FIELDS = frozenset({"password", "accessToken"})

QUIET_PATHS = frozenset({"/health", "/favicon.ico"})

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

logger = logging.getLogger("booktracker.access")


def get_request_id() -> str:
    """Id of the request being handled, or "" outside a request."""
    return request_id_var.get()


def redact_secrets(data: Any) -> Any:
    """Replace credential values in a decoded JSON body."""
    if isinstance(data, dict):
        return {
            key: "[REDACTED]" if key in SECRET_FIELDS else redact_secrets(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_secrets(item) for item in data]
    return data


def describe_authorization(value: Optional[str]) -> Optional[str]:
    """Keep the auth scheme, drop the credential."""
    if not value:
        return None
    scheme = value.split(" ", 1)[0]
    return f"{scheme} [REDACTED]"


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record, for log shippers outside development."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        for attr in ("user_id", "status_code", "duration_ms", "body"):
            if hasattr(record, attr):
                entry[attr] = getattr(record, attr)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Assigns a request id and logs method, path, status and timing.

    With ``log_bodies`` set, JSON request bodies are logged after
    credentials are redacted. Non-JSON bodies are never logged.
    """

    def __init__(
        self,
        app: FastAPI,
        log_bodies: bool = False,
        quiet_paths: Iterable[str] = QUIET_PATHS,
    ):
        super().__init__(app)
        self.log_bodies = log_bodies
        self.quiet_paths = frozenset(quiet_paths)

    async def _body_for_log(self, request: Request) -> Optional[Any]:
        raw = await request.body()
        if not raw:
            return None
        try:
            return redact_secrets(json.loads(raw))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return f"<{len(raw)} bytes, not JSON>"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request_id_var.set(request_id)

        if request.url.path in self.quiet_paths:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        extra = {}
        if self.log_bodies and request.method in ("POST", "PUT"):
            extra["body"] = await self._body_for_log(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        response.headers[REQUEST_ID_HEADER] = request_id

        user = getattr(request.state, "user", None)
        if user is not None:
            extra["user_id"] = user.user_id
        extra["status_code"] = response.status_code
        extra["duration_ms"] = duration_ms

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code in (401, 403):
            level = logging.WARNING
        else:
            level = logging.INFO

        auth = describe_authorization(request.headers.get("authorization"))
        logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({duration_ms}ms){' auth=' + auth if auth else ''}",
            extra=extra,
        )

        return response


def setup_logging(app: FastAPI, log_bodies: bool = False, structured: bool = True) -> None:
    """
    Install the access-log middleware.

    Args:
        app: FastAPI application instance.
        log_bodies: Also log redacted JSON request bodies.
        structured: Emit ``booktracker`` log records as JSON.
    """
    if structured:
        root = logging.getLogger("booktracker")
        if not any(isinstance(h.formatter, JsonLogFormatter) for h in root.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(JsonLogFormatter())
            root.addHandler(handler)
        root.setLevel(logging.INFO)

    app.add_middleware(RequestLoggingMiddleware, log_bodies=log_bodies)
