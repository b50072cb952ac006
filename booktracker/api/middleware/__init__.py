"""
API middleware components.

Provides cross-cutting concerns for the API:
- Error handling
- CORS configuration
- Access logging
"""

from .error_handler import (
    setup_exception_handlers,
    create_error_response,
    http_error_response,
)

from .cors import (
    CORSConfig,
    get_cors_config,
    setup_cors,
)

from .logging import (
    JsonLogFormatter,
    RequestLoggingMiddleware,
    setup_logging,
    get_request_id,
    redact_secrets,
)


__all__ = [
    # Error handling
    "setup_exception_handlers",
    "create_error_response",
    "http_error_response",
    # CORS
    "CORSConfig",
    "get_cors_config",
    "setup_cors",
    # Logging
    "JsonLogFormatter",
    "RequestLoggingMiddleware",
    "setup_logging",
    "get_request_id",
    "redact_secrets",
]
