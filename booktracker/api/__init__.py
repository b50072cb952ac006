"""
Book Tracker - FastAPI Backend.

JSON API for registering users and managing their book inventories.
"""

from .main import app, create_app, main
from .dependencies import (
    Settings,
    get_settings,
    get_current_user,
    get_service_container,
    ServiceContainer,
    AuthenticatedUser,
)
from .schemas import (
    Credentials,
    TokenResponse,
    BookCreate,
    BookUpdate,
    BookResponse,
    ErrorResponse,
    ConflictResponse,
    HealthResponse,
)

__all__ = [
    # Application
    "app",
    "create_app",
    "main",
    # Dependencies
    "Settings",
    "get_settings",
    "get_current_user",
    "get_service_container",
    "ServiceContainer",
    "AuthenticatedUser",
    # Schemas
    "Credentials",
    "TokenResponse",
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "ErrorResponse",
    "ConflictResponse",
    "HealthResponse",
]
