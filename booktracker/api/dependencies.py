"""
Dependency injection for FastAPI routes.

Provides injectable dependencies for:
- Configuration
- Database engine and repositories
- Password hashing and token services
- Authentication (bearer token guard)
"""

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, Request
from loguru import logger
from sqlalchemy.engine import Engine

from ..errors import ForbiddenError, UnauthenticatedError
from ..security import PasswordHasher, TokenError, TokenService


DEV_JWT_SECRET = "dev-only-change-me"


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class Settings:
    """Application settings loaded from environment."""

    # Database
    database_url: str = "sqlite:///./booktracker.db"
    database_echo: bool = False

    # Auth
    jwt_secret: str = DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7
    bcrypt_rounds: int = 10
    min_password_length: int = 6

    # Front-end
    static_dir: Optional[str] = None

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Environment
    environment: str = "development"
    debug: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            database_echo=os.getenv("DATABASE_ECHO", "false").lower() == "true",
            jwt_secret=os.getenv("JWT_SECRET", cls.jwt_secret),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", cls.jwt_algorithm),
            access_token_expire_days=int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", cls.access_token_expire_days)),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", cls.bcrypt_rounds)),
            min_password_length=int(os.getenv("MIN_PASSWORD_LENGTH", cls.min_password_length)),
            static_dir=os.getenv("STATIC_DIR") or None,
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", cls.port)),
            environment=os.getenv("BOOKTRACKER_ENV", cls.environment),
            debug=os.getenv("DEBUG", "true").lower() == "true",
        )

    def check(self) -> None:
        """Refuse settings that are unsafe outside development."""
        if self.jwt_secret == DEV_JWT_SECRET:
            if self.environment == "production":
                raise RuntimeError("JWT_SECRET must be set in production")
            logger.warning("JWT_SECRET not set, using development secret")


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings.from_env()


# =============================================================================
# Service Container
# =============================================================================

class ServiceContainer:
    """
    Container for lazy-loaded service instances.

    The engine is created, and tables are created, on first repository
    access, so building an app does not touch the database.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._engine: Optional[Engine] = None
        self._session_factory = None
        self._password_hasher = None
        self._token_service = None
        self._user_repository = None
        self._book_repository = None

    @property
    def engine(self) -> Engine:
        """Get database engine, creating tables on first use."""
        if self._engine is None:
            from ..storage.database import (
                create_database_engine,
                create_session_factory,
                create_tables,
            )
            self._engine = create_database_engine(
                self.settings.database_url,
                echo=self.settings.database_echo,
            )
            create_tables(self._engine)
            self._session_factory = create_session_factory(self._engine)
            logger.info(f"Database initialized: {self.settings.database_url[:50]}")
        return self._engine

    @property
    def session_factory(self):
        _ = self.engine
        return self._session_factory

    @property
    def password_hasher(self) -> PasswordHasher:
        if self._password_hasher is None:
            self._password_hasher = PasswordHasher(rounds=self.settings.bcrypt_rounds)
        return self._password_hasher

    @property
    def token_service(self) -> TokenService:
        if self._token_service is None:
            self._token_service = TokenService(
                secret_key=self.settings.jwt_secret,
                algorithm=self.settings.jwt_algorithm,
                expires_delta=timedelta(days=self.settings.access_token_expire_days),
            )
        return self._token_service

    @property
    def user_repository(self):
        """Get credential store instance."""
        if self._user_repository is None:
            from ..storage.user_repository import UserRepository
            self._user_repository = UserRepository(
                self.session_factory,
                self.password_hasher,
                min_password_length=self.settings.min_password_length,
            )
        return self._user_repository

    @property
    def book_repository(self):
        """Get book repository instance."""
        if self._book_repository is None:
            from ..storage.book_repository import BookRepository
            self._book_repository = BookRepository(self.session_factory)
        return self._book_repository

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()


def init_services(settings: Settings) -> ServiceContainer:
    """Initialize service container."""
    return ServiceContainer(settings)


def get_service_container(request: Request) -> ServiceContainer:
    """Get the service container attached to the running app."""
    return request.app.state.services


# =============================================================================
# Individual Service Dependencies
# =============================================================================

def get_user_repository(
    container: ServiceContainer = Depends(get_service_container),
):
    """Dependency for credential store."""
    return container.user_repository


def get_book_repository(
    container: ServiceContainer = Depends(get_service_container),
):
    """Dependency for book repository."""
    return container.book_repository


def get_token_service(
    container: ServiceContainer = Depends(get_service_container),
) -> TokenService:
    """Dependency for token service."""
    return container.token_service


# =============================================================================
# Authentication Dependencies
# =============================================================================

@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity taken from a verified access token."""

    user_id: str
    email: str


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an 'Authorization: Bearer <token>' header."""
    if not authorization:
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    token_service: TokenService = Depends(get_token_service),
) -> AuthenticatedUser:
    """
    Guard for protected endpoints.

    Raises:
        UnauthenticatedError: No bearer token in the request.
        ForbiddenError: Token did not verify (expired and tampered
            tokens are reported the same way).
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise UnauthenticatedError()

    try:
        claims = token_service.verify(token)
    except TokenError as e:
        logger.info(f"Rejected token on {request.url.path}: {type(e).__name__}")
        raise ForbiddenError() from e

    user = AuthenticatedUser(user_id=claims.user_id, email=claims.email)
    request.state.user = user
    return user
