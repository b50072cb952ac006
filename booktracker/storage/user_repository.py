"""
Credential store.

Persists user identities (email + bcrypt hash) and checks login
credentials. Email uniqueness is enforced by the database; a duplicate
registration fails instead of overwriting.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ..errors import DuplicateEmailError, InvalidCredentialsError, InvalidInputError
from ..security import PasswordHasher
from .models import User


MIN_PASSWORD_LENGTH = 6


@dataclass
class StoredUser:
    """User data without the password hash."""

    id: str
    email: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, model: User) -> "StoredUser":
        return cls(id=model.id, email=model.email, created_at=model.created_at)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    """
    Registration and credential checks.

    Usage:
        repo = UserRepository(session_factory, PasswordHasher())
        user = repo.register("reader@example.com", "hunter22")
        repo.verify_credentials("Reader@Example.com ", "hunter22")
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        password_hasher: PasswordHasher,
        min_password_length: int = MIN_PASSWORD_LENGTH,
    ):
        self.SessionLocal = session_factory
        self.password_hasher = password_hasher
        self.min_password_length = min_password_length

    def get_session(self) -> Session:
        return self.SessionLocal()

    def _validate(self, email, password) -> str:
        if not isinstance(email, str) or not isinstance(password, str):
            raise InvalidInputError(self._invalid_message())

        email = normalize_email(email)
        if not email or len(password) < self.min_password_length:
            raise InvalidInputError(self._invalid_message())

        return email

    def _invalid_message(self) -> str:
        return (
            "Email and password are required; password must be at least "
            f"{self.min_password_length} characters."
        )

    def register(self, email, password) -> StoredUser:
        """
        Create a user.

        Raises:
            InvalidInputError: Missing fields or short password.
            DuplicateEmailError: Normalized email already registered.
        """
        email = self._validate(email, password)

        with self.get_session() as session:
            user = User(
                id=str(uuid.uuid4()),
                email=email,
                hashed_password=self.password_hasher.hash(password),
            )
            session.add(user)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                logger.info("Registration rejected, email already exists")
                raise DuplicateEmailError() from e

            logger.info(f"Registered user {user.id}")
            return StoredUser.from_model(user)

    def verify_credentials(self, email, password) -> StoredUser:
        """
        Return the user whose email and password match.

        Raises:
            InvalidCredentialsError: For any mismatch, including an unknown
                email. The caller cannot tell the two apart.
        """
        if not isinstance(email, str) or not isinstance(password, str):
            raise InvalidCredentialsError()

        with self.get_session() as session:
            user = session.query(User).filter(
                User.email == normalize_email(email),
            ).first()

            if user is None:
                self.password_hasher.burn(password)
                raise InvalidCredentialsError()

            if not self.password_hasher.verify(password, user.hashed_password):
                raise InvalidCredentialsError()

            return StoredUser.from_model(user)
