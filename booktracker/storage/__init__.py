"""
Storage Module for Book Tracker

SQLAlchemy persistence for users and their books:
- Credential store (email + bcrypt hash)
- Per-user book repository with (user, ISBN) uniqueness
"""

from booktracker.storage.models import Base, User, BookModel
from booktracker.storage.database import (
    create_database_engine,
    create_session_factory,
    create_tables,
)
from booktracker.storage.user_repository import (
    UserRepository,
    StoredUser,
)
from booktracker.storage.book_repository import (
    BookRepository,
    StoredBook,
)

__all__ = [
    # Models
    "Base",
    "User",
    "BookModel",
    # Database
    "create_database_engine",
    "create_session_factory",
    "create_tables",
    # Repositories
    "UserRepository",
    "StoredUser",
    "BookRepository",
    "StoredBook",
]
