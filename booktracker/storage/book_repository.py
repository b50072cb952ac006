"""
Book Repository for Book Tracker

Per-user storage of book records using SQLAlchemy:
- SQLite for development/testing, any SQLAlchemy URL in production
- Every query is scoped to the owning user
- One record per (user, ISBN), enforced by a unique constraint

Design Decisions:
1. Owner scoping in the WHERE clause: a book that exists but belongs to
   someone else is indistinguishable from one that does not exist.
2. Pre-check plus constraint: the pre-check finds the conflicting record to
   report it; the constraint catches concurrent inserts the pre-check missed.
3. Updates merge: only the fields passed in are changed.
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from loguru import logger
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ..errors import DuplicateIsbnError, InvalidInputError, NotFoundError
from .models import BookModel, utcnow


REQUIRED_FIELDS = ("title", "author", "isbn")
OPTIONAL_FIELDS = ("date_purchased", "publisher", "notes")
EDITABLE_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS


@dataclass
class StoredBook:
    """Data class for book data transfer."""

    id: str
    user_id: str
    title: str
    author: str
    isbn: str

    date_purchased: Optional[date] = None
    publisher: Optional[str] = None
    notes: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, model: BookModel) -> "StoredBook":
        """Create from SQLAlchemy model."""
        return cls(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            author=model.author,
            isbn=model.isbn,
            date_purchased=model.date_purchased,
            publisher=model.publisher,
            notes=model.notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _clean_required(fields: dict[str, Any], name: str) -> str:
    value = fields.get(name)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError("Title, author, and ISBN are required.")
    return value.strip()


def _clean_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    raise InvalidInputError("date_purchased must be an ISO date (YYYY-MM-DD).")


def _clean_optional(fields: dict[str, Any], name: str) -> Any:
    value = fields.get(name)
    if name == "date_purchased":
        return _clean_date(value)
    return value


class BookRepository:
    """
    Repository for a user's books.

    Usage:
        repo = BookRepository(session_factory)

        book = repo.add(user_id, {
            "title": "Dune",
            "author": "Frank Herbert",
            "isbn": "9780441172719",
        })

        repo.search(user_id, "herbert")
    """

    def __init__(self, session_factory: sessionmaker):
        self.SessionLocal = session_factory

    def get_session(self) -> Session:
        """Get database session."""
        return self.SessionLocal()

    def _owned(self, session: Session, user_id: str, book_id: str) -> Optional[BookModel]:
        return session.query(BookModel).filter(
            BookModel.id == book_id,
            BookModel.user_id == user_id,
        ).first()

    def _find_by_isbn(self, session: Session, user_id: str, isbn: str) -> Optional[BookModel]:
        return session.query(BookModel).filter(
            BookModel.user_id == user_id,
            BookModel.isbn == isbn,
        ).first()

    def list_books(self, user_id: str) -> list[StoredBook]:
        """
        List a user's books, newest first.

        Args:
            user_id: Owner

        Returns:
            List of StoredBooks ordered by created_at descending
        """
        with self.get_session() as session:
            books = session.query(BookModel).filter(
                BookModel.user_id == user_id,
            ).order_by(BookModel.created_at.desc()).all()

            return [StoredBook.from_model(b) for b in books]

    def add(self, user_id: str, fields: dict[str, Any]) -> StoredBook:
        """
        Add a book for a user.

        Args:
            user_id: Owner
            fields: title, author, isbn and optionally date_purchased,
                publisher, notes. Other keys are ignored.

        Returns:
            Created StoredBook

        Raises:
            InvalidInputError: A required field is missing or blank.
            DuplicateIsbnError: The user already owns this ISBN.
        """
        values = {name: _clean_required(fields, name) for name in REQUIRED_FIELDS}
        for name in OPTIONAL_FIELDS:
            values[name] = _clean_optional(fields, name)

        with self.get_session() as session:
            existing = self._find_by_isbn(session, user_id, values["isbn"])
            if existing is not None:
                logger.info(f"Duplicate ISBN {values['isbn']} for user {user_id}")
                raise DuplicateIsbnError(values["isbn"], StoredBook.from_model(existing))

            now = utcnow()
            book = BookModel(
                id=str(uuid.uuid4()),
                user_id=user_id,
                created_at=now,
                updated_at=now,
                **values,
            )
            session.add(book)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise self._duplicate_from_race(user_id, values["isbn"]) from e

            logger.info(f"Added book {book.id} for user {user_id}")
            return StoredBook.from_model(book)

    def _duplicate_from_race(self, user_id: str, isbn: str) -> DuplicateIsbnError:
        """Build the conflict error after the unique constraint fired."""
        with self.get_session() as session:
            existing = self._find_by_isbn(session, user_id, isbn)
            return DuplicateIsbnError(
                isbn,
                StoredBook.from_model(existing) if existing else None,
            )

    def update(self, user_id: str, book_id: str, fields: dict[str, Any]) -> StoredBook:
        """
        Update fields of a user's book.

        Only keys present in ``fields`` are changed. None clears an optional
        field. id, owner and timestamps cannot be set this way.

        Raises:
            NotFoundError: No such book for this user.
            InvalidInputError: A required field would become blank.
            DuplicateIsbnError: New ISBN already owned by the user.
        """
        updates = {}
        for name in EDITABLE_FIELDS:
            if name not in fields:
                continue
            if name in REQUIRED_FIELDS:
                updates[name] = _clean_required(fields, name)
            else:
                updates[name] = _clean_optional(fields, name)

        with self.get_session() as session:
            book = self._owned(session, user_id, book_id)
            if book is None:
                raise NotFoundError()

            new_isbn = updates.get("isbn")
            if new_isbn is not None and new_isbn != book.isbn:
                existing = self._find_by_isbn(session, user_id, new_isbn)
                if existing is not None:
                    raise DuplicateIsbnError(new_isbn, StoredBook.from_model(existing))

            for key, value in updates.items():
                setattr(book, key, value)
            book.updated_at = utcnow()

            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise self._duplicate_from_race(user_id, new_isbn) from e

            session.refresh(book)
            return StoredBook.from_model(book)

    def remove(self, user_id: str, book_id: str) -> None:
        """
        Delete a user's book.

        Raises:
            NotFoundError: No such book for this user.
        """
        with self.get_session() as session:
            book = self._owned(session, user_id, book_id)
            if book is None:
                raise NotFoundError()

            session.delete(book)
            session.commit()
            logger.info(f"Deleted book {book_id} for user {user_id}")

    def search(self, user_id: str, query: Optional[str]) -> list[StoredBook]:
        """
        Search a user's books by title, author or ISBN.

        Matching is a Unicode case-insensitive substring match; the query is taken
        literally.

        Raises:
            InvalidInputError: Query is missing or blank.
        """
        if not isinstance(query, str) or not query.strip():
            raise InvalidInputError("Search query is required.")

        pattern = f"%{_escape_like(query)}%"
        columns = (BookModel.title, BookModel.author, BookModel.isbn)

        with self.get_session() as session:
            if session.get_bind().dialect.name == "sqlite":
                folded = f"%{_escape_like(query.casefold())}%"
                matches = [func.casefold(c).like(folded, escape="\\") for c in columns]
            else:
                matches = [c.ilike(pattern, escape="\\") for c in columns]

            books = session.query(BookModel).filter(
                BookModel.user_id == user_id,
                or_(*matches),
            ).all()

            return [StoredBook.from_model(b) for b in books]
