"""
Error types for Book Tracker.

Every error that reaches a client derives from BookTrackerError and carries
the HTTP status and machine-readable code it maps to. The API layer turns
them into {"message", "code"} JSON bodies.
"""

from typing import Any, Optional


class BookTrackerError(Exception):
    """Base exception for Book Tracker errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class InvalidInputError(BookTrackerError):
    """Request data failed validation. Raised before any write."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_INPUT", status_code=400)


class UnauthenticatedError(BookTrackerError):
    """No bearer token was supplied."""

    def __init__(self, message: str = "Authentication required."):
        super().__init__(message=message, code="UNAUTHENTICATED", status_code=401)


class InvalidCredentialsError(BookTrackerError):
    """Login failed. Unknown email and wrong password look the same."""

    def __init__(self):
        super().__init__(
            message="Invalid credentials.",
            code="INVALID_CREDENTIALS",
            status_code=401,
        )


class ForbiddenError(BookTrackerError):
    """A bearer token was supplied but did not verify."""

    def __init__(self, message: str = "Invalid or expired token."):
        super().__init__(message=message, code="FORBIDDEN", status_code=403)


class NotFoundError(BookTrackerError):
    """Resource not found, or not owned by the caller."""

    def __init__(self, resource: str = "Book"):
        super().__init__(
            message=f"{resource} not found.",
            code="NOT_FOUND",
            status_code=404,
        )


class ConflictError(BookTrackerError):
    """Write rejected by a uniqueness rule."""

    def __init__(self, message: str):
        super().__init__(message=message, code="CONFLICT", status_code=409)

    def extra_content(self) -> dict[str, Any]:
        return {}


class DuplicateEmailError(ConflictError):
    def __init__(self):
        super().__init__("Email already registered.")


class DuplicateIsbnError(ConflictError):
    """The caller already owns a book with this ISBN."""

    def __init__(self, isbn: str, book: Optional[Any] = None):
        self.isbn = isbn
        self.book = book
        super().__init__(f"You already own this book (ISBN: {isbn}).")

    def extra_content(self) -> dict[str, Any]:
        if self.book is None:
            return {}
        return {"book": self.book}
