"""
API Schemas for Book Tracker

Pydantic models for request validation and response serialization.

Credential fields are optional at the schema level so that missing values
reach the credential store and produce its own error messages.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Auth Schemas
# =============================================================================

class Credentials(BaseModel):
    """Register / login request."""

    email: Optional[str] = None
    password: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "reader@example.com",
                "password": "correct-horse",
            }
        }
    )


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    """Login response. Field name matches the JSON clients expect."""

    accessToken: str


class CurrentUserResponse(BaseModel):
    userId: str
    email: str


# =============================================================================
# Book Schemas
# =============================================================================

class BookFields(BaseModel):
    """Fields a client may send for a book."""

    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None

    date_purchased: Optional[date] = None
    publisher: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("date_purchased", mode="before")
    @classmethod
    def blank_date_is_none(cls, value: Any) -> Any:
        # HTML date inputs submit "" when left empty
        if isinstance(value, str) and not value.strip():
            return None
        return value


class BookCreate(BookFields):
    """Book creation request."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Dune",
                "author": "Frank Herbert",
                "isbn": "9780441172719",
                "date_purchased": "2024-03-02",
                "publisher": "Ace",
                "notes": "Second-hand copy",
            }
        }
    )


class BookUpdate(BookFields):
    """
    Book update request (partial).

    Only fields present in the body are changed.
    """


class BookResponse(BaseModel):
    """Book response model."""

    id: str
    user_id: str
    title: str
    author: str
    isbn: str

    date_purchased: Optional[date] = None
    publisher: Optional[str] = None
    notes: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Error / Health Schemas
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""

    message: str
    code: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Book not found.",
                "code": "NOT_FOUND",
            }
        }
    )


class ConflictResponse(ErrorResponse):
    """409 response; ``book`` is the record already owned."""

    book: Optional[BookResponse] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
