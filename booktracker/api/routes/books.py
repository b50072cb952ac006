"""
Book API Routes

Create, list, update and delete the caller's books. Every endpoint is
scoped to the user named in the bearer token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from loguru import logger

from booktracker.api.dependencies import (
    AuthenticatedUser,
    get_book_repository,
    get_current_user,
)
from booktracker.api.schemas import (
    BookCreate,
    BookResponse,
    BookUpdate,
    ConflictResponse,
    ErrorResponse,
)


router = APIRouter(
    prefix="/books",
    tags=["books"],
    responses={
        401: {"model": ErrorResponse, "description": "No bearer token"},
        403: {"model": ErrorResponse, "description": "Invalid or expired token"},
    },
)

CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]


@router.get("", response_model=list[BookResponse])
def list_books(
    current_user: CurrentUser,
    repo=Depends(get_book_repository),
):
    """List the caller's books, newest first."""
    return repo.list_books(current_user.user_id)


@router.post(
    "",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Title, author or ISBN missing"},
        409: {"model": ConflictResponse, "description": "ISBN already owned"},
    },
)
def create_book(
    book: BookCreate,
    current_user: CurrentUser,
    repo=Depends(get_book_repository),
):
    """
    Add a book. Adding an ISBN the caller already owns is rejected and the
    existing record is returned in the error body.
    """
    logger.info(f"Creating book for {current_user.user_id}: {book.title} by {book.author}")
    return repo.add(current_user.user_id, book.model_dump())


@router.put(
    "/{book_id}",
    response_model=BookResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Required field blanked"},
        404: {"model": ErrorResponse, "description": "Book not found"},
        409: {"model": ConflictResponse, "description": "ISBN already owned"},
    },
)
def update_book(
    book_id: str,
    book: BookUpdate,
    current_user: CurrentUser,
    repo=Depends(get_book_repository),
):
    """
    Update a book.

    Supports partial updates - only provided fields are modified.
    """
    return repo.update(current_user.user_id, book_id, book.model_dump(exclude_unset=True))


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        404: {"model": ErrorResponse, "description": "Book not found"},
    },
)
def delete_book(
    book_id: str,
    current_user: CurrentUser,
    repo=Depends(get_book_repository),
):
    """Delete a book."""
    repo.remove(current_user.user_id, book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
