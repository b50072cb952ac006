"""
Search API Route

Case-insensitive substring search over the caller's books.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from booktracker.api.dependencies import (
    AuthenticatedUser,
    get_book_repository,
    get_current_user,
)
from booktracker.api.schemas import BookResponse, ErrorResponse


router = APIRouter(tags=["search"])


@router.get(
    "/search",
    response_model=list[BookResponse],
    responses={
        400: {"model": ErrorResponse, "description": "Search query is required"},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
)
def search_books(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    query: Optional[str] = Query(None, description="Text to find in title, author or ISBN"),
    repo=Depends(get_book_repository),
):
    """Search the caller's books. Returns [] when nothing matches."""
    return repo.search(current_user.user_id, query)
