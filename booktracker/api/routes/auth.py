"""
Authentication API Routes for Book Tracker.

Handles:
- User registration
- User login (token issuance)
- Current identity retrieval
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from loguru import logger

from booktracker.api.dependencies import (
    AuthenticatedUser,
    get_current_user,
    get_token_service,
    get_user_repository,
)
from booktracker.api.schemas import (
    ConflictResponse,
    Credentials,
    CurrentUserResponse,
    ErrorResponse,
    MessageResponse,
    TokenResponse,
)
from booktracker.security import TokenService

router = APIRouter(tags=["auth"])


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields or short password"},
        409: {"model": ConflictResponse, "description": "Email already registered"},
    },
)
def register(
    credentials: Credentials,
    users=Depends(get_user_repository),
):
    """Register a new user."""
    users.register(credentials.email, credentials.password)
    return MessageResponse(message="User created successfully.")


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
def login(
    credentials: Credentials,
    users=Depends(get_user_repository),
    token_service: TokenService = Depends(get_token_service),
):
    """
    Login endpoint.
    Returns a bearer token valid for seven days.
    """
    user = users.verify_credentials(credentials.email, credentials.password)
    logger.info(f"User {user.id} logged in")
    return TokenResponse(accessToken=token_service.issue(user.id, user.email))


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
)
async def read_current_user(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
):
    """Identity carried by the presented token."""
    return CurrentUserResponse(userId=current_user.user_id, email=current_user.email)
