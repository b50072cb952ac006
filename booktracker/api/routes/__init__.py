"""
API Routes for Book Tracker

Route modules:
- auth: Registration, login, current identity
- books: Book CRUD
- search: Substring search
"""

from booktracker.api.routes.auth import router as auth_router
from booktracker.api.routes.books import router as books_router
from booktracker.api.routes.search import router as search_router

__all__ = [
    "auth_router",
    "books_router",
    "search_router",
]
