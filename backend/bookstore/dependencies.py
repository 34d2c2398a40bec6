"""
Bookstore Backend — FastAPI Dependencies
==========================================

What:  Providers injected into route handlers with Depends().
How:   The BookService lives on app.state (one per application instance,
       created by create_app), so handlers never reach for a module global.
"""

from starlette.requests import Request

from bookstore.services.book_service import BookService


def get_book_service(request: Request) -> BookService:
    """Returns the BookService owned by the application handling this request."""
    return request.app.state.book_service
