"""
Bookstore Backend — Book Route Handlers
=========================================

What:  CRUD endpoints for the book resource.
How:   Extracts path/query/body parameters, delegates to BookService, returns JSON.
       Handlers are plain functions: FastAPI runs them in its threadpool, so
       concurrent requests reach the lock-guarded store from worker threads
       instead of holding up the event loop.

Status codes:
    200  list / get / update / delete
    201  create
    400  ValidationError (bad payload, page token, page size or missing sync token)
    404  NotFoundError
    409  ConflictError (stale sync_token on PATCH)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from bookstore.config import settings
from bookstore.dependencies import get_book_service
from bookstore.models.record import OrderDirection, Ordering
from bookstore.schemas.book import (
    BookData,
    BookListResponse,
    BookPatch,
    BookResponse,
    ErrorResponse,
)
from bookstore.services.book_service import BookService

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/books", tags=["Books"])


@router.get(
    "",
    response_model=BookListResponse,
    responses={
        200: {"description": "One page of books", "model": BookListResponse},
        400: {"description": "Invalid page token", "model": ErrorResponse},
    },
    summary="List all books in the bookstore",
)
def list_books(
    response: Response,
    page_size: int = Query(
        default=settings.default_page_size, ge=1, le=settings.max_page_size,
        description="Books per page",
    ),
    page_token: str | None = Query(
        default=None,
        description="next_page_token from the previous page. Omit for the first page.",
    ),
    order_by: str | None = Query(
        default=None,
        description=(
            "Ordering as '<field> [asc|desc]', field one of title, author, year. "
            "Other fields leave books in creation order."
        ),
    ),
    service: BookService = Depends(get_book_service),
) -> BookListResponse:
    """
    Example client usage:
        Page 1: GET /bookstore/api/v1/books?page_size=20&order_by=year%20desc
        Page 2: GET /bookstore/api/v1/books?page_size=20&order_by=year%20desc&page_token=1
        ... until next_page_token is ""
    """
    ordering = Ordering.parse(order_by) if order_by and order_by.strip() else None
    result = service.list_books(
        page_size=page_size,
        page_token=page_token,
        order_by=ordering.field if ordering else None,
        direction=ordering.direction if ordering else OrderDirection.ASCENDING,
    )
    response.headers["X-Total-Count"] = str(service.book_count())
    return result


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    responses={404: {"description": "Book not found", "model": ErrorResponse}},
    summary="Get a book by its ID",
)
def get_book(
    book_id: str,
    service: BookService = Depends(get_book_service),
) -> BookResponse:
    return service.get_book(book_id)


@router.post(
    "",
    response_model=BookResponse,
    status_code=201,
    responses={400: {"description": "Missing or invalid payload", "model": ErrorResponse}},
    summary="Create a new book",
)
def create_book(
    book: Optional[BookData] = Body(default=None),
    service: BookService = Depends(get_book_service),
) -> BookResponse:
    return service.create_book(book)


@router.patch(
    "/{book_id}",
    response_model=BookResponse,
    responses={
        400: {"description": "Patched book is invalid", "model": ErrorResponse},
        404: {"description": "Book not found", "model": ErrorResponse},
        409: {"description": "Book changed since sync_token was read", "model": ErrorResponse},
    },
    summary="Update a book",
    description=(
        "Merges only the supplied fields into the book and increments its sync_token. "
        "Include the sync_token you last read to have concurrent changes rejected."
    ),
)
def update_book(
    book_id: str,
    patch: BookPatch,
    service: BookService = Depends(get_book_service),
) -> BookResponse:
    return service.update_book(book_id, patch)


@router.delete(
    "/{book_id}",
    response_model=BookResponse,
    responses={404: {"description": "Book not found", "model": ErrorResponse}},
    summary="Delete a book",
)
def delete_book(
    book_id: str,
    service: BookService = Depends(get_book_service),
) -> BookResponse:
    return service.delete_book(book_id)
