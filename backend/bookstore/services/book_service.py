"""
Bookstore Backend — Book Service
==================================

What:  The bookstore's CRUD operations: list, get, create, update, delete.
How:   Wraps a ResourceStore[BookData]; converts records to BookResponse
       schemas and pydantic validation failures to ValidationError.
Who:   Called by the route handlers in routes/books.py.

Orderable fields: title, author, year. Any other order_by value is ignored
and the books come back in creation order.
"""

import logging
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from bookstore.exceptions import ValidationError, describe_errors
from bookstore.models.record import OrderDirection, Ordering, Pagination
from bookstore.schemas.book import BookData, BookListResponse, BookPatch, BookResponse
from bookstore.services.resource_store import ResourceStore

logger = logging.getLogger(__name__)

BOOK_SORT_KEYS: Dict[str, Callable[[BookData], Any]] = {
    "title": lambda book: book.title,
    "author": lambda book: book.author,
    "year": lambda book: book.year,
}


class BookService:
    """
    Book operations over an in-memory store.

    Each instance owns its store, so separate apps (and tests) never share
    books or id counters.

    Args:
        store:               Store to use; a fresh one is created when omitted
        require_sync_token:  Reject patches that carry no sync_token
    """

    def __init__(
        self,
        store: Optional[ResourceStore[BookData]] = None,
        require_sync_token: bool = False,
    ):
        self.store = store if store is not None else ResourceStore(
            resource="book", sort_keys=BOOK_SORT_KEYS
        )
        self.require_sync_token = require_sync_token

    def list_books(
        self,
        page_size: int,
        page_token: Optional[str] = None,
        order_by: Optional[str] = None,
        direction: OrderDirection = OrderDirection.ASCENDING,
    ) -> BookListResponse:
        """
        List one page of books.

        Args:
            page_size:   Books per page (>= 1)
            page_token:  Token from the previous page; omit for the first page
            order_by:    title, author or year; anything else keeps creation order
            direction:   Sort direction for order_by

        Raises:
            ValidationError: bad page size or page token
        """
        ordering = Ordering(field=order_by, direction=direction) if order_by else None
        result = self.store.list(
            Pagination(page_size=page_size, page_token=page_token),
            ordering,
        )
        return BookListResponse(
            books=[BookResponse.from_record(record) for record in result.items],
            next_page_token=result.next_page_token,
        )

    def get_book(self, book_id: str) -> BookResponse:
        return BookResponse.from_record(self.store.get(book_id))

    def create_book(self, book_data: Optional[BookData]) -> BookResponse:
        if book_data is None:
            raise ValidationError(message="Must provide BookData payload", field="body")
        record = self.store.create(book_data)
        logger.info("Book %s created: %r by %s", record.id, book_data.title, book_data.author)
        return BookResponse.from_record(record)

    def update_book(self, book_id: str, patch: BookPatch) -> BookResponse:
        """
        Merge the supplied patch fields into a book.

        Raises:
            NotFoundError:    Unknown book_id
            ConflictError:    patch.sync_token is stale
            ValidationError:  Merged book is invalid, or sync_token missing
                              while require_sync_token is enabled
        """
        if patch.sync_token is None and self.require_sync_token:
            raise ValidationError(
                message="A sync_token is required to update a book",
                field="sync_token",
            )
        try:
            record = self.store.update(book_id, patch.apply, expected_version=patch.sync_token)
        except PydanticValidationError as e:
            raise ValidationError(
                message=f"Update would make book '{book_id}' invalid",
                context={"errors": describe_errors(e.errors())},
            ) from e
        return BookResponse.from_record(record)

    def delete_book(self, book_id: str) -> BookResponse:
        return BookResponse.from_record(self.store.delete(book_id))

    def book_count(self) -> int:
        return self.store.count()
