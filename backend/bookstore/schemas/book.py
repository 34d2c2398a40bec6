"""
Bookstore Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract for the book resource.
How:   FastAPI uses these models to validate request bodies, serialize
       responses, and generate the OpenAPI documentation.
Who:   BookData is the payload kept in the ResourceStore; the others are used
       by route handlers and BookService.

Resource shape:
    The book payload is "unwrapped" into the resource: a Book response is
    the store metadata (book_id, sync_token) followed by the BookData fields
    at the same level, not nested under a "data" key.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from bookstore.models.record import Record


# ══════════════════════════════════════════════════════════════════════════
# Payload Models — What clients send
# ══════════════════════════════════════════════════════════════════════════


class BookData(BaseModel):
    """
    What:  The bookstore's domain payload; stored as Record.data.
    Who:   Body of POST /books, and the merge target of BookPatch.

    isbn is optional: it is neither universal nor reliably unique, so the
    store-assigned book_id is the only identity.
    """
    title: str = Field(min_length=1, max_length=500, description="Book title")
    author: str = Field(min_length=1, max_length=200, description="Author name")
    year: int = Field(ge=0, le=9999, description="Publication year")
    isbn: Optional[str] = Field(default=None, max_length=32, description="ISBN, if known")

    model_config = {"frozen": True, "str_strip_whitespace": True}


class BookPatch(BaseModel):
    """
    What:  Partial update for a book.
    How:   Only the fields present in the request body are merged; an omitted
           field keeps its stored value, an explicit null clears it (and fails
           validation for required fields).

    sync_token:
        The version the client last read. When present, the update is
        rejected with 409 if the book has changed since.
    """
    title: Optional[str] = Field(default=None, description="New title")
    author: Optional[str] = Field(default=None, description="New author")
    year: Optional[int] = Field(default=None, description="New publication year")
    isbn: Optional[str] = Field(default=None, description="New ISBN (null clears it)")
    sync_token: Optional[int] = Field(
        default=None, ge=1, description="Version this change is based on"
    )

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually supplied, excluding the sync token."""
        return self.model_dump(exclude_unset=True, exclude={"sync_token"})

    def apply(self, record: Record[BookData]) -> Record[BookData]:
        """
        Merge the supplied fields into ``record`` and revalidate the result.

        Raises:
            pydantic.ValidationError: the merged book is not a valid BookData
        """
        merged = {**record.data.model_dump(), **self.changes()}
        return record.with_data(BookData.model_validate(merged))


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns
# ══════════════════════════════════════════════════════════════════════════


class BookResponse(BaseModel):
    """Complete book resource: id and sync token plus the unwrapped book data."""
    book_id: str = Field(description="Unique book identifier")
    sync_token: int = Field(description="Resource version; increases by 1 per update")
    title: str
    author: str
    year: int
    isbn: Optional[str] = None

    @classmethod
    def from_record(cls, record: Record[BookData]) -> "BookResponse":
        return cls(
            book_id=record.id,
            sync_token=record.version,
            **record.data.model_dump(),
        )


class BookListResponse(BaseModel):
    """
    What:  One page of books.

    Pagination:
        next_page_token is the page offset to request next, or "" once a page
        comes back empty. Clients keep requesting until the token is "".
    """
    books: List[BookResponse] = Field(description="Books on this page")
    next_page_token: str = Field(description="Token for the next page; empty when exhausted")


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "book with ID '42' was not found",
            "details": {"resource": "book", "resource_id": "42"},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status")
    version: str = Field(description="Application version")
    service: str = Field(description="Service type id")
    book_count: int = Field(description="Books currently stored")
    uptime_seconds: float = Field(description="Seconds since service started")
