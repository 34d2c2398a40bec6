"""
Bookstore Backend — Versioned Record Model
============================================

What:  Value types shared by the resource store and its callers.
How:   Frozen dataclasses, so a Record handed out by the store can never be
       mutated behind the store's back; updates produce a new Record.
Who:   ResourceStore stores and returns them; BookService maps them to schemas.

Record lifecycle:
    Absent ──create──▶ Present(1) ──update──▶ Present(2) ──update──▶ ...
       ▲                                                              │
       └──────────────────────────── delete ◀─────────────────────────┘

    A deleted id never comes back: create always draws a fresh id.
"""

import enum
import logging
from dataclasses import dataclass, replace
from typing import Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Sentinel next_page_token meaning "there is no next page"
EMPTY_PAGE_TOKEN = ""


@dataclass(frozen=True)
class Record(Generic[T]):
    """
    A stored {id, version, data} triple.

    Attributes:
        id:       Store-assigned identifier (decimal string), immutable
        version:  Sync token; 1 on creation, +1 per committed update
        data:     Domain payload
    """

    id: str
    version: int
    data: T

    def with_data(self, data: T) -> "Record[T]":
        """Copy of this record carrying a different payload."""
        return replace(self, data=data)


class OrderDirection(str, enum.Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


@dataclass(frozen=True)
class Ordering:
    """Field name plus direction; an unknown field leaves the order untouched."""

    field: str
    direction: OrderDirection = OrderDirection.ASCENDING

    @classmethod
    def parse(cls, value: str) -> "Ordering":
        """
        Parse an ``orderBy`` expression such as ``"year"`` or ``"year desc"``.

        An unrecognised direction word is treated as ascending, matching the
        permissive handling of unknown fields.
        """
        parts = value.split()
        if not parts:
            raise ValueError("Ordering expression is empty")
        direction = OrderDirection.ASCENDING
        if len(parts) > 1:
            word = parts[1].lower()
            if word in ("desc", "descending"):
                direction = OrderDirection.DESCENDING
            elif word not in ("asc", "ascending"):
                logger.debug("Treating unknown direction %r in %r as ascending", parts[1], value)
        return cls(field=parts[0], direction=direction)


@dataclass(frozen=True)
class Pagination:
    """
    Page request.

    page_token is the zero-based page offset as a decimal string; None or
    EMPTY_PAGE_TOKEN selects the first page.
    """

    page_size: int
    page_token: Optional[str] = None


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    items: List[Record[T]]
    next_page_token: str = EMPTY_PAGE_TOKEN
