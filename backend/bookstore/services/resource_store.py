"""
Bookstore Backend — Generic Resource Store
============================================

What:  In-memory, thread-safe collection of versioned records keyed by a
       generated string id.
How:   A dict guarded by a threading.Lock plus a per-instance id counter.
       Updates are optimistic: read, patch outside the lock, then commit only
       if the stored version is still the one that was read.
Who:   BookService owns one store; tests build their own.

Concurrency Model:
    get / create / delete / count   → single critical section each (atomic)
    list                            → snapshot under the lock, sort and slice outside
    update                          → read ─▶ patch_fn ─▶ compare-and-set

    Compare-and-set outcomes:
        stored version unchanged          → commit version + 1
        changed, expected_version given   → ConflictError
        changed, no expected_version      → retry against the fresh record

    Every retry is caused by another update that committed, so concurrent
    updates serialize: versions never skip and no committed patch is lost.

Pagination:
    The page token is the zero-based page offset as a decimal string.
    Page N covers ordered[N * size : N * size + size]. A non-empty page
    answers with token N + 1; an empty page answers with EMPTY_PAGE_TOKEN.
"""

import itertools
import logging
import threading
from typing import Any, Callable, Dict, Generic, Mapping, Optional, TypeVar

from bookstore.exceptions import ConflictError, NotFoundError, ValidationError
from bookstore.models.record import (
    EMPTY_PAGE_TOKEN,
    OrderDirection,
    Ordering,
    PaginatedResult,
    Pagination,
    Record,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

PatchFn = Callable[[Record[T]], Record[T]]


class ResourceStore(Generic[T]):
    """
    Versioned record store.

    Args:
        resource:   Name used in error messages and logs ("book", "author", ...)
        sort_keys:  Orderable field name → function extracting the sort key
                    from a record's data. Orderings on any other field are
                    ignored rather than rejected.

    Invariants:
        - ids are drawn from an instance-owned counter and never reused
        - a record's version starts at 1 and grows by exactly 1 per update
        - insertion order is the fallback ordering; updates keep a record's slot
    """

    def __init__(
        self,
        resource: str = "resource",
        sort_keys: Optional[Mapping[str, Callable[[T], Any]]] = None,
    ):
        self.resource = resource
        self._sort_keys: Dict[str, Callable[[T], Any]] = dict(sort_keys or {})
        self._records: Dict[str, Record[T]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return record_id in self._records

    def count(self) -> int:
        return len(self)

    # ── Single-record operations ──────────────────────────────────────────

    def create(self, data: T) -> Record[T]:
        """Store ``data`` under a fresh id with version 1."""
        with self._lock:
            record = Record(id=str(next(self._ids)), version=1, data=data)
            self._records[record.id] = record
        logger.info("Created %s %s", self.resource, record.id)
        return record

    def get(self, record_id: str) -> Record[T]:
        with self._lock:
            record = self._records.get(record_id)
        if record is None:
            raise NotFoundError(resource=self.resource, resource_id=record_id)
        return record

    def delete(self, record_id: str) -> Record[T]:
        """Remove a record and return what was stored."""
        with self._lock:
            record = self._records.pop(record_id, None)
        if record is None:
            raise NotFoundError(resource=self.resource, resource_id=record_id)
        logger.info("Deleted %s %s at version %d", self.resource, record_id, record.version)
        return record

    def update(
        self,
        record_id: str,
        patch_fn: PatchFn,
        expected_version: Optional[int] = None,
    ) -> Record[T]:
        """
        Apply ``patch_fn`` to the current record and commit it as version + 1.

        What:    Read-modify-write with a compare-and-set commit.
        How:     patch_fn receives the current Record and returns the patched
                 Record; only its data is kept. It runs outside the lock and
                 may run more than once when racing writers force a retry,
                 so it must not have side effects.

        Args:
            record_id:         Id of the record to update
            patch_fn:          Caller-supplied merge function
            expected_version:  Version the caller's change was based on; when
                               given, any other stored version is a conflict

        Returns:
            The committed record

        Raises:
            NotFoundError:    No such record (or it was deleted mid-update)
            ConflictError:    expected_version is not the stored version
            ValidationError:  patch_fn changed the record id
        """
        while True:
            current = self.get(record_id)
            if expected_version is not None and current.version != expected_version:
                raise ConflictError(
                    resource=self.resource,
                    resource_id=record_id,
                    expected_version=expected_version,
                    actual_version=current.version,
                )

            patched = patch_fn(current)
            if patched.id != current.id:
                raise ValidationError(
                    message=f"The id of {self.resource} '{record_id}' cannot be changed",
                    field="id",
                )
            updated = Record(id=current.id, version=current.version + 1, data=patched.data)

            with self._lock:
                stored = self._records.get(record_id)
                if stored is None:
                    raise NotFoundError(resource=self.resource, resource_id=record_id)
                if stored.version == current.version:
                    self._records[record_id] = updated
                    committed = True
                else:
                    committed = False

            if committed:
                logger.info(
                    "Updated %s %s to version %d", self.resource, record_id, updated.version
                )
                return updated

            if expected_version is not None:
                logger.warning(
                    "Conflicting update on %s %s: based on version %d, found %d",
                    self.resource,
                    record_id,
                    expected_version,
                    stored.version,
                )
                raise ConflictError(
                    resource=self.resource,
                    resource_id=record_id,
                    expected_version=expected_version,
                    actual_version=stored.version,
                )
            logger.debug(
                "Retrying update on %s %s: version moved from %d to %d",
                self.resource,
                record_id,
                current.version,
                stored.version,
            )

    # ── Listing ───────────────────────────────────────────────────────────

    def list(
        self,
        pagination: Pagination,
        ordering: Optional[Ordering] = None,
    ) -> PaginatedResult[T]:
        """
        Return one page of records.

        Args:
            pagination:  Page size (>= 1) and page token (decimal page offset)
            ordering:    Optional field/direction; unknown fields are a no-op

        Raises:
            ValidationError: page size below 1 or malformed page token
        """
        if pagination.page_size < 1:
            raise ValidationError(
                message=f"Page size must be a positive number, got {pagination.page_size}",
                field="page_size",
            )
        offset = self._parse_page_token(pagination.page_token)

        with self._lock:
            records = list(self._records.values())

        if ordering is not None:
            key = self._sort_keys.get(ordering.field)
            if key is None:
                logger.debug("Ignoring ordering on unknown %s field %r", self.resource, ordering.field)
            else:
                # list.sort is stable in both directions: ties keep insertion order
                records.sort(
                    key=lambda record: key(record.data),
                    reverse=ordering.direction is OrderDirection.DESCENDING,
                )

        start = offset * pagination.page_size
        page = records[start:start + pagination.page_size]
        next_token = str(offset + 1) if page else EMPTY_PAGE_TOKEN
        return PaginatedResult(items=page, next_page_token=next_token)

    @staticmethod
    def _parse_page_token(page_token: Optional[str]) -> int:
        if not page_token:
            return 0
        if not (page_token.isascii() and page_token.isdigit()):
            raise ValidationError(
                message=f"Invalid page token '{page_token}'",
                field="page_token",
            )
        return int(page_token)
