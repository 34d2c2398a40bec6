"""
Bookstore Backend — Resource Store Unit Tests
===============================================

What:  Tests for the generic ResourceStore (create, get, list, update, delete).
How:   Plain dict payloads; concurrency tests use real threads and barriers.

What we test:
    ✅ Ids start at 1, grow monotonically and are never reused
    ✅ Versions start at 1 and grow by exactly 1 per update
    ✅ NotFound on missing ids for get/update/delete
    ✅ Page slicing and page tokens, including the empty sentinel
    ✅ Ordering by known fields, unknown fields keep insertion order
    ✅ Concurrent updates: no lost update, no version skip, CAS conflicts
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from bookstore.exceptions import ConflictError, NotFoundError, ValidationError
from bookstore.models.record import (
    EMPTY_PAGE_TOKEN,
    OrderDirection,
    Ordering,
    Pagination,
)
from bookstore.services.resource_store import ResourceStore


def set_field(name, value):
    """Patch function replacing one key of a dict payload."""
    return lambda record: record.with_data({**record.data, name: value})


class TestCreate:
    """Tests for id assignment and initial version."""

    def test_create_starts_at_version_one(self, record_store):
        record = record_store.create({"title": "a", "year": 2000})
        assert record.version == 1
        assert record.data == {"title": "a", "year": 2000}

    def test_ids_are_sequential_decimal_strings(self, record_store):
        ids = [record_store.create({"title": str(i), "year": i}).id for i in range(3)]
        assert ids == ["1", "2", "3"]

    def test_ids_never_reused_after_delete(self, record_store):
        seen = set()
        for i in range(5):
            record = record_store.create({"title": str(i), "year": i})
            assert record.id not in seen
            seen.add(record.id)
            record_store.delete(record.id)

        assert record_store.create({"title": "last", "year": 0}).id not in seen

    def test_counters_are_per_instance(self):
        first = ResourceStore()
        second = ResourceStore()
        first.create({"n": 1})
        first.create({"n": 2})
        assert second.create({"n": 3}).id == "1"

    def test_count_tracks_present_records(self, record_store):
        assert record_store.count() == 0
        a = record_store.create({"title": "a", "year": 1})
        record_store.create({"title": "b", "year": 2})
        record_store.delete(a.id)
        assert record_store.count() == 1
        assert len(record_store) == 1
        assert a.id not in record_store


class TestGetAndDelete:
    """Tests for single-record reads and removal."""

    def test_get_returns_stored_record(self, record_store):
        created = record_store.create({"title": "a", "year": 1})
        assert record_store.get(created.id) == created

    def test_get_missing_raises_not_found(self, record_store):
        with pytest.raises(NotFoundError) as exc_info:
            record_store.get("404")
        assert exc_info.value.context["resource"] == "item"
        assert exc_info.value.context["resource_id"] == "404"

    def test_delete_returns_prior_record(self, record_store):
        created = record_store.create({"title": "a", "year": 1})
        record_store.update(created.id, set_field("title", "b"))

        deleted = record_store.delete(created.id)

        assert deleted.version == 2
        assert deleted.data["title"] == "b"
        with pytest.raises(NotFoundError):
            record_store.get(created.id)

    def test_delete_missing_raises_not_found(self, record_store):
        with pytest.raises(NotFoundError):
            record_store.delete("1")

    def test_delete_twice_raises_not_found(self, record_store):
        created = record_store.create({"title": "a", "year": 1})
        record_store.delete(created.id)
        with pytest.raises(NotFoundError):
            record_store.delete(created.id)


class TestUpdate:
    """Tests for versioned read-modify-write updates."""

    def test_update_increments_version_by_one(self, record_store):
        created = record_store.create({"title": "a", "year": 1})

        first = record_store.update(created.id, set_field("title", "b"))
        second = record_store.update(created.id, set_field("year", 2))

        assert (first.version, second.version) == (2, 3)
        assert first.id == second.id == created.id
        assert record_store.get(created.id).data == {"title": "b", "year": 2}

    def test_patch_function_sees_current_record(self, record_store):
        created = record_store.create({"title": "a", "year": 1})
        record_store.update(created.id, set_field("title", "b"))
        seen = []

        def patch(record):
            seen.append((record.version, record.data["title"]))
            return record

        record_store.update(created.id, patch)
        assert seen == [(2, "b")]

    def test_update_missing_raises_not_found(self, record_store):
        with pytest.raises(NotFoundError):
            record_store.update("9", set_field("title", "x"))

    def test_matching_expected_version_commits(self, record_store):
        created = record_store.create({"title": "a", "year": 1})
        updated = record_store.update(created.id, set_field("title", "b"), expected_version=1)
        assert updated.version == 2

    def test_stale_expected_version_raises_conflict(self, record_store):
        created = record_store.create({"title": "a", "year": 1})
        record_store.update(created.id, set_field("title", "b"))

        with pytest.raises(ConflictError) as exc_info:
            record_store.update(created.id, set_field("title", "c"), expected_version=1)

        assert exc_info.value.expected_version == 1
        assert exc_info.value.actual_version == 2
        assert record_store.get(created.id).data["title"] == "b"

    def test_patch_cannot_change_id(self, record_store):
        from dataclasses import replace

        created = record_store.create({"title": "a", "year": 1})

        with pytest.raises(ValidationError) as exc_info:
            record_store.update(created.id, lambda record: replace(record, id="999"))

        assert exc_info.value.field == "id"
        assert record_store.get(created.id) == created
        assert "999" not in record_store

    def test_failing_patch_leaves_record_untouched(self, record_store):
        created = record_store.create({"title": "a", "year": 1})

        def explode(record):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            record_store.update(created.id, explode)
        assert record_store.get(created.id) == created

    def test_update_keeps_insertion_slot(self, record_store):
        for title in ("a", "b", "c"):
            record_store.create({"title": title, "year": 1})
        record_store.update("1", set_field("title", "z"))

        page = record_store.list(Pagination(page_size=10))
        assert [record.id for record in page.items] == ["1", "2", "3"]


class TestList:
    """Tests for pagination and ordering."""

    def test_five_items_page_size_two(self, record_store):
        for i in range(5):
            record_store.create({"title": str(i), "year": i})

        sizes = []
        tokens = []
        token = None
        for _ in range(4):
            page = record_store.list(Pagination(page_size=2, page_token=token))
            sizes.append(len(page.items))
            tokens.append(page.next_page_token)
            token = page.next_page_token

        assert sizes == [2, 2, 1, 0]
        assert tokens == ["1", "2", "3", EMPTY_PAGE_TOKEN]

    def test_pages_cover_every_record_once(self, record_store):
        for i in range(7):
            record_store.create({"title": str(i), "year": i})

        collected = []
        token = None
        while True:
            page = record_store.list(Pagination(page_size=3, page_token=token))
            if not page.items:
                break
            collected.extend(record.id for record in page.items)
            token = page.next_page_token

        assert collected == [str(i) for i in range(1, 8)]

    def test_empty_store_returns_sentinel(self, record_store):
        page = record_store.list(Pagination(page_size=5))
        assert page.items == []
        assert page.next_page_token == EMPTY_PAGE_TOKEN

    def test_empty_token_means_first_page(self, record_store):
        record_store.create({"title": "a", "year": 1})
        page = record_store.list(Pagination(page_size=1, page_token=EMPTY_PAGE_TOKEN))
        assert [record.id for record in page.items] == ["1"]
        assert page.next_page_token == "1"

    def test_order_by_year_ascending_and_descending(self, record_store):
        for year in (2020, 2019, 2021):
            record_store.create({"title": str(year), "year": year})

        ascending = record_store.list(
            Pagination(page_size=10), Ordering("year", OrderDirection.ASCENDING)
        )
        descending = record_store.list(
            Pagination(page_size=10), Ordering("year", OrderDirection.DESCENDING)
        )

        assert [r.data["year"] for r in ascending.items] == [2019, 2020, 2021]
        assert [r.data["year"] for r in descending.items] == [2021, 2020, 2019]

    @pytest.mark.parametrize("direction", list(OrderDirection))
    def test_unknown_field_keeps_insertion_order(self, record_store, direction):
        for title in ("c", "a", "b"):
            record_store.create({"title": title, "year": 1})

        page = record_store.list(Pagination(page_size=10), Ordering("publisher", direction))

        assert [r.data["title"] for r in page.items] == ["c", "a", "b"]

    def test_ties_keep_insertion_order_when_descending(self, record_store):
        record_store.create({"title": "first", "year": 2000})
        record_store.create({"title": "second", "year": 2000})
        record_store.create({"title": "newer", "year": 2010})

        page = record_store.list(
            Pagination(page_size=10), Ordering("year", OrderDirection.DESCENDING)
        )

        assert [r.data["title"] for r in page.items] == ["newer", "first", "second"]

    def test_ordering_applies_before_slicing(self, record_store):
        for year in (5, 3, 1, 4, 2):
            record_store.create({"title": str(year), "year": year})

        second_page = record_store.list(
            Pagination(page_size=2, page_token="1"), Ordering("year")
        )

        assert [r.data["year"] for r in second_page.items] == [3, 4]

    @pytest.mark.parametrize("token", ["abc", "-1", "1.5", " 1", "+1", "١"])
    def test_malformed_page_token_is_invalid_input(self, record_store, token):
        with pytest.raises(ValidationError) as exc_info:
            record_store.list(Pagination(page_size=2, page_token=token))
        assert exc_info.value.field == "page_token"

    @pytest.mark.parametrize("size", [0, -3])
    def test_non_positive_page_size_is_invalid_input(self, record_store, size):
        with pytest.raises(ValidationError) as exc_info:
            record_store.list(Pagination(page_size=size))
        assert exc_info.value.field == "page_size"

    def test_ordering_parse(self):
        assert Ordering.parse("year") == Ordering("year", OrderDirection.ASCENDING)
        assert Ordering.parse("year desc") == Ordering("year", OrderDirection.DESCENDING)
        assert Ordering.parse("title ASC") == Ordering("title", OrderDirection.ASCENDING)
        with pytest.raises(ValueError):
            Ordering.parse("   ")

    def test_ordering_parse_logs_unknown_direction(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="bookstore.models.record"):
            ordering = Ordering.parse("year dsc")

        assert ordering == Ordering("year", OrderDirection.ASCENDING)
        assert "dsc" in caplog.text

    def test_ordering_parse_is_quiet_for_known_directions(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="bookstore.models.record"):
            Ordering.parse("year asc")
            Ordering.parse("year descending")

        assert caplog.records == []


class TestConcurrentUpdates:
    """Real threads racing on the same record."""

    def test_parallel_increments_lose_nothing(self, record_store):
        created = record_store.create({"title": "counter", "year": 0, "count": 0})
        workers = 16
        per_worker = 25

        def increment(record):
            return record.with_data({**record.data, "count": record.data["count"] + 1})

        def work():
            for _ in range(per_worker):
                record_store.update(created.id, increment)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            for future in [pool.submit(work) for _ in range(workers)]:
                future.result()

        final = record_store.get(created.id)
        assert final.data["count"] == workers * per_worker
        assert final.version == 1 + workers * per_worker

    def test_interleaved_updates_do_not_skip_versions(self, record_store):
        """Both writers read version 1 before either commits."""
        created = record_store.create({"title": "start", "year": 0})
        barrier = threading.Barrier(2, timeout=5)

        def racing_patch(title):
            calls = []

            def patch(record):
                calls.append(record.version)
                if len(calls) == 1:
                    barrier.wait()
                return record.with_data({**record.data, "title": title})

            return patch, calls

        patch_a, calls_a = racing_patch("A")
        patch_b, calls_b = racing_patch("B")

        with ThreadPoolExecutor(max_workers=2) as pool:
            future_a = pool.submit(record_store.update, created.id, patch_a)
            future_b = pool.submit(record_store.update, created.id, patch_b)
            results = [future_a.result(), future_b.result()]

        final = record_store.get(created.id)
        assert sorted(result.version for result in results) == [2, 3]
        assert final.version == 3
        assert final.data["title"] in {"A", "B"}
        assert final == max(results, key=lambda result: result.version)
        # The loser re-read version 2 and patched again
        assert sorted([calls_a, calls_b], key=len) == [[1], [1, 2]]

    def test_interleaved_versioned_updates_conflict(self, record_store):
        created = record_store.create({"title": "start", "year": 0})
        barrier = threading.Barrier(2, timeout=5)

        def patch_to(title):
            def patch(record):
                barrier.wait()
                return record.with_data({**record.data, "title": title})
            return patch

        def attempt(title):
            try:
                return record_store.update(created.id, patch_to(title), expected_version=1)
            except ConflictError as e:
                return e

        with ThreadPoolExecutor(max_workers=2) as pool:
            outcomes = list(pool.map(attempt, ["A", "B"]))

        conflicts = [o for o in outcomes if isinstance(o, ConflictError)]
        commits = [o for o in outcomes if not isinstance(o, ConflictError)]
        assert len(conflicts) == 1 and len(commits) == 1
        assert conflicts[0].actual_version == 2
        assert record_store.get(created.id) == commits[0]
