"""
Tests for package listing queries and pagination
"""
from datetime import datetime, timedelta
import re

import pytest
from bson import ObjectId

from tourbook.exceptions import ValidationError
from tourbook.models.package import Package
from tourbook.schemas.package import PackageFilter
from tourbook.services.package_query import (
    build_package_query,
    contains,
    fetch_page,
    search_term,
    total_pages,
)
from tourbook.utils.mongodb import PACKAGES


def make_package(title, created_at, **overrides):
    fields = dict(
        title=title,
        destination="Munnar, Kerala",
        duration="2 Days",
        tour_type="Couple",
        group_size=4,
        tour_guide="Rema",
        description="Tea gardens and misty hills.",
        location_href="https://maps.example.com/munnar",
        categories=[ObjectId()],
        images=["https://assets.test/a.jpg", "https://assets.test/b.jpg"],
        created_at=created_at,
        updated_at=created_at,
    )
    fields.update(overrides)
    return Package(**fields)


class TestBuildPackageQuery:
    def test_no_filters_only_restricts_active(self):
        assert build_package_query(PackageFilter()) == {"is_active": True}

    def test_admin_query_includes_inactive(self):
        assert build_package_query(PackageFilter(), active_only=False) == {}

    def test_group_size_bounds(self):
        query = build_package_query(PackageFilter(min_group_size=2, max_group_size=8))
        assert query["group_size"] == {"$gte": 2, "$lte": 8}

        query = build_package_query(PackageFilter(max_group_size=8))
        assert query["group_size"] == {"$lte": 8}

    def test_zero_minimum_group_size_is_applied(self):
        query = build_package_query(PackageFilter(min_group_size=0))
        assert query["group_size"] == {"$gte": 0}

    def test_short_search_is_ignored(self):
        assert "$or" not in build_package_query(PackageFilter(search="ab"))

    def test_search_covers_title_destination_description(self):
        query = build_package_query(PackageFilter(search="tea"))
        assert query["$or"] == [
            {"title": contains("tea")},
            {"destination": contains("tea")},
            {"description": contains("tea")},
        ]

    def test_destination_is_escaped_substring(self):
        query = build_package_query(PackageFilter(destination="Goa (North)"))
        pattern = query["destination"]["$regex"]
        assert query["destination"]["$options"] == "i"
        assert re.search(pattern, "Beaches of Goa (North) coast")
        assert not re.search(pattern, "Goa North")

    def test_category_filters_use_object_ids(self):
        category, sub = ObjectId(), ObjectId()
        query = build_package_query(PackageFilter(category=str(category), sub_category=str(sub)))
        assert query["categories"] == category
        assert query["sub_categories"] == sub

    def test_malformed_category_id_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            build_package_query(PackageFilter(category="not-an-id"))
        assert exc.value.field == "category"

    def test_exact_match_fields(self):
        query = build_package_query(PackageFilter(duration="2 Days", tour_type="Couple"))
        assert query["duration"] == "2 Days"
        assert query["tour_type"] == "Couple"


def test_search_term_trims_and_applies_minimum():
    assert search_term("  tea  ") == "tea"
    assert search_term("te") is None
    assert search_term(None) is None
    assert search_term("te", min_length=1) == "te"


def test_total_pages_rounds_up():
    assert total_pages(0, 10) == 0
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2


class TestFetchPage:
    async def seed(self, db, count, start=None, **overrides):
        start = start or datetime(2024, 1, 1)
        packages = [
            make_package(f"Package {i}", start + timedelta(days=i), **overrides)
            for i in range(count)
        ]
        await db[PACKAGES].insert_many([p.to_document() for p in packages])
        return packages

    async def test_newest_first_with_pagination(self, db):
        await self.seed(db, 12)

        first = await fetch_page(db[PACKAGES], {}, page=1, limit=5)
        last = await fetch_page(db[PACKAGES], {}, page=3, limit=5)

        assert [p["title"] for p in first.items] == [f"Package {i}" for i in range(11, 6, -1)]
        assert [p["title"] for p in last.items] == ["Package 1", "Package 0"]
        assert first.total == 12
        assert first.total_pages == 3

    async def test_equal_timestamps_are_ordered_by_id(self, db):
        same = datetime(2024, 5, 1)
        packages = [make_package(f"Same {i}", same) for i in range(3)]
        await db[PACKAGES].insert_many([p.to_document() for p in packages])

        result = await fetch_page(db[PACKAGES], {}, page=1, limit=10)
        assert [p["_id"] for p in result.items] == sorted((p.id for p in packages), reverse=True)

    async def test_only_active_packages_are_listed(self, db):
        await self.seed(db, 2)
        await self.seed(db, 3, start=datetime(2023, 1, 1), is_active=False)

        query = build_package_query(PackageFilter())
        result = await fetch_page(db[PACKAGES], query, page=1, limit=10)

        assert result.total == 2
        assert all(p["is_active"] for p in result.items)

    async def test_group_size_range_is_inclusive(self, db):
        for size in (2, 4, 6, 8):
            await self.seed(db, 1, group_size=size)

        query = build_package_query(PackageFilter(min_group_size=4, max_group_size=6))
        result = await fetch_page(db[PACKAGES], query, page=1, limit=10)

        assert sorted(p["group_size"] for p in result.items) == [4, 6]

    async def test_page_beyond_end_is_empty(self, db):
        await self.seed(db, 3)
        result = await fetch_page(db[PACKAGES], {}, page=4, limit=2)
        assert result.items == []
        assert result.total == 3
