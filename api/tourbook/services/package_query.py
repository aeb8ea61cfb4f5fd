"""
Package Query Builder - filters, search and pagination for package listings
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging
import math
import re

from motor.motor_asyncio import AsyncIOMotorCollection

from tourbook.config import settings
from tourbook.schemas.package import PackageFilter
from tourbook.utils.serialization import to_object_id

logger = logging.getLogger(__name__)

# Newest first; _id breaks ties between equal timestamps
PACKAGE_SORT = [("created_at", -1), ("_id", -1)]

SEARCH_FIELDS = ("title", "destination", "description")


def contains(text: str) -> Dict[str, str]:
    """Case-insensitive substring match, with regex metacharacters escaped"""
    return {"$regex": re.escape(text), "$options": "i"}


def search_term(search: Optional[str], min_length: Optional[int] = None) -> Optional[str]:
    """Return the trimmed term, or None when it is too short to apply"""
    min_length = settings.SEARCH_MIN_LENGTH if min_length is None else min_length
    term = (search or "").strip()
    if len(term) < min_length:
        return None
    return term


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def build_package_query(filters: PackageFilter, active_only: bool = True) -> Dict[str, Any]:
    """
    Translate listing filters into a MongoDB query.

    Only fields that were supplied constrain the result.
    """
    query: Dict[str, Any] = {}

    if active_only:
        query["is_active"] = True

    if filters.destination:
        query["destination"] = contains(filters.destination)

    if filters.category:
        query["categories"] = to_object_id(filters.category, field="category")

    if filters.sub_category:
        query["sub_categories"] = to_object_id(filters.sub_category, field="sub_category")

    if filters.duration:
        query["duration"] = filters.duration

    if filters.tour_type:
        query["tour_type"] = filters.tour_type

    if filters.min_group_size is not None or filters.max_group_size is not None:
        bounds = {}
        if filters.min_group_size is not None:
            bounds["$gte"] = filters.min_group_size
        if filters.max_group_size is not None:
            bounds["$lte"] = filters.max_group_size
        query["group_size"] = bounds

    term = search_term(filters.search)
    if term:
        query["$or"] = [{name: contains(term)} for name in SEARCH_FIELDS]

    return query


@dataclass
class ResultPage:
    """One page of documents with the total match count"""
    items: List[Dict[str, Any]]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return total_pages(self.total, self.limit)


async def fetch_page(
    collection: AsyncIOMotorCollection,
    query: Dict[str, Any],
    page: int,
    limit: int,
) -> ResultPage:
    """Run a query sorted newest first and return the requested page"""
    limit = min(limit, settings.MAX_PAGE_SIZE)
    skip = (page - 1) * limit

    cursor = collection.find(query).sort(PACKAGE_SORT).skip(skip).limit(limit)
    items = await cursor.to_list(length=limit)
    total = await collection.count_documents(query)

    logger.debug(f"Package query {query} page {page} returned {len(items)} of {total}")
    return ResultPage(items=items, total=total, page=page, limit=limit)
