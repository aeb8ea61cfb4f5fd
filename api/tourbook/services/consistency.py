"""
Package Relation Validator - every referenced subcategory must belong to one
of the package's selected categories
"""
from typing import Dict, List, Sequence
import logging

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from tourbook.exceptions import ValidationError
from tourbook.utils.mongodb import CATEGORIES

logger = logging.getLogger(__name__)

CATEGORIES_NOT_FOUND = "One or more categories not found"
SUBCATEGORIES_MISMATCH = "One or more subcategories do not belong to the selected categories"
SUBCATEGORIES_LOOKUP_FAILED = "Error validating subcategories"


def owners_by_subcategory(categories: Sequence[dict]) -> Dict[ObjectId, ObjectId]:
    """Map each embedded subcategory id to the id of the category that owns it"""
    owners = {}
    for category in categories:
        for sub in category.get("sub_categories", []):
            owners[sub["_id"]] = category["_id"]
    return owners


def subcategories_belong(
    category_ids: Sequence[ObjectId],
    subcategory_ids: Sequence[ObjectId],
    owners: Dict[ObjectId, ObjectId],
) -> bool:
    """True when every subcategory is owned by one of the selected categories"""
    selected = set(category_ids)
    return all(owners.get(sub_id) in selected for sub_id in subcategory_ids)


async def validate_package_relations(
    db: AsyncIOMotorDatabase,
    category_ids: List[ObjectId],
    subcategory_ids: List[ObjectId],
) -> None:
    """
    Check a package's category/subcategory selection before it is written.

    Raises ValidationError naming the offending field. Lookup failures are
    reported as validation failures as well, so nothing is written when the
    check could not run.
    """
    if not category_ids:
        raise ValidationError("At least one category is required", field="categories")

    collection = db[CATEGORIES]

    try:
        found = await collection.count_documents({"_id": {"$in": list(category_ids)}})
    except Exception as e:
        logger.error(f"Category lookup failed during package validation: {e}")
        raise ValidationError(CATEGORIES_NOT_FOUND, field="categories") from e

    if found != len(set(category_ids)):
        raise ValidationError(CATEGORIES_NOT_FOUND, field="categories")

    if not subcategory_ids:
        return

    try:
        cursor = collection.find({"sub_categories._id": {"$in": list(subcategory_ids)}})
        owning = await cursor.to_list(length=None)
    except Exception as e:
        logger.error(f"Subcategory lookup failed during package validation: {e}")
        raise ValidationError(SUBCATEGORIES_LOOKUP_FAILED, field="sub_categories") from e

    owners = owners_by_subcategory(owning)
    if not subcategories_belong(category_ids, subcategory_ids, owners):
        logger.info(
            f"Rejected subcategories {[str(s) for s in subcategory_ids]} "
            f"for categories {[str(c) for c in category_ids]}"
        )
        raise ValidationError(SUBCATEGORIES_MISMATCH, field="sub_categories")
