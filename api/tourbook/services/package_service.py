"""
Package Service - create, update, delete and list tour packages
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
import logging

from bson import ObjectId
from fastapi import UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase

from tourbook.config import settings
from tourbook.exceptions import NotFoundError, ValidationError
from tourbook.models.package import Package, TravelPlanEntry
from tourbook.schemas.package import PackageCreate, PackageFilter, PackageUpdate
from tourbook.services.assets import AssetStore, has_upload, release_all
from tourbook.services.consistency import validate_package_relations
from tourbook.services.package_query import (
    ResultPage,
    build_package_query,
    contains,
    fetch_page,
    PACKAGE_SORT,
)
from tourbook.utils.mongodb import CATEGORIES, PACKAGES
from tourbook.utils.serialization import object_id_or_none, serialize_doc, to_object_ids

logger = logging.getLogger(__name__)

# Optional fields an update may set back to null
CLEARABLE_FIELDS = {"price"}


class PackageService:
    """
    Service for tour packages.

    Reads return serialized, relation-expanded packages: category ids are
    replaced by {id, name, image_url} and subcategory ids by the matching
    embedded subcategories of those categories.
    """

    def __init__(self, db: AsyncIOMotorDatabase, assets: AssetStore):
        self.db = db
        self.collection = db[PACKAGES]
        self.categories = db[CATEGORIES]
        self.assets = assets

    # ------------------------------------------------------------------
    # Relation expansion
    # ------------------------------------------------------------------

    async def resolve(
        self,
        docs: Iterable[Dict[str, Any]],
        active_sub_categories_only: bool = False,
    ) -> List[Dict[str, Any]]:
        """Expand category and subcategory references for display"""
        docs = list(docs)
        category_ids = {cid for doc in docs for cid in doc.get("categories", [])}
        categories = {}
        if category_ids:
            cursor = self.categories.find({"_id": {"$in": list(category_ids)}})
            categories = {c["_id"]: c for c in await cursor.to_list(length=None)}

        resolved = []
        for doc in docs:
            package_categories = [categories[cid] for cid in doc.get("categories", []) if cid in categories]
            wanted = set(doc.get("sub_categories", []))
            sub_categories = [
                {"_id": sub["_id"], "name": sub["name"], "image_url": sub["image_url"]}
                for category in package_categories
                for sub in category.get("sub_categories", [])
                if sub["_id"] in wanted
                and (sub.get("is_active", True) or not active_sub_categories_only)
            ]
            resolved.append(serialize_doc({
                **doc,
                "categories": [
                    {"_id": c["_id"], "name": c["name"], "image_url": c.get("image_url")}
                    for c in package_categories
                ],
                "sub_categories": sub_categories,
            }))
        return resolved

    async def _resolve_one(self, doc: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        return (await self.resolve([doc], **kwargs))[0]

    async def _load(self, package_id: Any) -> Dict[str, Any]:
        oid = object_id_or_none(package_id)
        doc = await self.collection.find_one({"_id": oid}) if oid else None
        if not doc:
            raise NotFoundError("Package not found")
        return doc

    # ------------------------------------------------------------------
    # Admin operations
    # ------------------------------------------------------------------

    def _check_image_count(self, uploads: List[UploadFile]):
        low, high = settings.PACKAGE_MIN_IMAGES, settings.PACKAGE_MAX_IMAGES
        if not low <= len(uploads) <= high:
            raise ValidationError(f"Please provide between {low} to {high} images", field="images")

    async def create(self, data: PackageCreate, images: List[UploadFile]) -> Dict[str, Any]:
        """
        Create a package. Image count and category/subcategory consistency
        are checked before any image is uploaded or record written.
        """
        uploads = [u for u in images or [] if has_upload(u)]
        self._check_image_count(uploads)

        category_ids = to_object_ids(data.categories, field="categories")
        sub_category_ids = to_object_ids(data.sub_categories, field="sub_categories")
        await validate_package_relations(self.db, category_ids, sub_category_ids)

        image_urls = await self.assets.store_all(uploads)

        package = Package(
            title=data.title,
            destination=data.destination,
            duration=data.duration,
            tour_type=data.tour_type,
            group_size=data.group_size,
            tour_guide=data.tour_guide,
            description=data.description,
            location_href=data.location_href,
            price=data.price,
            included=data.included,
            travel_plan=[TravelPlanEntry(**entry.model_dump()) for entry in data.travel_plan],
            categories=category_ids,
            sub_categories=sub_category_ids,
            images=image_urls,
            is_active=data.is_active,
        )

        try:
            await self.collection.insert_one(package.to_document())
        except Exception:
            await release_all(self.assets, image_urls)
            raise

        logger.info(f"Package created: {package.id} ({package.title})")
        return await self.get(package.id)

    async def list_admin(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        search: Optional[str] = None,
    ) -> ResultPage:
        """
        All packages regardless of active state, newest first. Search matches
        title, destination, or the name of a referenced category/subcategory.
        """
        limit = limit or settings.DEFAULT_PAGE_SIZE
        query: Dict[str, Any] = {}

        term = (search or "").strip()
        if term:
            matcher = contains(term)
            cursor = self.categories.find({
                "$or": [{"name": matcher}, {"sub_categories.name": matcher}]
            })
            category_ids, sub_category_ids = [], []
            lowered = term.lower()
            for category in await cursor.to_list(length=None):
                if lowered in category["name"].lower():
                    category_ids.append(category["_id"])
                sub_category_ids.extend(
                    sub["_id"] for sub in category.get("sub_categories", [])
                    if lowered in sub["name"].lower()
                )
            query["$or"] = [
                {"title": matcher},
                {"destination": matcher},
                {"categories": {"$in": category_ids}},
                {"sub_categories": {"$in": sub_category_ids}},
            ]

        result = await fetch_page(self.collection, query, page, limit)
        result.items = await self.resolve(result.items)
        return result

    async def get(self, package_id: Any) -> Dict[str, Any]:
        return await self._resolve_one(await self._load(package_id))

    async def update(
        self,
        package_id: Any,
        data: PackageUpdate,
        images: Optional[List[UploadFile]] = None,
    ) -> Dict[str, Any]:
        """
        Merge supplied fields over the stored package.

        Relations are re-validated against the merged values. New images
        replace the old list and the old references are released.
        """
        existing = await self._load(package_id)
        changes = {
            name: value
            for name, value in data.model_dump(exclude_unset=True).items()
            if value is not None or name in CLEARABLE_FIELDS
        }

        if "categories" in changes or "sub_categories" in changes:
            category_ids = (
                to_object_ids(changes["categories"], field="categories")
                if "categories" in changes else list(existing.get("categories", []))
            )
            sub_category_ids = (
                to_object_ids(changes["sub_categories"], field="sub_categories")
                if "sub_categories" in changes else list(existing.get("sub_categories", []))
            )
            await validate_package_relations(self.db, category_ids, sub_category_ids)
            changes["categories"] = category_ids
            changes["sub_categories"] = sub_category_ids

        uploads = [u for u in images or [] if has_upload(u)]
        old_images: List[str] = []
        if uploads:
            self._check_image_count(uploads)
            changes["images"] = await self.assets.store_all(uploads)
            old_images = list(existing.get("images", []))

        changes["updated_at"] = datetime.utcnow()
        try:
            await self.collection.update_one({"_id": existing["_id"]}, {"$set": changes})
        except Exception:
            await release_all(self.assets, changes.get("images", []))
            raise

        if old_images:
            await release_all(self.assets, old_images)

        logger.info(f"Package updated: {existing['_id']} ({', '.join(sorted(changes))})")
        return await self.get(existing["_id"])

    async def toggle(self, package_id: Any) -> Dict[str, Any]:
        existing = await self._load(package_id)
        is_active = not existing.get("is_active", True)
        await self.collection.update_one(
            {"_id": existing["_id"]},
            {"$set": {"is_active": is_active, "updated_at": datetime.utcnow()}},
        )
        logger.info(f"Package {existing['_id']} active={is_active}")
        return await self.get(existing["_id"])

    async def delete(self, package_id: Any) -> None:
        """Release every image of the package, then remove the record"""
        existing = await self._load(package_id)
        await release_all(self.assets, existing.get("images", []))
        await self.collection.delete_one({"_id": existing["_id"]})
        logger.info(f"Package deleted: {existing['_id']}")

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def list_public(self, filters: PackageFilter) -> ResultPage:
        """Active packages matching the filters, one page at a time"""
        query = build_package_query(filters, active_only=True)
        result = await fetch_page(self.collection, query, filters.page, filters.limit)
        result.items = await self.resolve(result.items, active_sub_categories_only=True)
        return result

    async def list_active(self) -> List[Dict[str, Any]]:
        """Every active package, newest first"""
        cursor = self.collection.find({"is_active": True}).sort(PACKAGE_SORT)
        docs = await cursor.to_list(length=None)
        return await self.resolve(docs, active_sub_categories_only=True)

    async def get_public(self, package_id: Any) -> Dict[str, Any]:
        doc = await self._load(package_id)
        if not doc.get("is_active", True):
            raise NotFoundError("Package not found")
        return await self._resolve_one(doc, active_sub_categories_only=True)

    async def newest_in_sub_category(self, sub_id: ObjectId) -> Optional[Dict[str, Any]]:
        """The most recently created active package in a subcategory"""
        cursor = (
            self.collection.find({"sub_categories": sub_id, "is_active": True})
            .sort(PACKAGE_SORT)
            .limit(1)
        )
        docs = await cursor.to_list(length=1)
        if not docs:
            return None
        return await self._resolve_one(docs[0], active_sub_categories_only=True)
