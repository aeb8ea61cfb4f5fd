"""
Category Service - categories and their embedded subcategories
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from bson import ObjectId
from fastapi import UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from tourbook.config import settings
from tourbook.exceptions import NotFoundError, ValidationError
from tourbook.models.category import Category, Subcategory
from tourbook.schemas.category import CategoryInput
from tourbook.services.assets import AssetStore, has_upload, release_all
from tourbook.utils.mongodb import CATEGORIES
from tourbook.utils.redis import CacheService
from tourbook.utils.serialization import object_id_or_none, serialize_doc

logger = logging.getLogger(__name__)

# Cache entry names, prefixed by CacheService
ACTIVE_CATEGORIES_KEY = "categories:active"


class CategoryService:
    """
    Admin and public operations on categories.

    Subcategories live inside their parent document; every change to one is
    written back as part of the parent.
    """

    def __init__(self, db: AsyncIOMotorDatabase, assets: AssetStore, cache=None):
        self.collection = db[CATEGORIES]
        self.assets = assets
        self.cache = CacheService(cache) if cache is not None else None

    async def invalidate_cache(self):
        if self.cache is not None:
            await self.cache.invalidate(ACTIVE_CATEGORIES_KEY)

    async def _load(self, category_id: Any) -> Category:
        oid = object_id_or_none(category_id)
        doc = await self.collection.find_one({"_id": oid}) if oid else None
        if not doc:
            raise NotFoundError("Category not found")
        return Category.from_document(doc)

    async def _save(self, category: Category) -> Category:
        category.updated_at = datetime.utcnow()
        try:
            await self.collection.replace_one({"_id": category.id}, category.to_document())
        except DuplicateKeyError as e:
            raise ValidationError("Category name already exists", field="name") from e
        await self.invalidate_cache()
        return category

    async def _save_or_release(self, category: Category, new_image: Optional[str]) -> Category:
        """Save; when the write fails, release the image stored for it"""
        try:
            return await self._save(category)
        except Exception:
            await release_all(self.assets, [new_image])
            raise

    async def _ensure_unique_name(self, name: str, exclude: Optional[ObjectId] = None):
        query: Dict[str, Any] = {"name": name}
        if exclude is not None:
            query["_id"] = {"$ne": exclude}
        if await self.collection.find_one(query):
            raise ValidationError("Category name already exists", field="name")

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def list_categories(self) -> List[Category]:
        """All categories, newest first"""
        cursor = self.collection.find({}).sort([("created_at", -1), ("_id", -1)])
        return [Category.from_document(doc) for doc in await cursor.to_list(length=None)]

    async def list_active(self) -> List[Dict[str, Any]]:
        """
        Active categories with only their active subcategories, serialized
        for views. Served from cache when available.
        """
        async def load():
            cursor = self.collection.find({"is_active": True}).sort("name", 1)
            categories = []
            for doc in await cursor.to_list(length=None):
                category = Category.from_document(doc)
                data = serialize_doc(category.to_document())
                data["sub_categories"] = [
                    serialize_doc(sub.to_document()) for sub in category.active_sub_categories
                ]
                categories.append(data)
            return categories

        if self.cache is None:
            return await load()
        return await self.cache.get_or_load_list(
            ACTIVE_CATEGORIES_KEY, load, ttl=settings.CACHE_TTL_CATEGORIES
        )

    async def get(self, category_id: Any) -> Category:
        return await self._load(category_id)

    async def find_by_subcategory_id(self, sub_id: Any) -> Optional[Category]:
        """The category that owns a subcategory, or None"""
        oid = object_id_or_none(sub_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"sub_categories._id": oid})
        return Category.from_document(doc) if doc else None

    async def create(self, data: CategoryInput, image: Optional[UploadFile]) -> Category:
        if not data.name:
            raise ValidationError("Category name is required", field="name")
        if not has_upload(image):
            raise ValidationError("Category image is required", field="image")

        await self._ensure_unique_name(data.name)
        image_url = await self.assets.store(image)

        category = Category(
            name=data.name,
            image_url=image_url,
            is_active=True if data.is_active is None else data.is_active,
        )
        try:
            await self.collection.insert_one(category.to_document())
        except DuplicateKeyError as e:
            await release_all(self.assets, [image_url])
            raise ValidationError("Category name already exists", field="name") from e

        await self.invalidate_cache()
        logger.info(f"Category created: {category.id} ({category.name})")
        return category

    async def update(
        self,
        category_id: Any,
        data: CategoryInput,
        image: Optional[UploadFile] = None,
    ) -> Category:
        category = await self._load(category_id)

        if data.name and data.name != category.name:
            await self._ensure_unique_name(data.name, exclude=category.id)
            category.name = data.name
        if data.is_active is not None:
            category.is_active = data.is_active

        old_image = new_image = None
        if has_upload(image):
            old_image = category.image_url
            new_image = category.image_url = await self.assets.store(image)

        await self._save_or_release(category, new_image)
        if old_image:
            await release_all(self.assets, [old_image])

        logger.info(f"Category updated: {category.id}")
        return category

    async def toggle(self, category_id: Any) -> Category:
        category = await self._load(category_id)
        category.is_active = not category.is_active
        await self._save(category)
        logger.info(f"Category {category.id} active={category.is_active}")
        return category

    async def delete(self, category_id: Any) -> None:
        """
        Delete a category and release its images. Packages still referencing
        it are left untouched.
        """
        category = await self._load(category_id)
        references = [category.image_url] + [sub.image_url for sub in category.sub_categories]
        await release_all(self.assets, references)
        await self.collection.delete_one({"_id": category.id})
        await self.invalidate_cache()
        logger.info(f"Category deleted: {category.id}")

    # ------------------------------------------------------------------
    # Subcategories
    # ------------------------------------------------------------------

    def _sub_or_404(self, category: Category, sub_id: Any) -> Subcategory:
        oid = object_id_or_none(sub_id)
        sub = category.find_sub_category(oid) if oid else None
        if sub is None:
            raise NotFoundError("Subcategory not found")
        return sub

    async def add_subcategory(
        self,
        category_id: Any,
        data: CategoryInput,
        image: Optional[UploadFile],
    ) -> Subcategory:
        category = await self._load(category_id)
        if not data.name:
            raise ValidationError("Subcategory name is required", field="name")
        if not has_upload(image):
            raise ValidationError("Subcategory image is required", field="image")

        sub = Subcategory(
            name=data.name,
            image_url=await self.assets.store(image),
            is_active=True if data.is_active is None else data.is_active,
        )
        category.sub_categories.append(sub)
        await self._save_or_release(category, sub.image_url)
        logger.info(f"Subcategory {sub.id} added to category {category.id}")
        return sub

    async def update_subcategory(
        self,
        category_id: Any,
        sub_id: Any,
        data: CategoryInput,
        image: Optional[UploadFile] = None,
    ) -> Subcategory:
        category = await self._load(category_id)
        sub = self._sub_or_404(category, sub_id)

        changes: Dict[str, Any] = {}
        if data.name:
            changes["name"] = data.name
        if data.is_active is not None:
            changes["is_active"] = data.is_active
        if has_upload(image):
            changes["image_url"] = await self.assets.store(image)

        updated = category.replace_sub_category(sub.id, **changes)
        await self._save_or_release(category, changes.get("image_url"))
        if "image_url" in changes:
            await release_all(self.assets, [sub.image_url])
        return updated

    async def toggle_subcategory(self, category_id: Any, sub_id: Any) -> Subcategory:
        category = await self._load(category_id)
        sub = self._sub_or_404(category, sub_id)
        updated = category.replace_sub_category(sub.id, is_active=not sub.is_active)
        await self._save(category)
        return updated

    async def delete_subcategory(self, category_id: Any, sub_id: Any) -> None:
        """Remove a subcategory. Packages referencing it are not updated."""
        category = await self._load(category_id)
        sub = self._sub_or_404(category, sub_id)
        category.sub_categories = [s for s in category.sub_categories if s.id != sub.id]
        await release_all(self.assets, [sub.image_url])
        await self._save(category)
        logger.info(f"Subcategory {sub.id} removed from category {category.id}")
