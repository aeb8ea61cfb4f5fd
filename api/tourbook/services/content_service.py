"""
Content Service - banners, blogs, gallery items and testimonials
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from fastapi import UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel

from tourbook.exceptions import NotFoundError, ValidationError
from tourbook.services.assets import AssetStore, has_upload, release_all
from tourbook.services.package_query import fetch_page, ResultPage
from tourbook.utils.serialization import object_id_or_none, serialize_doc

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


class ContentService:
    """
    Simple image-bearing documents shown on the public site.

    One instance per collection; `label` is used in error messages.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        collection: str,
        label: str,
        assets: AssetStore,
        image_required: bool = True,
    ):
        self.collection = db[collection]
        self.label = label
        self.assets = assets
        self.image_required = image_required

    async def _load(self, item_id: Any) -> Dict[str, Any]:
        oid = object_id_or_none(item_id)
        doc = await self.collection.find_one({"_id": oid}) if oid else None
        if not doc:
            raise NotFoundError(f"{self.label} not found")
        return doc

    async def create(self, data: BaseModel, image: Optional[UploadFile]) -> Dict[str, Any]:
        if self.image_required and not has_upload(image):
            raise ValidationError(f"{self.label} image is required", field="image")

        now = datetime.utcnow()
        doc = {
            **data.model_dump(),
            "image_url": await self.assets.store(image) if has_upload(image) else None,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info(f"{self.label} created: {result.inserted_id}")
        return serialize_doc(doc)

    async def get(self, item_id: Any) -> Dict[str, Any]:
        return serialize_doc(await self._load(item_id))

    async def page(
        self,
        page: int,
        limit: int,
        active_only: bool = False,
    ) -> ResultPage:
        query = {"is_active": True} if active_only else {}
        result = await fetch_page(self.collection, query, page, limit)
        result.items = serialize_doc(result.items)
        return result

    async def latest(
        self,
        limit: Optional[int] = None,
        active_only: bool = False,
        exclude: Any = None,
    ) -> List[Dict[str, Any]]:
        """Newest documents first, optionally leaving one out"""
        query: Dict[str, Any] = {"is_active": True} if active_only else {}
        exclude_id = object_id_or_none(exclude) if exclude is not None else None
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        cursor = self.collection.find(query).sort(NEWEST_FIRST)
        if limit:
            cursor = cursor.limit(limit)
        return serialize_doc(await cursor.to_list(length=limit))

    async def toggle(self, item_id: Any) -> Dict[str, Any]:
        doc = await self._load(item_id)
        doc["is_active"] = not doc.get("is_active", True)
        doc["updated_at"] = datetime.utcnow()
        await self.collection.update_one(
            {"_id": doc["_id"]},
            {"$set": {"is_active": doc["is_active"], "updated_at": doc["updated_at"]}},
        )
        return serialize_doc(doc)

    async def delete(self, item_id: Any) -> None:
        doc = await self._load(item_id)
        await release_all(self.assets, [doc.get("image_url")])
        await self.collection.delete_one({"_id": doc["_id"]})
        logger.info(f"{self.label} deleted: {doc['_id']}")
