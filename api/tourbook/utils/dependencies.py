"""
Service Dependencies - wire services to the database, cache and asset store
"""
from typing import Any, Dict, Type, TypeVar

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel

from tourbook.services.assets import AssetStore, get_asset_store
from tourbook.services.category_service import CategoryService
from tourbook.services.content_service import ContentService
from tourbook.services.package_service import PackageService
from tourbook.utils import mongodb
from tourbook.utils.mongodb import get_mongodb
from tourbook.utils.redis import get_redis

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_form(model: Type[ModelT], **fields: Any) -> ModelT:
    """
    Validate multipart form fields against a schema.

    Fields the client did not send arrive as None and are left unset, so
    partial-update schemas can tell them apart from explicit values.
    """
    data: Dict[str, Any] = {k: v for k, v in fields.items() if v is not None}
    return model.model_validate(data)


async def get_category_service(
    db: AsyncIOMotorDatabase = Depends(get_mongodb),
    assets: AssetStore = Depends(get_asset_store),
    cache=Depends(get_redis),
) -> CategoryService:
    return CategoryService(db, assets, cache)


async def get_package_service(
    db: AsyncIOMotorDatabase = Depends(get_mongodb),
    assets: AssetStore = Depends(get_asset_store),
) -> PackageService:
    return PackageService(db, assets)


def content_service(collection: str, label: str, image_required: bool = True):
    """Build a dependency that provides a ContentService for one collection"""
    async def dependency(
        db: AsyncIOMotorDatabase = Depends(get_mongodb),
        assets: AssetStore = Depends(get_asset_store),
    ) -> ContentService:
        return ContentService(db, collection, label, assets, image_required=image_required)
    return dependency


get_banner_service = content_service(mongodb.BANNERS, "Banner")
get_blog_service = content_service(mongodb.BLOGS, "Blog")
get_gallery_service = content_service(mongodb.GALLERY, "Gallery item")
get_testimonial_service = content_service(mongodb.TESTIMONIALS, "Testimonial", image_required=False)
