"""
MongoDB Connection for Packages, Categories & Site Content
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from typing import Optional
import logging

from tourbook.config import settings

logger = logging.getLogger(__name__)

# Collection names
CATEGORIES = "categories"
PACKAGES = "packages"
BANNERS = "banners"
BLOGS = "blogs"
GALLERY = "gallery"
TESTIMONIALS = "testimonials"

# MongoDB client instance
mongo_client: Optional[AsyncIOMotorClient] = None
mongo_db: Optional[AsyncIOMotorDatabase] = None


async def init_mongodb():
    """Initialize MongoDB connection"""
    global mongo_client, mongo_db
    logger.info("Initializing MongoDB connection...")

    mongo_client = AsyncIOMotorClient(settings.MONGODB_URL)
    mongo_db = mongo_client[settings.MONGODB_DATABASE]

    # Test connection
    await mongo_client.admin.command('ping')

    await create_indexes(mongo_db)

    logger.info("MongoDB connection established")


async def close_mongodb():
    """Close MongoDB connection"""
    global mongo_client
    if mongo_client:
        logger.info("Closing MongoDB connection...")
        mongo_client.close()
        logger.info("MongoDB connection closed")


async def get_mongodb() -> AsyncIOMotorDatabase:
    """
    Dependency that provides MongoDB database
    Usage: db: AsyncIOMotorDatabase = Depends(get_mongodb)
    """
    if mongo_db is None:
        raise RuntimeError("MongoDB client not initialized")
    return mongo_db


async def create_indexes(db: AsyncIOMotorDatabase):
    """Create MongoDB indexes for better query performance"""

    categories = db[CATEGORIES]
    await categories.create_index("name", unique=True)
    await categories.create_index("sub_categories._id")
    await categories.create_index("is_active")

    packages = db[PACKAGES]
    await packages.create_index([("created_at", -1), ("_id", -1)])
    await packages.create_index("categories")
    await packages.create_index("sub_categories")
    await packages.create_index("is_active")

    for name in (BANNERS, BLOGS, GALLERY, TESTIMONIALS):
        await db[name].create_index("created_at")

    logger.info("MongoDB indexes created")
