"""
Image Asset Stores - External hosting for package, category and content images
"""
from functools import lru_cache

from .base import AssetStore, ReleaseResult, ReleaseStatus, has_upload, release_all
from .cloudinary import CloudinaryAssetStore, public_id_from_url


@lru_cache()
def get_asset_store() -> AssetStore:
    """
    Dependency that provides the configured asset store
    Usage: store: AssetStore = Depends(get_asset_store)
    """
    return CloudinaryAssetStore()


__all__ = [
    "AssetStore",
    "ReleaseResult",
    "ReleaseStatus",
    "has_upload",
    "release_all",
    "CloudinaryAssetStore",
    "public_id_from_url",
    "get_asset_store",
]
