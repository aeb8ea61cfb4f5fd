"""
Application Configuration - Environment Variables & Settings
"""
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """
    # Application
    APP_NAME: str = Field(default="Tourbook API")
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # Database - MongoDB
    MONGODB_URL: str = Field(default="mongodb://localhost:27017/tourbook")
    MONGODB_DATABASE: str = Field(default="tourbook")

    # Cache - Redis
    REDIS_URL: str = Field(default="redis://localhost:6379/0")
    CACHE_TTL_DEFAULT: int = Field(default=300)  # 5 minutes
    CACHE_TTL_CATEGORIES: int = Field(default=600)  # 10 minutes
    CACHE_KEY_PREFIX: str = Field(default="tourbook")

    # CORS - stored as comma-separated string
    ALLOWED_ORIGINS_STR: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        alias="ALLOWED_ORIGINS"
    )

    @computed_field
    @property
    def ALLOWED_ORIGINS(self) -> List[str]:
        """Parse comma-separated origins into list"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS_STR.split(',') if origin.strip()]

    # Asset store - Cloudinary
    CLOUDINARY_CLOUD_NAME: str = Field(default="")
    CLOUDINARY_API_KEY: str = Field(default="")
    CLOUDINARY_API_SECRET: str = Field(default="")
    CLOUDINARY_FOLDER: str = Field(default="tourbook")
    ASSET_TIMEOUT_SECONDS: float = Field(default=30.0)

    # Packages
    PACKAGE_MIN_IMAGES: int = Field(default=2)
    PACKAGE_MAX_IMAGES: int = Field(default=5)

    # Listing & search
    DEFAULT_PAGE_SIZE: int = Field(default=10)
    MAX_PAGE_SIZE: int = Field(default=100)
    SEARCH_MIN_LENGTH: int = Field(default=3)

    # Site presentation
    SHORT_DESCRIPTION_WORDS: int = Field(default=20)
    FEATURED_CATEGORY: str = Field(default="Kerala")
    FEATURED_PACKAGES: int = Field(default=3)
    HOME_BLOGS: int = Field(default=3)
    HOME_TESTIMONIALS: int = Field(default=10)
    ABOUT_GALLERY_ITEMS: int = Field(default=20)

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance
    """
    return Settings()


# Global settings instance
settings = get_settings()
