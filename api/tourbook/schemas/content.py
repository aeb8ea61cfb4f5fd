"""
Site Content Schemas - banners, blogs, gallery, testimonials
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class BannerCreate(BaseModel):
    """Schema for creating a home page banner"""
    title: str = Field(..., min_length=1, max_length=255)
    subtitle: Optional[str] = None
    link: Optional[str] = None

    class Config:
        str_strip_whitespace = True


class BlogCreate(BaseModel):
    """Schema for creating a blog post"""
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    author: Optional[str] = None

    class Config:
        str_strip_whitespace = True


class GalleryItemCreate(BaseModel):
    """Schema for creating a gallery item"""
    title: Optional[str] = None

    class Config:
        str_strip_whitespace = True


class TestimonialCreate(BaseModel):
    """Schema for creating a testimonial"""
    name: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    rating: Optional[int] = Field(None, ge=1, le=5)

    class Config:
        str_strip_whitespace = True


class ContentListResponse(BaseModel):
    """Schema for a paginated content list"""
    items: List[Dict[str, Any]]
    total_pages: int
    current_page: int
    total_count: int
