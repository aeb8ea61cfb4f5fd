"""
Category & Subcategory Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from tourbook.schemas.package import coerce_checkbox


class CategoryInput(BaseModel):
    """Form fields for creating/updating a category or subcategory"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    is_active: Optional[bool] = None

    class Config:
        str_strip_whitespace = True

    @field_validator("is_active", mode="before")
    @classmethod
    def _parse_checkbox(cls, value):
        return coerce_checkbox(value)


class SubcategoryResponse(BaseModel):
    """Schema for an embedded subcategory"""
    id: str
    name: str
    image_url: str
    is_active: bool


class CategoryResponse(BaseModel):
    """Schema for a category with its subcategories"""
    id: str
    name: str
    image_url: str
    is_active: bool
    sub_categories: List[SubcategoryResponse] = []
    created_at: datetime
    updated_at: datetime
