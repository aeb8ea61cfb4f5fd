"""
Package Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, List, Optional
from datetime import datetime
import json

from bson import ObjectId


CHECKBOX_TRUE = {"on", "true", "1", "yes"}
CHECKBOX_FALSE = {"off", "false", "0", "no", ""}


def coerce_list(value: Any) -> Any:
    """
    Normalise list-valued form fields.

    Accepts a real list, repeated form fields, or a single field holding a
    JSON array (``'["a", "b"]'``). Repeated values are kept as literal
    strings, so an item such as "[Optional] Boat ride" survives intact; a
    single value that does not decode to a JSON array is kept literally too.
    """
    if value is None:
        return value
    items = value if isinstance(value, list) else [value]
    if len(items) == 1 and isinstance(items[0], str) and items[0].strip().startswith("["):
        try:
            decoded = json.loads(items[0])
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, list):
            return decoded
    result = []
    for item in items:
        if isinstance(item, str):
            item = item.strip()
            if not item:
                continue
        result.append(item)
    return result


def decode_objects(items: Any) -> Any:
    """Decode list entries sent as JSON object text ('{"day": ...}')"""
    if items is None:
        return items
    result = []
    for item in items:
        if isinstance(item, str):
            try:
                item = json.loads(item)
            except json.JSONDecodeError as e:
                raise ValueError(f"malformed JSON: {e.msg}")
        result.append(item)
    return result


def coerce_checkbox(value: Any) -> Any:
    """Map checkbox-style tokens ("on", "true", "0", ...) to booleans"""
    if value is None or isinstance(value, bool):
        return value
    token = str(value).strip().lower()
    if token in CHECKBOX_TRUE:
        return True
    if token in CHECKBOX_FALSE:
        return False
    raise ValueError(f"not a checkbox value: {value!r}")


class TravelPlanEntry(BaseModel):
    """One day of a package itinerary"""
    day: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)

    class Config:
        str_strip_whitespace = True


class _PackageInput(BaseModel):
    """Parse/validate step shared by create and update forms"""

    class Config:
        str_strip_whitespace = True

    @field_validator("categories", "sub_categories", "included", mode="before", check_fields=False)
    @classmethod
    def _parse_lists(cls, value):
        return coerce_list(value)

    @field_validator("travel_plan", mode="before", check_fields=False)
    @classmethod
    def _parse_travel_plan(cls, value):
        return decode_objects(coerce_list(value))

    @field_validator("categories", "sub_categories", check_fields=False)
    @classmethod
    def _check_ids(cls, value):
        if value is None:
            return value
        for item in value:
            if not ObjectId.is_valid(item):
                raise ValueError(f"invalid id {item!r}")
        return value

    @field_validator("is_active", mode="before", check_fields=False)
    @classmethod
    def _parse_checkbox(cls, value):
        return coerce_checkbox(value)

    @field_validator("price", mode="before", check_fields=False)
    @classmethod
    def _blank_price(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class PackageCreate(_PackageInput):
    """Schema for creating a package (multipart form body)"""
    title: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    duration: str = Field(..., min_length=1)
    tour_type: str = Field(..., min_length=1)
    group_size: int = Field(..., ge=1)
    tour_guide: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: Optional[float] = Field(None, ge=0)
    included: List[str] = []
    travel_plan: List[TravelPlanEntry] = []
    location_href: str = Field(..., min_length=1)
    categories: List[str] = Field(..., min_length=1)
    sub_categories: List[str] = []
    is_active: bool = True


class PackageUpdate(_PackageInput):
    """Schema for a partial package update; unset fields keep stored values"""
    title: Optional[str] = Field(None, min_length=1)
    destination: Optional[str] = Field(None, min_length=1)
    duration: Optional[str] = Field(None, min_length=1)
    tour_type: Optional[str] = Field(None, min_length=1)
    group_size: Optional[int] = Field(None, ge=1)
    tour_guide: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    included: Optional[List[str]] = None
    travel_plan: Optional[List[TravelPlanEntry]] = None
    location_href: Optional[str] = Field(None, min_length=1)
    categories: Optional[List[str]] = Field(None, min_length=1)
    sub_categories: Optional[List[str]] = None
    is_active: Optional[bool] = None


class PackageFilter(BaseModel):
    """Filter & pagination options for package listings"""
    destination: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    duration: Optional[str] = None
    tour_type: Optional[str] = None
    min_group_size: Optional[int] = Field(None, ge=0)
    max_group_size: Optional[int] = Field(None, ge=0)
    search: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)

    class Config:
        str_strip_whitespace = True


class CategoryRef(BaseModel):
    """Category as embedded in a package response"""
    id: str
    name: str
    image_url: Optional[str] = None


class SubcategoryRef(BaseModel):
    """Subcategory as embedded in a package response"""
    id: str
    name: str
    image_url: Optional[str] = None


class PackageResponse(BaseModel):
    """Schema for a relation-expanded package"""
    id: str
    title: str
    destination: str
    duration: str
    tour_type: str
    group_size: int
    tour_guide: str
    description: str
    price: Optional[float] = None
    included: List[str] = []
    travel_plan: List[TravelPlanEntry] = []
    location_href: str
    images: List[str] = []
    categories: List[CategoryRef] = []
    sub_categories: List[SubcategoryRef] = []
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PackageListResponse(BaseModel):
    """Schema for paginated admin package list"""
    packages: List[PackageResponse]
    total_pages: int
    current_page: int
    total_count: int
