"""
Admin Category & Subcategory Endpoints
"""
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from typing import List, Optional
import logging

from tourbook.exceptions import NotFoundError
from tourbook.models.category import Category, Subcategory
from tourbook.schemas.category import CategoryInput, CategoryResponse, SubcategoryResponse
from tourbook.services.category_service import CategoryService
from tourbook.utils.dependencies import get_category_service, parse_form
from tourbook.utils.serialization import serialize_doc

router = APIRouter()
logger = logging.getLogger(__name__)


def category_response(category: Category) -> dict:
    return serialize_doc(category.to_document())


def subcategory_response(sub: Subcategory) -> dict:
    return serialize_doc(sub.to_document())


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    name: str = Form(...),
    is_active: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: CategoryService = Depends(get_category_service),
):
    """
    Create a category
    """
    data = parse_form(CategoryInput, name=name, is_active=is_active)
    return category_response(await service.create(data, image))


@router.get("", response_model=List[CategoryResponse])
async def list_categories(service: CategoryService = Depends(get_category_service)):
    """
    List all categories with their subcategories
    """
    return [category_response(c) for c in await service.list_categories()]


@router.get("/by-subcategory/{sub_id}", response_model=CategoryResponse)
async def get_category_by_subcategory(
    sub_id: str,
    service: CategoryService = Depends(get_category_service),
):
    """
    Find the category that owns a subcategory
    """
    category = await service.find_by_subcategory_id(sub_id)
    if category is None:
        raise NotFoundError("Subcategory not found")
    return category_response(category)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: str,
    service: CategoryService = Depends(get_category_service),
):
    return category_response(await service.get(category_id))


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    name: Optional[str] = Form(None),
    is_active: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: CategoryService = Depends(get_category_service),
):
    """
    Update a category; a new image replaces the old one
    """
    data = parse_form(CategoryInput, name=name, is_active=is_active)
    return category_response(await service.update(category_id, data, image))


@router.patch("/{category_id}/toggle", response_model=CategoryResponse)
async def toggle_category_status(
    category_id: str,
    service: CategoryService = Depends(get_category_service),
):
    return category_response(await service.toggle(category_id))


@router.delete("/{category_id}")
async def delete_category(
    category_id: str,
    service: CategoryService = Depends(get_category_service),
):
    """
    Delete a category. Packages referencing it are not changed.
    """
    await service.delete(category_id)
    return {"message": "Category deleted successfully"}


@router.post(
    "/{category_id}/subcategories",
    response_model=SubcategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_subcategory(
    category_id: str,
    name: str = Form(...),
    is_active: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: CategoryService = Depends(get_category_service),
):
    """
    Add a subcategory to a category
    """
    data = parse_form(CategoryInput, name=name, is_active=is_active)
    return subcategory_response(await service.add_subcategory(category_id, data, image))


@router.put("/{category_id}/subcategories/{sub_id}", response_model=SubcategoryResponse)
async def update_subcategory(
    category_id: str,
    sub_id: str,
    name: Optional[str] = Form(None),
    is_active: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: CategoryService = Depends(get_category_service),
):
    data = parse_form(CategoryInput, name=name, is_active=is_active)
    return subcategory_response(await service.update_subcategory(category_id, sub_id, data, image))


@router.patch("/{category_id}/subcategories/{sub_id}/toggle", response_model=SubcategoryResponse)
async def toggle_subcategory_status(
    category_id: str,
    sub_id: str,
    service: CategoryService = Depends(get_category_service),
):
    return subcategory_response(await service.toggle_subcategory(category_id, sub_id))


@router.delete("/{category_id}/subcategories/{sub_id}")
async def delete_subcategory(
    category_id: str,
    sub_id: str,
    service: CategoryService = Depends(get_category_service),
):
    await service.delete_subcategory(category_id, sub_id)
    return {"message": "Subcategory deleted successfully"}
