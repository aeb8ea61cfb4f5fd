"""
Admin Package Management Endpoints
"""
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from typing import List, Optional
import logging

from tourbook.config import settings
from tourbook.schemas.package import (
    PackageCreate,
    PackageListResponse,
    PackageResponse,
    PackageUpdate,
)
from tourbook.services.package_service import PackageService
from tourbook.utils.dependencies import get_package_service, parse_form

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
async def create_package(
    title: str = Form(...),
    destination: str = Form(...),
    duration: str = Form(...),
    tour_type: str = Form(...),
    group_size: str = Form(...),
    tour_guide: str = Form(...),
    description: str = Form(...),
    location_href: str = Form(...),
    categories: List[str] = Form(..., description="Category ids, repeated or JSON-encoded"),
    sub_categories: Optional[List[str]] = Form(None),
    price: Optional[str] = Form(None),
    included: Optional[List[str]] = Form(None),
    travel_plan: Optional[List[str]] = Form(None, description="JSON list of {day, description}"),
    is_active: Optional[str] = Form(None),
    images: List[UploadFile] = File(default=[], description="2 to 5 images"),
    service: PackageService = Depends(get_package_service),
):
    """
    Create a tour package with its images
    """
    data = parse_form(
        PackageCreate,
        title=title,
        destination=destination,
        duration=duration,
        tour_type=tour_type,
        group_size=group_size,
        tour_guide=tour_guide,
        description=description,
        location_href=location_href,
        categories=categories,
        sub_categories=sub_categories,
        price=price,
        included=included,
        travel_plan=travel_plan,
        is_active=is_active,
    )
    return await service.create(data, images)


@router.get("", response_model=PackageListResponse)
async def list_packages(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, description="Title, destination, category or subcategory name"),
    service: PackageService = Depends(get_package_service),
):
    """
    List all packages, active or not
    """
    result = await service.list_admin(page=page, limit=limit, search=search)
    return PackageListResponse(
        packages=result.items,
        total_pages=result.total_pages,
        current_page=result.page,
        total_count=result.total,
    )


@router.get("/{package_id}", response_model=PackageResponse)
async def get_package(
    package_id: str,
    service: PackageService = Depends(get_package_service),
):
    """
    Get a single package
    """
    return await service.get(package_id)


@router.put("/{package_id}", response_model=PackageResponse)
async def update_package(
    package_id: str,
    request: Request,
    title: Optional[str] = Form(None),
    destination: Optional[str] = Form(None),
    duration: Optional[str] = Form(None),
    tour_type: Optional[str] = Form(None),
    group_size: Optional[str] = Form(None),
    tour_guide: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    location_href: Optional[str] = Form(None),
    categories: Optional[List[str]] = Form(None),
    sub_categories: Optional[List[str]] = Form(None),
    price: Optional[str] = Form(None),
    included: Optional[List[str]] = Form(None),
    travel_plan: Optional[List[str]] = Form(None),
    is_active: Optional[str] = Form(None, description="Checkbox value, e.g. 'on'"),
    images: List[UploadFile] = File(default=[], description="Replaces all images when given"),
    service: PackageService = Depends(get_package_service),
):
    """
    Update a package. Only the fields sent are changed; a blank price
    clears it.
    """
    # FastAPI reports blank form values as missing
    if price is None and "price" in await request.form():
        price = ""

    data = parse_form(
        PackageUpdate,
        title=title,
        destination=destination,
        duration=duration,
        tour_type=tour_type,
        group_size=group_size,
        tour_guide=tour_guide,
        description=description,
        location_href=location_href,
        categories=categories,
        sub_categories=sub_categories,
        price=price,
        included=included,
        travel_plan=travel_plan,
        is_active=is_active,
    )
    return await service.update(package_id, data, images)


@router.patch("/{package_id}/toggle", response_model=PackageResponse)
async def toggle_package_status(
    package_id: str,
    service: PackageService = Depends(get_package_service),
):
    """
    Flip the package's active flag
    """
    return await service.toggle(package_id)


@router.delete("/{package_id}")
async def delete_package(
    package_id: str,
    service: PackageService = Depends(get_package_service),
):
    """
    Delete a package and release its images
    """
    await service.delete(package_id)
    return {"message": "Package deleted successfully"}
