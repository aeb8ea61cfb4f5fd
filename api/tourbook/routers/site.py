"""
Public Site Endpoints - view data for the home, listing and detail pages
"""
from fastapi import APIRouter, Depends, Query
from typing import Optional
import logging

from tourbook.config import settings
from tourbook.exceptions import NotFoundError, ValidationError
from tourbook.schemas.package import PackageFilter
from tourbook.services.category_service import CategoryService
from tourbook.services.content_service import ContentService
from tourbook.services.package_service import PackageService
from tourbook.services.presentation import (
    decorate_package,
    featured_category,
    group_by_category,
)
from tourbook.utils.dependencies import (
    get_banner_service,
    get_blog_service,
    get_category_service,
    get_gallery_service,
    get_package_service,
    get_testimonial_service,
)
from tourbook.utils.serialization import object_id_or_none, serialize_doc

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/")
async def home(
    categories: CategoryService = Depends(get_category_service),
    packages: PackageService = Depends(get_package_service),
    banners: ContentService = Depends(get_banner_service),
    blogs: ContentService = Depends(get_blog_service),
    testimonials: ContentService = Depends(get_testimonial_service),
):
    """
    Home page: banners, packages grouped by category, featured packages,
    latest blogs and testimonials
    """
    active_categories = await categories.list_active()
    decorated = [decorate_package(p) for p in await packages.list_active()]
    grouped = group_by_category(active_categories, decorated)

    return {
        "banners": await banners.latest(active_only=True),
        "categories": grouped,
        "featured_category": featured_category(grouped),
        "packages": decorated,
        "featured_packages": decorated[:settings.FEATURED_PACKAGES],
        "blogs": await blogs.latest(settings.HOME_BLOGS),
        "testimonials": await testimonials.latest(settings.HOME_TESTIMONIALS),
    }


@router.get("/about")
async def about(
    categories: CategoryService = Depends(get_category_service),
    blogs: ContentService = Depends(get_blog_service),
    gallery: ContentService = Depends(get_gallery_service),
    testimonials: ContentService = Depends(get_testimonial_service),
):
    return {
        "categories": await categories.list_active(),
        "blogs": await blogs.latest(settings.HOME_BLOGS),
        "gallery": await gallery.latest(settings.ABOUT_GALLERY_ITEMS),
        "testimonials": await testimonials.latest(settings.HOME_TESTIMONIALS),
    }


@router.get("/blogs")
async def list_blogs(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    categories: CategoryService = Depends(get_category_service),
    blogs: ContentService = Depends(get_blog_service),
):
    result = await blogs.page(page, limit)
    return {
        "blogs": result.items,
        "categories": await categories.list_active(),
        "current_page": result.page,
        "total_pages": result.total_pages,
    }


@router.get("/blogs/{blog_id}")
async def blog_details(
    blog_id: str,
    categories: CategoryService = Depends(get_category_service),
    blogs: ContentService = Depends(get_blog_service),
):
    """
    A blog post with up to three other recent posts
    """
    if object_id_or_none(blog_id) is None:
        raise ValidationError("Invalid blog id", field="blog_id")

    return {
        "blog": await blogs.get(blog_id),
        "related_blogs": await blogs.latest(3, exclude=blog_id),
        "categories": await categories.list_active(),
    }


@router.get("/gallery")
async def gallery_page(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    categories: CategoryService = Depends(get_category_service),
    gallery: ContentService = Depends(get_gallery_service),
):
    result = await gallery.page(page, limit)
    return {
        "gallery": result.items,
        "categories": await categories.list_active(),
        "current_page": result.page,
        "total_pages": result.total_pages,
    }


@router.get("/packages")
async def list_packages(
    destination: Optional[str] = Query(None, description="Case-insensitive substring"),
    category: Optional[str] = Query(None, description="Category id"),
    sub_category: Optional[str] = Query(None, description="Subcategory id"),
    duration: Optional[str] = Query(None),
    tour_type: Optional[str] = Query(None),
    min_group_size: Optional[int] = Query(None, ge=0),
    max_group_size: Optional[int] = Query(None, ge=0),
    search: Optional[str] = Query(None, description="Ignored when shorter than 3 characters"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    categories: CategoryService = Depends(get_category_service),
    packages: PackageService = Depends(get_package_service),
):
    """
    Filterable, paginated list of active packages
    """
    filters = PackageFilter(
        destination=destination,
        category=category,
        sub_category=sub_category,
        duration=duration,
        tour_type=tour_type,
        min_group_size=min_group_size,
        max_group_size=max_group_size,
        search=search,
        page=page,
        limit=limit,
    )
    result = await packages.list_public(filters)

    active_categories = await categories.list_active()
    selected_category = None
    if category:
        selected_category = next(
            (c["name"] for c in active_categories if c["id"] == category), None
        )

    return {
        "packages": [decorate_package(p) for p in result.items],
        "categories": active_categories,
        "selected_category": selected_category,
        "current_page": result.page,
        "total_pages": result.total_pages,
        "total_count": result.total,
        "filters": filters.model_dump(exclude_none=True),
    }


@router.get("/packages/{package_id}")
async def package_details(
    package_id: str,
    categories: CategoryService = Depends(get_category_service),
    packages: PackageService = Depends(get_package_service),
):
    return {
        "package": decorate_package(await packages.get_public(package_id)),
        "categories": await categories.list_active(),
    }


@router.get("/package-details")
async def package_by_subcategory(
    sub_category: str = Query(..., description="Subcategory id"),
    categories: CategoryService = Depends(get_category_service),
    packages: PackageService = Depends(get_package_service),
):
    """
    The subcategory, its parent category and the newest active package in it
    """
    parent = await categories.find_by_subcategory_id(sub_category)
    if parent is None:
        raise NotFoundError("Subcategory not found")
    sub = parent.find_sub_category(object_id_or_none(sub_category))

    package = await packages.newest_in_sub_category(sub.id)
    if package is None:
        raise NotFoundError("No packages found in this subcategory")

    return {
        "package": decorate_package(package),
        "sub_category": serialize_doc(sub.to_document()),
        "parent_category": {"id": str(parent.id), "name": parent.name},
        "categories": await categories.list_active(),
    }
