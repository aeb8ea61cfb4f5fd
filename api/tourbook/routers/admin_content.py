"""
Admin Site Content Endpoints - banners, blogs, gallery, testimonials
"""
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from typing import Any, Dict, Optional
import logging

from tourbook.config import settings
from tourbook.schemas.content import (
    BannerCreate,
    BlogCreate,
    ContentListResponse,
    GalleryItemCreate,
    TestimonialCreate,
)
from tourbook.services.content_service import ContentService
from tourbook.utils.dependencies import (
    get_banner_service,
    get_blog_service,
    get_gallery_service,
    get_testimonial_service,
    parse_form,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def add_common_routes(prefix: str, get_service, label: str):
    """List, get, toggle and delete routes shared by every content type"""

    @router.get(prefix, response_model=ContentListResponse, name=f"list_{label}")
    async def list_items(
        page: int = Query(1, ge=1),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        service: ContentService = Depends(get_service),
    ):
        result = await service.page(page, limit)
        return ContentListResponse(
            items=result.items,
            total_pages=result.total_pages,
            current_page=result.page,
            total_count=result.total,
        )

    @router.get(prefix + "/{item_id}", name=f"get_{label}")
    async def get_item(item_id: str, service: ContentService = Depends(get_service)):
        return await service.get(item_id)

    @router.patch(prefix + "/{item_id}/toggle", name=f"toggle_{label}")
    async def toggle_item(item_id: str, service: ContentService = Depends(get_service)):
        return await service.toggle(item_id)

    @router.delete(prefix + "/{item_id}", name=f"delete_{label}")
    async def delete_item(item_id: str, service: ContentService = Depends(get_service)):
        await service.delete(item_id)
        return {"message": "Deleted successfully"}


@router.post("/banners", status_code=status.HTTP_201_CREATED)
async def create_banner(
    title: str = Form(...),
    subtitle: Optional[str] = Form(None),
    link: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: ContentService = Depends(get_banner_service),
) -> Dict[str, Any]:
    data = parse_form(BannerCreate, title=title, subtitle=subtitle, link=link)
    return await service.create(data, image)


@router.post("/blogs", status_code=status.HTTP_201_CREATED)
async def create_blog(
    title: str = Form(...),
    content: str = Form(...),
    author: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: ContentService = Depends(get_blog_service),
) -> Dict[str, Any]:
    data = parse_form(BlogCreate, title=title, content=content, author=author)
    return await service.create(data, image)


@router.post("/gallery", status_code=status.HTTP_201_CREATED)
async def create_gallery_item(
    title: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: ContentService = Depends(get_gallery_service),
) -> Dict[str, Any]:
    data = parse_form(GalleryItemCreate, title=title)
    return await service.create(data, image)


@router.post("/testimonials", status_code=status.HTTP_201_CREATED)
async def create_testimonial(
    name: str = Form(...),
    message: str = Form(...),
    rating: Optional[int] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: ContentService = Depends(get_testimonial_service),
) -> Dict[str, Any]:
    data = parse_form(TestimonialCreate, name=name, message=message, rating=rating)
    return await service.create(data, image)


add_common_routes("/banners", get_banner_service, "banner")
add_common_routes("/blogs", get_blog_service, "blog")
add_common_routes("/gallery", get_gallery_service, "gallery_item")
add_common_routes("/testimonials", get_testimonial_service, "testimonial")
