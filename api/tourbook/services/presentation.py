"""
Presentation helpers - shape resolved packages and categories for site views.

Everything here is a pure transformation over serialized documents
(``id`` keys, string ids); nothing touches the database.
"""
from typing import Any, Dict, List, Optional, Sequence

from tourbook.config import settings

DELETED_CATEGORY = "Deleted Category"
ELLIPSIS = "..."


def short_description(text: Optional[str], words: Optional[int] = None) -> str:
    """First `words` words of the text, with an ellipsis when truncated"""
    words = settings.SHORT_DESCRIPTION_WORDS if words is None else words
    if not text:
        return ""
    parts = text.split()
    if len(parts) <= words:
        return " ".join(parts)
    return " ".join(parts[:words]) + ELLIPSIS


def is_direct(package: Dict[str, Any]) -> bool:
    """A direct package references a category but no subcategory"""
    return not package.get("sub_categories")


def references_category(package: Dict[str, Any], category_id: str) -> bool:
    for ref in package.get("categories") or []:
        ref_id = ref.get("id") if isinstance(ref, dict) else ref
        if str(ref_id) == category_id:
            return True
    return False


def newest_first(packages: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(packages, key=lambda p: str(p.get("created_at") or ""), reverse=True)


def decorate_package(package: Dict[str, Any], words: Optional[int] = None) -> Dict[str, Any]:
    """Add the denormalised display fields used by listing cards"""
    categories = package.get("categories") or []
    sub_categories = package.get("sub_categories") or []
    first_category = categories[0] if categories else {}
    first_sub = sub_categories[0] if sub_categories else {}

    return {
        **package,
        "category_name": first_category.get("name") or DELETED_CATEGORY,
        "category_image": first_category.get("image_url") or "",
        "sub_category_name": first_sub.get("name"),
        "sub_category_image": first_sub.get("image_url"),
        "short_description": short_description(package.get("description"), words),
    }


def group_by_category(
    categories: Sequence[Dict[str, Any]],
    packages: Sequence[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """
    Group packages under each category.

    Each entry carries the category's active subcategories, the packages that
    reference it (newest first), the direct packages among those and a count.
    """
    grouped = []
    for category in categories:
        category_packages = newest_first(
            [p for p in packages if references_category(p, category["id"])]
        )
        grouped.append({
            **category,
            "sub_categories": [
                sub for sub in category.get("sub_categories", []) if sub.get("is_active", True)
            ],
            "packages": category_packages,
            "direct_packages": [p for p in category_packages if is_direct(p)],
            "location_count": len(category_packages),
        })
    return grouped


def featured_category(
    grouped: Sequence[Dict[str, Any]],
    name: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """The grouping for the highlighted category, if that category is active"""
    name = settings.FEATURED_CATEGORY if name is None else name
    for entry in grouped:
        if entry.get("name") == name:
            return entry
    return None
