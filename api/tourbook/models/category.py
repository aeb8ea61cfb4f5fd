"""
Category & Subcategory Models
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId


@dataclass(frozen=True)
class Subcategory:
    """Value object embedded in exactly one Category, referenced elsewhere by id"""
    name: str
    image_url: str
    is_active: bool = True
    id: ObjectId = field(default_factory=ObjectId)

    def to_document(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "name": self.name,
            "image_url": self.image_url,
            "is_active": self.is_active,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Subcategory":
        return cls(
            id=doc["_id"],
            name=doc["name"],
            image_url=doc["image_url"],
            is_active=doc.get("is_active", True),
        )

    def __repr__(self):
        return f"<Subcategory {self.name} ({self.id})>"


@dataclass
class Category:
    name: str
    image_url: str
    is_active: bool = True
    sub_categories: List[Subcategory] = field(default_factory=list)
    id: ObjectId = field(default_factory=ObjectId)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def active_sub_categories(self) -> List[Subcategory]:
        return [sub for sub in self.sub_categories if sub.is_active]

    def find_sub_category(self, sub_id: ObjectId) -> Optional[Subcategory]:
        for sub in self.sub_categories:
            if sub.id == sub_id:
                return sub
        return None

    def replace_sub_category(self, sub_id: ObjectId, **changes) -> Subcategory:
        """Swap the embedded subcategory for an updated copy and return it"""
        for index, sub in enumerate(self.sub_categories):
            if sub.id == sub_id:
                updated = replace(sub, **changes)
                self.sub_categories[index] = updated
                return updated
        raise KeyError(sub_id)

    def to_document(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "name": self.name,
            "image_url": self.image_url,
            "is_active": self.is_active,
            "sub_categories": [sub.to_document() for sub in self.sub_categories],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Category":
        return cls(
            id=doc["_id"],
            name=doc["name"],
            image_url=doc["image_url"],
            is_active=doc.get("is_active", True),
            sub_categories=[Subcategory.from_document(s) for s in doc.get("sub_categories", [])],
            created_at=doc.get("created_at") or datetime.utcnow(),
            updated_at=doc.get("updated_at") or datetime.utcnow(),
        )

    def __repr__(self):
        return f"<Category {self.name} ({len(self.sub_categories)} subcategories)>"
