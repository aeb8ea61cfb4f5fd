"""
Tour Package Model
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId


@dataclass
class TravelPlanEntry:
    day: str
    description: str


@dataclass
class Package:
    title: str
    destination: str
    duration: str
    tour_type: str
    group_size: int
    tour_guide: str
    description: str
    location_href: str
    categories: List[ObjectId]
    images: List[str]
    sub_categories: List[ObjectId] = field(default_factory=list)
    price: Optional[float] = None
    included: List[str] = field(default_factory=list)
    travel_plan: List[TravelPlanEntry] = field(default_factory=list)
    is_active: bool = True
    id: ObjectId = field(default_factory=ObjectId)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def to_document(self) -> Dict[str, Any]:
        doc = asdict(self)
        doc["_id"] = doc.pop("id")
        return doc

    def __repr__(self):
        return f"<Package {self.title} to {self.destination}>"
