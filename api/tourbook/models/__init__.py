"""MongoDB Document Models"""
from tourbook.models.category import Category, Subcategory
from tourbook.models.package import Package, TravelPlanEntry

__all__ = [
    "Category", "Subcategory", "Package", "TravelPlanEntry",
]
