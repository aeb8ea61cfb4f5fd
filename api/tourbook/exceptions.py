"""
Domain Errors - mapped to HTTP responses in main.py
"""
from typing import Optional


class TourbookError(Exception):
    """Base class for errors that carry an HTTP status"""
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(TourbookError):
    """Malformed input or a broken consistency rule. Nothing was written."""
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class NotFoundError(TourbookError):
    """Requested package, category or subcategory does not exist"""
    status_code = 404


class AssetStoreError(TourbookError):
    """Raised when an image could not be stored"""
    status_code = 502

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)
