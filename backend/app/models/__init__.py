"""Database models."""

from app.models.store_blob import StoreBlob

__all__ = [
    "StoreBlob",
]
