"""Persisted state blobs (one row per client-side store)."""

from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.db.base import Base


class StoreBlob(Base):
    """Whole-state JSON snapshot of a single store, keyed by store name.

    The version column lets a store discard a snapshot written by an
    incompatible release instead of migrating it.
    """

    __tablename__ = "store_blobs"

    name = Column(String(100), primary_key=True)  # e.g. "learnsmart-tests"
    version = Column(Integer, nullable=False, default=0)
    payload = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
