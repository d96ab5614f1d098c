"""Versioned key-value store for whole-state JSON blobs."""

from typing import Any, Callable

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.store_blob import StoreBlob

logger = get_logger(__name__)


class KeyValueStore:
    """One JSON payload per store name, tagged with the store's version."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def load(self, name: str, version: int) -> dict[str, Any] | None:
        """
        Read a payload.

        Returns:
            The payload, or None if missing or written under another version
        """
        with self.session_factory() as db:
            blob = db.execute(select(StoreBlob).where(StoreBlob.name == name)).scalar_one_or_none()
            if blob is None:
                return None
            if blob.version != version:
                logger.warning(
                    "store_version_mismatch",
                    extra={"store": name, "stored_version": blob.version, "expected_version": version},
                )
                return None
            return dict(blob.payload)

    def save(self, name: str, version: int, payload: dict[str, Any]) -> None:
        """Insert or replace a payload."""
        self.save_many({name: (version, payload)})

    def save_many(self, blobs: dict[str, tuple[int, dict[str, Any]]]) -> None:
        """Write several payloads in one transaction."""
        with self.session_factory() as db:
            for name, (version, payload) in blobs.items():
                blob = db.get(StoreBlob, name)
                if blob is None:
                    db.add(StoreBlob(name=name, version=version, payload=payload))
                else:
                    blob.version = version
                    blob.payload = payload
            db.commit()

    def delete_all(self) -> None:
        with self.session_factory() as db:
            db.query(StoreBlob).delete()
            db.commit()
