"""Pytest configuration and shared fixtures."""

import os

# Must be set before app.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"

import random
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from app.curriculum.index import CurriculumIndex
from app.db.base import Base
from app.db.engine import engine
from app.db.session import SessionLocal
from app.services.persistence import KeyValueStore
from app.state import AppState
from tests.helpers.factories import FakeClock


@pytest.fixture(scope="session")
def curriculum() -> CurriculumIndex:
    return CurriculumIndex.load()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def app_state(curriculum: CurriculumIndex, clock: FakeClock, rng: random.Random) -> AppState:
    return AppState.create(curriculum, "user-1", "Tester", clock=clock, rng=rng)


@pytest.fixture
def kv() -> Generator[KeyValueStore, None, None]:
    """Key-value store on the shared in-memory database, emptied per test."""
    Base.metadata.create_all(bind=engine)
    store = KeyValueStore(SessionLocal)
    store.delete_all()
    yield store
    store.delete_all()


@pytest.fixture
def client(kv: KeyValueStore) -> Generator[TestClient, None, None]:
    """API client over a fresh app; state starts empty for every test."""
    from app.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client
