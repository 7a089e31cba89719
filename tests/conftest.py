"""
Shared fixtures: in-memory backends wired into a real pipeline and engine.
"""
from typing import List

import pytest

from src.pipeline.ingest import IngestionPipeline
from src.pipeline.search import QueryEngine
from src.shared.spam_filter import SpamFilter
from tests.fakes import FakeAssetStore, FakePostIndex, RecordingMirror


@pytest.fixture
def calls() -> List[str]:
    """Ordered log of backend calls shared by the fake stores."""
    return []


@pytest.fixture
def spam_filter() -> SpamFilter:
    return SpamFilter(["fuck", "100"])


@pytest.fixture
def asset_store(calls) -> FakeAssetStore:
    return FakeAssetStore(calls)


@pytest.fixture
def index(calls) -> FakePostIndex:
    return FakePostIndex(calls)


@pytest.fixture
def mirror() -> RecordingMirror:
    return RecordingMirror()


@pytest.fixture
def pipeline(spam_filter, asset_store, index, mirror) -> IngestionPipeline:
    return IngestionPipeline(spam_filter, asset_store, index, mirror)


@pytest.fixture
def engine(spam_filter, index) -> QueryEngine:
    return QueryEngine(spam_filter, index, default_radius="200km")


@pytest.fixture
def image() -> bytes:
    return b"\x89PNG\r\n\x1a\nfake-image-bytes"
