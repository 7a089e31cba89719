from unittest.mock import MagicMock, patch

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError

from src.shared.cosmos_client import CosmosPostIndex, POSTS_INDEXING_POLICY, RADIUS_QUERY
from src.specs.common.errors import IndexWriteFailure, QueryBackendFailure
from src.specs.models.post import Location, Post


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def posts_container(client):
    return client.get_database_client.return_value.get_container_client.return_value


@pytest.fixture
def index(client):
    return CosmosPostIndex(client, "around", posts_container="post", users_container="user")


def _post():
    return Post(id="p1", user="alice", message="hello", location=Location(lat=37.7, lon=-122.4), url="https://x/p1")


def test_ensure_schema_declares_spatial_index(client, index):
    index.ensure_schema()

    client.create_database_if_not_exists.assert_called_once_with(id="around")
    db = client.create_database_if_not_exists.return_value
    first, second = db.create_container_if_not_exists.call_args_list
    assert first.kwargs["id"] == "post"
    assert first.kwargs["indexing_policy"] is POSTS_INDEXING_POLICY
    assert {"path": "/location/?", "types": ["Point"]} in POSTS_INDEXING_POLICY["spatialIndexes"]
    assert second.kwargs["id"] == "user"
    assert index.posts is db.create_container_if_not_exists.return_value


def test_put_upserts_geojson_document(index, posts_container):
    index.put(_post())

    posts_container.upsert_item.assert_called_once_with(body={
        "id": "p1",
        "user": "alice",
        "message": "hello",
        "location": {"type": "Point", "coordinates": [-122.4, 37.7]},
        "url": "https://x/p1",
    })


def test_put_rejected_is_index_failure(index, posts_container):
    posts_container.upsert_item.side_effect = CosmosHttpResponseError(status_code=400, message="bad request")

    with pytest.raises(IndexWriteFailure):
        index.put(_post())
    assert posts_container.upsert_item.call_count == 1


def test_put_retries_throttling(index, posts_container):
    posts_container.upsert_item.side_effect = [
        CosmosHttpResponseError(status_code=429, message="too many requests"),
        {"id": "p1"},
    ]
    with patch("time.sleep"):
        index.put(_post())
    assert posts_container.upsert_item.call_count == 2


def test_put_gives_up_after_max_retries(index, posts_container):
    posts_container.upsert_item.side_effect = CosmosHttpResponseError(status_code=503, message="unavailable")
    with patch("time.sleep"):
        with pytest.raises(IndexWriteFailure):
            index.put(_post())
    assert posts_container.upsert_item.call_count == CosmosPostIndex.MAX_RETRIES


def test_query_radius_parameters(index, posts_container):
    posts_container.query_items.return_value = iter([{"id": "p1"}])

    hits = index.query_radius(37.7, -122.4, 1000.0)

    assert hits == [{"id": "p1"}]
    kwargs = posts_container.query_items.call_args.kwargs
    assert kwargs["query"] == RADIUS_QUERY
    assert kwargs["parameters"] == [
        {"name": "@point", "value": {"type": "Point", "coordinates": [-122.4, 37.7]}},
        {"name": "@meters", "value": 1000.0},
    ]
    assert kwargs["enable_cross_partition_query"] is True


def test_query_error_is_backend_failure(index, posts_container):
    posts_container.query_items.side_effect = CosmosHttpResponseError(status_code=500, message="boom")
    with pytest.raises(QueryBackendFailure):
        index.query_radius(0.0, 0.0, 10.0)


def test_from_settings_uses_session_consistency():
    from src.shared.config import AroundSettings

    settings = AroundSettings(cosmos_connection_string="AccountEndpoint=https://x/;AccountKey=a2V5;")
    with patch("src.shared.cosmos_client.CosmosClient") as cosmos_cls:
        index = CosmosPostIndex.from_settings(settings)

    kwargs = cosmos_cls.from_connection_string.call_args.kwargs
    assert kwargs["consistency_level"] == "Session"
    assert kwargs["retry_total"] == CosmosPostIndex.MAX_RETRIES
    assert index.client is cosmos_cls.from_connection_string.return_value
