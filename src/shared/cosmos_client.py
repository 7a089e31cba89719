# Cosmos DB geo index for posts

import logging
import backoff
from typing import Any, Dict, List
from azure.core.exceptions import AzureError
from azure.cosmos import CosmosClient, PartitionKey, exceptions

from src.shared.config import AroundSettings
from src.shared.logging_utils import info as log_info, error as log_error, timed as log_timed
from src.specs.common.errors import IndexWriteFailure, QueryBackendFailure
from src.specs.models.post import GeoPoint, Location, Post, PostDocument

# The spatial index must exist before the first write; documents written
# without it are not reachable through ST_DISTANCE.
POSTS_INDEXING_POLICY: Dict[str, Any] = {
    "indexingMode": "consistent",
    "automatic": True,
    "includedPaths": [{"path": "/*"}],
    "excludedPaths": [{"path": "/\"_etag\"/?"}],
    "spatialIndexes": [{"path": "/location/?", "types": ["Point"]}],
}

RADIUS_QUERY = "SELECT * FROM c WHERE ST_DISTANCE(c.location, @point) <= @meters"


class RetryableCosmosError(Exception):
    """Indicates a Cosmos DB operation that should be retried"""
    pass


class CosmosPostIndex:
    # Max retries and timeout configuration
    MAX_RETRIES = 3
    OPERATION_TIMEOUT = 10.0    # 10s
    # Read-your-writes holds per client; a query served by another worker
    # instance only sees the post once it has replicated.
    CONSISTENCY_LEVEL = "Session"

    def __init__(
        self,
        client: Any,
        database_name: str,
        posts_container: str = "post",
        users_container: str = "user",
    ):
        self.client = client
        self.database_name = database_name
        self.posts_container_name = posts_container
        self.users_container_name = users_container
        self._posts = None

    @classmethod
    def from_settings(cls, settings: AroundSettings) -> "CosmosPostIndex":
        conn = settings.require("cosmos_connection_string")
        client = CosmosClient.from_connection_string(
            conn,
            consistency_level=cls.CONSISTENCY_LEVEL,
            retry_total=cls.MAX_RETRIES,
        )
        return cls(
            client,
            settings.cosmos_database,
            posts_container=settings.cosmos_posts_container,
            users_container=settings.cosmos_users_container,
        )

    @property
    def posts(self) -> Any:
        if self._posts is None:
            database = self.client.get_database_client(self.database_name)
            self._posts = database.get_container_client(self.posts_container_name)
        return self._posts

    def ensure_schema(self) -> None:
        """
        Create the database, the posts container (with its spatial index) and
        the users container when missing. Safe to call repeatedly.
        """
        with log_timed(
            None,
            "cosmos:schema:ready",
            database=self.database_name,
            posts=self.posts_container_name,
            users=self.users_container_name,
        ):
            database = self.client.create_database_if_not_exists(id=self.database_name)
            self._posts = database.create_container_if_not_exists(
                id=self.posts_container_name,
                partition_key=PartitionKey(path="/id"),
                indexing_policy=POSTS_INDEXING_POLICY,
            )
            database.create_container_if_not_exists(
                id=self.users_container_name,
                partition_key=PartitionKey(path="/id"),
            )

    @backoff.on_exception(
        backoff.expo,
        RetryableCosmosError,
        max_tries=MAX_RETRIES,
        max_time=OPERATION_TIMEOUT
    )
    def _upsert(self, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return self.posts.upsert_item(body=body)
        except exceptions.CosmosHttpResponseError as e:
            if e.status_code in (429, 503):  # Too Many Requests or Service Unavailable
                logging.warning(f"Retryable error upserting post '{body.get('id')}': {e}")
                raise RetryableCosmosError(f"Retriable error upserting post: {str(e)}") from e
            raise

    def put(self, post: Post) -> None:
        """
        Upsert the index document for `post`, keyed by its id

        Raises:
            IndexWriteFailure: If the write is rejected or the index is unreachable
        """
        doc = PostDocument.from_post(post)
        try:
            self._upsert(doc.model_dump())
        except (AzureError, RetryableCosmosError) as exc:
            log_error(post.id, "cosmos:posts:upsert_failed", error=str(exc))
            raise IndexWriteFailure("Failed to save post to the index") from exc
        log_info(post.id, "cosmos:posts:upsert", container=self.posts_container_name)

    def query_radius(self, lat: float, lon: float, meters: float) -> List[Dict[str, Any]]:
        """
        Return raw documents whose location lies within `meters` of (lat, lon)

        Raises:
            QueryBackendFailure: On any transport or service error
        """
        point = GeoPoint.from_location(Location(lat=lat, lon=lon)).model_dump()
        try:
            with log_timed(None, "cosmos:posts:query", meters=meters) as dims:
                items = list(self.posts.query_items(
                    query=RADIUS_QUERY,
                    parameters=[
                        {"name": "@point", "value": point},
                        {"name": "@meters", "value": meters},
                    ],
                    enable_cross_partition_query=True,
                ))
                dims["hits"] = len(items)
        except AzureError as exc:
            log_error(None, "cosmos:posts:query_failed", error=str(exc))
            raise QueryBackendFailure("Failed to read posts from the index") from exc
        return items
