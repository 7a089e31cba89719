from typing import Any

from azure.core.exceptions import AzureError
from azure.data.tables import TableServiceClient, UpdateMode

from src.shared.config import AroundSettings
from src.shared.logging_utils import info as log_info
from src.specs.common.errors import SecondaryStoreFailure
from src.specs.models.post import Post

PARTITION = "post"


class TablePostMirror:
    """Wide-column copy of posts in Azure Table Storage, one row per post id."""

    def __init__(self, table_client: Any):
        self._table = table_client

    @classmethod
    def from_settings(cls, settings: AroundSettings) -> "TablePostMirror":
        conn = settings.require("table_connection_string")
        service = TableServiceClient.from_connection_string(conn)
        return cls(service.create_table_if_not_exists(settings.table_name))

    def put(self, post: Post) -> None:
        entity = {
            "PartitionKey": PARTITION,
            "RowKey": post.id,
            "user": post.user,
            "message": post.message,
            "lat": post.location.lat,
            "lon": post.location.lon,
            "url": post.url,
        }
        try:
            self._table.upsert_entity(entity=entity, mode=UpdateMode.REPLACE)
        except AzureError as exc:
            raise SecondaryStoreFailure(f"Failed to mirror post {post.id}") from exc
        log_info(post.id, "table:posts:upsert")
