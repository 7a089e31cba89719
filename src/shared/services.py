from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from src.pipeline.ingest import IngestionPipeline
from src.pipeline.search import QueryEngine
from src.shared.blob_store import BlobAssetStore
from src.shared.config import AroundSettings
from src.shared.cosmos_client import CosmosPostIndex
from src.shared.mirror import ExecutorMirror, PostMirror, QueueMirror
from src.shared.queue_client import get_queue_client
from src.shared.spam_filter import SpamFilter
from src.shared.table_store import TablePostMirror


@dataclass
class Services:
    settings: AroundSettings
    index: CosmosPostIndex
    ingestion: IngestionPipeline
    search: QueryEngine


def build_mirror(settings: AroundSettings) -> Optional[PostMirror]:
    if settings.mirror_mode == "thread":
        return ExecutorMirror(
            TablePostMirror.from_settings(settings),
            max_workers=settings.mirror_max_workers,
            max_pending=settings.mirror_max_pending,
        )
    if settings.mirror_mode == "queue":
        conn = settings.require("table_connection_string")
        return QueueMirror(get_queue_client(conn, settings.mirror_queue))
    return None


def build_services(settings: AroundSettings) -> Services:
    spam_filter = SpamFilter(settings.spam_words)
    index = CosmosPostIndex.from_settings(settings)
    ingestion = IngestionPipeline(
        spam_filter,
        BlobAssetStore.from_settings(settings),
        index,
        build_mirror(settings),
        strict_coordinates=settings.strict_coordinates,
    )
    search = QueryEngine(
        spam_filter,
        index,
        default_radius=settings.default_radius,
        strict_coordinates=settings.strict_coordinates,
    )
    return Services(settings=settings, index=index, ingestion=ingestion, search=search)


# One set of SDK clients per worker process
@lru_cache(maxsize=1)
def get_services() -> Services:
    return build_services(AroundSettings.from_env())
