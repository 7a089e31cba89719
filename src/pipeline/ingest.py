import uuid
from time import perf_counter
from typing import Any, Callable, Optional

from src.pipeline.parsing import parse_location
from src.shared.logging_utils import info as log_info, error as log_error
from src.shared.mirror import PostMirror
from src.shared.spam_filter import SpamFilter
from src.specs.common.errors import SpamRejected, ValidationDefect
from src.specs.models.post import Post, RawPost


def new_post_id() -> str:
    return uuid.uuid4().hex


class IngestionPipeline:
    """Write path: validate, filter, store the image, index the post, mirror.

    Steps run strictly in order and stop at the first failure. Nothing is
    rolled back: if indexing fails the uploaded image stays where it is.
    """

    def __init__(
        self,
        spam_filter: SpamFilter,
        asset_store: Any,
        index: Any,
        mirror: Optional[PostMirror] = None,
        *,
        strict_coordinates: bool = True,
        id_factory: Callable[[], str] = new_post_id,
    ):
        self.spam_filter = spam_filter
        self.asset_store = asset_store
        self.index = index
        self.mirror = mirror
        self.strict_coordinates = strict_coordinates
        self.id_factory = id_factory

    def ingest(self, raw: RawPost, image: bytes, content_type: Optional[str] = None) -> Post:
        start = perf_counter()
        location = parse_location(raw.lat, raw.lon, strict=self.strict_coordinates)
        if not raw.user:
            raise ValidationDefect("user is required", details={"field": "user"})
        if not image:
            raise ValidationDefect("Image is not available", details={"field": "image"})

        if self.spam_filter.is_filtered(raw.message):
            log_info(None, "ingest:spam_rejected", user=raw.user)
            raise SpamRejected()

        post = Post(
            id=self.id_factory(),
            user=raw.user,
            message=raw.message,
            location=location,
        )
        log_info(post.id, "ingest:accepted", user=post.user)

        # asset first: an indexed post must always have a resolvable url
        post.url = self.asset_store.put(post.id, image, content_type)
        log_info(post.id, "ingest:asset_stored", url=post.url)

        try:
            self.index.put(post)
        except Exception as exc:
            log_error(post.id, "ingest:index_failed", orphanedUrl=post.url, error=str(exc))
            raise
        log_info(post.id, "ingest:indexed", text=post.message)

        if self.mirror is not None:
            self.mirror.submit(post)

        log_info(post.id, "ingest:completed", durationMs=int((perf_counter() - start) * 1000))
        return post
