from time import perf_counter
from typing import Any, List, Optional

from pydantic import ValidationError

from src.pipeline.parsing import parse_distance, parse_location
from src.shared.logging_utils import info as log_info, error as log_error
from src.shared.spam_filter import SpamFilter
from src.specs.common.errors import QueryBackendFailure
from src.specs.models.post import Post, PostDocument


class QueryEngine:
    """Read path: one geo-radius query, strict decoding, spam re-filtering.

    Hits keep the order the index returns them in.
    """

    def __init__(
        self,
        spam_filter: SpamFilter,
        index: Any,
        *,
        default_radius: str = "200km",
        strict_coordinates: bool = True,
    ):
        self.spam_filter = spam_filter
        self.index = index
        self.default_radius = default_radius
        self.strict_coordinates = strict_coordinates

    def search(self, lat: Optional[str], lon: Optional[str], radius: Optional[str] = None) -> List[Post]:
        start = perf_counter()
        location = parse_location(lat, lon, strict=self.strict_coordinates)
        meters = parse_distance(radius if radius else self.default_radius)

        hits = self.index.query_radius(location.lat, location.lon, meters)

        posts: List[Post] = []
        dropped = 0
        for hit in hits:
            try:
                post = PostDocument.model_validate(hit).to_post()
            except ValidationError as exc:
                log_error(
                    hit.get("id") if isinstance(hit, dict) else None,
                    "search:bad_hit",
                    error=str(exc),
                )
                raise QueryBackendFailure("Index returned a malformed post document") from exc
            if self.spam_filter.is_filtered(post.message):
                dropped += 1
                continue
            posts.append(post)

        log_info(
            None,
            "search:completed",
            lat=location.lat,
            lon=location.lon,
            meters=meters,
            returned=len(posts),
            filtered=dropped,
            durationMs=int((perf_counter() - start) * 1000),
        )
        return posts
