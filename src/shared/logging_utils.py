import logging
from contextlib import contextmanager
from time import perf_counter
from typing import Any, Dict, Iterator, Optional


_LOGGER = logging.getLogger("around")


def log(level: int, post_id: Optional[str], event: str, /, **dimensions: Any) -> None:
    """Emit `event` with Application Insights custom dimensions.

    `post_id` and `event` are positional-only so post fields such as
    `message` or `user` can be passed as dimensions.
    """
    dims: Dict[str, Any] = {"postId": post_id} if post_id else {}
    dims.update(dimensions)
    try:
        _LOGGER.log(level, event, extra={"custom_dimensions": dims})
    except Exception:
        # Fallback if extra/custom_dimensions not supported in the environment
        _LOGGER.log(level, f"{event} | {dims}")


def info(post_id: Optional[str], event: str, /, **dimensions: Any) -> None:
    log(logging.INFO, post_id, event, **dimensions)


def warning(post_id: Optional[str], event: str, /, **dimensions: Any) -> None:
    log(logging.WARNING, post_id, event, **dimensions)


def error(post_id: Optional[str], event: str, /, **dimensions: Any) -> None:
    log(logging.ERROR, post_id, event, **dimensions)


@contextmanager
def timed(post_id: Optional[str], event: str, /, **dimensions: Any) -> Iterator[Dict[str, Any]]:
    """Log `event` at INFO with `durationMs` when the block completes.

    The yielded dict is the dimension set; the block may add to it (hit
    counts and the like). Nothing is logged if the block raises.
    """
    start = perf_counter()
    yield dimensions
    info(post_id, event, durationMs=int((perf_counter() - start) * 1000), **dimensions)
