"""
Background mirroring of accepted posts to the secondary store.

The request path only ever calls `submit`, which never raises and never
waits on the secondary store.
"""
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Optional, Protocol

from src.shared.logging_utils import error as log_error, info as log_info, warning as log_warning
from src.specs.models.post import Post
from src.specs.queue.message import MirrorMessage


class PostMirror(Protocol):
    def submit(self, post: Post) -> Optional[Future]:
        ...


class ExecutorMirror:
    """In-process mirror: a small thread pool with a cap on queued work.

    When `max_pending` posts are already waiting the new one is dropped
    and logged instead of blocking the caller.
    """

    def __init__(self, store: Any, max_workers: int = 4, max_pending: int = 64):
        self._store = store
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="post-mirror")
        self._slots = threading.BoundedSemaphore(max_pending)

    def submit(self, post: Post) -> Optional[Future]:
        if not self._slots.acquire(blocking=False):
            log_warning(post.id, "mirror:dropped", reason="backlog_full")
            return None
        try:
            return self._executor.submit(self._run, post)
        except RuntimeError as exc:
            self._slots.release()
            log_error(post.id, "mirror:dropped", reason="executor_shutdown", error=str(exc))
            return None

    def _run(self, post: Post) -> None:
        try:
            self._store.put(post)
            log_info(post.id, "mirror:stored")
        except Exception as exc:
            log_error(post.id, "mirror:failed", error=str(exc))
        finally:
            self._slots.release()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


class QueueMirror:
    """Hands posts to a storage queue; `q_mirror_post` does the actual write."""

    def __init__(self, queue_client: Any):
        self._queue = queue_client

    def submit(self, post: Post) -> Optional[Future]:
        try:
            self._queue.send_message(MirrorMessage(post=post).model_dump_json())
            log_info(post.id, "mirror:enqueued")
        except Exception as exc:
            log_error(post.id, "mirror:enqueue_failed", error=str(exc))
        return None
