import json
from functools import lru_cache
import azure.functions as func

from src.shared.config import AroundSettings
from src.shared.logging_utils import info as log_info, error as log_error, timed as log_timed
from src.shared.table_store import TablePostMirror
from src.specs.queue.message import MirrorMessage


bp = func.Blueprint()


@lru_cache(maxsize=1)
def _get_settings() -> AroundSettings:
    return AroundSettings.from_env()


@lru_cache(maxsize=1)
def _get_store() -> TablePostMirror:
    return TablePostMirror.from_settings(_get_settings())


def mirror_message(body: str, store, queue: str = "post-mirror") -> None:
    """Write one queued post to the secondary store; failures are logged only."""
    msg = MirrorMessage(**json.loads(body))
    try:
        store.put(msg.post)
    except Exception as exc:
        log_error(msg.post.id, "mirror:failed", queue=queue, error=str(exc))


@bp.function_name(name="q_mirror_post")
@bp.queue_trigger(
    arg_name="msg",
    queue_name="%POST_MIRROR_QUEUE%",
    connection="AZURE_STORAGE_CONNECTION_STRING",
)
def q_mirror_post(msg: func.QueueMessage) -> None:
    queue = _get_settings().mirror_queue
    log_info(None, "queue:dequeued", queue=queue, messageId=getattr(msg, "id", None))
    with log_timed(None, "queue:processed", queue=queue):
        mirror_message(msg.get_body().decode("utf-8"), _get_store(), queue=queue)
