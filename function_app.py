import os
import logging
import azure.functions as func

from src.function_blueprints.http_post import bp as post_bp
from src.function_blueprints.http_search import bp as search_bp
from src.function_blueprints.q_mirror_post import bp as mirror_bp
from src.shared.config import AroundSettings
from src.shared.cosmos_client import CosmosPostIndex

app = func.FunctionApp()


def _configure_logging() -> None:
    lvl = (os.getenv("AZURE_SDK_LOG_LEVEL") or "").upper()
    if lvl:
        level = getattr(logging, lvl, logging.INFO)
        logging.getLogger("azure").setLevel(level)
        logging.getLogger("azure.cosmos").setLevel(level)
    logging.getLogger("around").setLevel(logging.INFO)


def _provision_schema() -> None:
    settings = AroundSettings.from_env()
    if not settings.provision_on_startup or not settings.cosmos_connection_string:
        return
    # Fail the worker at start rather than serve a container without a geo index
    CosmosPostIndex.from_settings(settings).ensure_schema()


_configure_logging()
_provision_schema()

app.register_functions(post_bp)
app.register_functions(search_bp)
app.register_functions(mirror_bp)
