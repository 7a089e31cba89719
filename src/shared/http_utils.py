from typing import Optional

import azure.functions as func

from src.shared.logging_utils import error as log_error
from src.specs.common.errors import AroundError
from src.specs.common.error_response_spec import ErrorResponse

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
}

# Server-side failures get a fixed message so backend details stay internal
_PUBLIC_MESSAGES = {
    "CONFIGURATION_ERROR": "Service is not configured",
    "ASSET_STORE_FAILURE": "Failed to save image",
    "INDEX_WRITE_FAILURE": "Failed to save post",
    "QUERY_BACKEND_FAILURE": "Failed to read posts",
}


def request_field(req: func.HttpRequest, name: str) -> Optional[str]:
    """Form field first, then query string."""
    value = req.form.get(name)
    if value is None:
        value = req.params.get(name)
    return value


def json_response(body: str, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        body=body,
        mimetype="application/json",
        status_code=status_code,
        headers=dict(CORS_HEADERS),
    )


def error_response(exc: AroundError, post_id: Optional[str] = None) -> func.HttpResponse:
    status = 400 if exc.client_error else 500
    message = str(exc) if exc.client_error else _PUBLIC_MESSAGES.get(exc.code, "Internal error")
    log_error(post_id, "http:error", status=status, errorCode=exc.code, error=str(exc))
    err = ErrorResponse(message=message, errorCode=exc.code)
    return json_response(err.model_dump_json(), status_code=status)
