from time import perf_counter
import azure.functions as func

from src.shared.http_utils import CORS_HEADERS, error_response, request_field
from src.shared.logging_utils import info as log_info
from src.shared.services import get_services
from src.specs.common.errors import AroundError, ValidationDefect
from src.specs.models.post import RawPost


bp = func.Blueprint()

# Set by App Service authentication in front of the function host
PRINCIPAL_HEADER = "X-MS-CLIENT-PRINCIPAL-NAME"


@bp.function_name(name="post")
@bp.route(route="post", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def post(req: func.HttpRequest) -> func.HttpResponse:
    start = perf_counter()
    log_info(None, "post:request")

    image = req.files.get("image")
    if image is None:
        return error_response(ValidationDefect("Image is not available"))

    raw = RawPost(
        user=req.headers.get(PRINCIPAL_HEADER) or request_field(req, "user") or "",
        message=request_field(req, "message") or "",
        lat=request_field(req, "lat"),
        lon=request_field(req, "lon"),
    )

    try:
        stored = get_services().ingestion.ingest(raw, image.read(), image.content_type)
    except AroundError as exc:
        return error_response(exc)

    duration_ms = int((perf_counter() - start) * 1000)
    log_info(stored.id, "post:saved", durationMs=duration_ms)
    return func.HttpResponse(status_code=200, headers=dict(CORS_HEADERS))
