from time import perf_counter
import azure.functions as func

from src.shared.http_utils import error_response, json_response
from src.shared.logging_utils import info as log_info
from src.shared.services import get_services
from src.specs.common.errors import AroundError
from src.specs.http.search import SearchRequest, SearchResponse


bp = func.Blueprint()


@bp.function_name(name="search")
@bp.route(route="search", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def search(req: func.HttpRequest) -> func.HttpResponse:
    start = perf_counter()
    parsed = SearchRequest(
        lat=req.params.get("lat"),
        lon=req.params.get("lon"),
        range=req.params.get("range") or None,
    )
    log_info(None, "search:request", lat=parsed.lat, lon=parsed.lon, range=parsed.range)

    try:
        posts = get_services().search.search(parsed.lat, parsed.lon, parsed.range)
    except AroundError as exc:
        return error_response(exc)

    duration_ms = int((perf_counter() - start) * 1000)
    log_info(None, "search:responded", count=len(posts), durationMs=duration_ms)
    return json_response(SearchResponse(posts).model_dump_json())
