"""
Request tracing middleware.

Every request is logged once on completion with its status and latency.
The request id (caller-supplied X-Request-ID or a fresh short uuid) and
the requested category are bound to the log context so service-level
events such as "Ranked products" can be tied back to the request.
"""

import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging import bind_context, clear_context, get_logger


logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _category_of(request: Request) -> Optional[str]:
    category = request.query_params.get("category")
    if category:
        return category
    # /api/masks/{category}
    parts = request.url.path.strip("/").split("/")
    if len(parts) == 3 and parts[:2] == ["api", "masks"]:
        return parts[2]
    return None


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Binds request_id/method/path/category and echoes X-Request-ID."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}
        category = _category_of(request)
        if category:
            context["category"] = category
        bind_context(**context)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise
        else:
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "Request handled",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_context()
