import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

TRACE_ID_CTX_VAR: ContextVar[str] = ContextVar("trace_id", default="")
TRACE_HEADER = "x-trace-id"

logger = logging.getLogger("menova")


class TracingMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with a trace id (reusing a client-supplied one) and log
    method, path, status and duration once the response is ready.
    """
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = (request.headers.get(TRACE_HEADER) or "").strip()[:64] or str(uuid.uuid4())
        TRACE_ID_CTX_VAR.set(trace_id)
        request.state.trace_id = trace_id
        started = time.perf_counter()
        response = await call_next(request)

        response.headers[TRACE_HEADER] = trace_id
        logger.info({
            "function": "request",
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            "trace_id": trace_id,
        })
        return response
