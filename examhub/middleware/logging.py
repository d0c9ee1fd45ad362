import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line per request, tagged with the request id.

    The id is taken from the incoming ``X-Request-ID`` header when a gateway
    already set one, echoed back on the response, and reused by the exception
    handlers so an error body can be matched to its log line.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"[{request_id}] {request.method} {request.url.path} - unhandled {type(exc).__name__}",
                extra={"request_id": request_id, "duration_ms": self._elapsed_ms(started)}
            )
            raise

        duration_ms = self._elapsed_ms(started)
        # Set by the exception handlers for domain errors
        error_code = getattr(request.state, "error_code", None)
        outcome = f" [{error_code}]" if error_code else ""

        logger.log(
            logging.WARNING if response.status_code >= 400 else logging.INFO,
            f"[{request_id}] {request.method} {request.url.path} - {response.status_code}{outcome} ({duration_ms}ms)",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "error_code": error_code,
                "duration_ms": duration_ms
            }
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return round((time.perf_counter() - started) * 1000, 2)
