import logging
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .errors import AppError, ErrorKind, error_response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log its start and completion.

    Exceptions that escape the routes are answered here as INTERNAL so the
    500 still carries the request id.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        logger.info(
            "request_started request_id=%s method=%s path=%s",
            request_id, request.method, request.url.path,
        )
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "unexpected error: request_id=%s path=%s", request_id, request.url.path,
                exc_info=exc,
            )
            response = error_response(AppError(ErrorKind.INTERNAL, message="An unexpected error occurred"))
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info("request_completed request_id=%s status=%s", request_id, response.status_code)
        return response
