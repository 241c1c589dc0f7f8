import logging
import re
import time

from ridepool.logging import new_request_id, request_context

logger = logging.getLogger(__name__)

# Client-supplied request and trip ids end up in log lines and response headers.
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _safe_token(value: str) -> str:
    candidate = (value or "").strip()
    return candidate if _REQUEST_ID_PATTERN.match(candidate) else ""


def _incoming_request_id(request) -> str:  # noqa: ANN001
    return _safe_token(request.headers.get("X-Request-ID", "")) or new_request_id()


class RequestContextMiddleware:
    def __init__(self, get_response):  # noqa: ANN001
        self.get_response = get_response

    def __call__(self, request):  # noqa: ANN001
        request_id = _incoming_request_id(request)
        started = time.monotonic()
        with request_context(
            request_id=request_id,
            trip_id=_safe_token(request.headers.get("X-Trip-ID", "")),
            client_ip=request.META.get("REMOTE_ADDR", ""),
        ):
            response = self.get_response(request)
            logger.debug(
                "%s %s -> %s in %.1fms",
                request.method,
                request.path,
                response.status_code,
                (time.monotonic() - started) * 1000,
            )
        response["X-Request-ID"] = request_id
        return response
