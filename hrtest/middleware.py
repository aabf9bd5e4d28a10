import logging
import time
import uuid

from django.conf import settings

logger = logging.getLogger("hrtest.requests")

REQUEST_ID_HEADER = "X-Request-ID"
_STATIC_SUFFIXES = (".css", ".js", ".png", ".jpg", ".svg", ".ico", ".woff", ".woff2", ".map")


def _client_ip(request) -> str:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "unknown")


def _request_id(request) -> str:
    incoming = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    return incoming or uuid.uuid4().hex


def _is_static(path: str) -> bool:
    static_url = getattr(settings, "STATIC_URL", None) or "/static/"
    return path.startswith(static_url) or path.lower().endswith(_STATIC_SUFFIXES)


class RequestLoggingMiddleware:
    """
    Writes one log line per request with timing, user and client address,
    and propagates a correlation id through the X-Request-ID header.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if _is_static(request.path):
            return self.get_response(request)

        request_id = _request_id(request)
        request.request_id = request_id
        started = time.perf_counter()

        response = self.get_response(request)

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        response[REQUEST_ID_HEADER] = request_id

        user = getattr(request, "user", None)
        username = user.get_username() if user is not None and user.is_authenticated else "anonymous"
        query = request.META.get("QUERY_STRING", "")
        logger.info(
            "[REQ] %s %s%s | status=%s | ms=%s | user=%s | ip=%s | rid=%s",
            request.method,
            request.path,
            f"?{query}" if query else "",
            response.status_code,
            elapsed_ms,
            username,
            _client_ip(request),
            request_id,
        )
        return response
