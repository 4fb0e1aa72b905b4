"""Request and response logging middleware

Logs every request and response with duration, status code and client IP.
In DEBUG mode, also logs JSON request/response bodies with inline images
truncated.
"""
import time
import json
from starlette.types import ASGIApp, Scope, Receive, Send, Message
from starlette.datastructures import Headers

from backend.utils.logger import get_logger
from backend.utils.log_helpers import sanitize_for_log
from backend.config import settings

logger = get_logger(__name__)


def _format_body(raw: bytes) -> str:
    """Render a body for the debug log"""
    text = raw.decode("utf-8", errors="replace")
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return text[:1000] + "..." if len(text) > 1000 else text
    return json.dumps(sanitize_for_log(parsed), indent=2, ensure_ascii=False)


class LoggingMiddleware:
    """Pure ASGI middleware for logging HTTP requests and responses

    Doesn't wrap responses like BaseHTTPMiddleware, so streaming responses
    pass through untouched.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = f"req_{int(time.time() * 1000)}"
        method = scope["method"]
        path = scope["path"]
        client_ip = scope["client"][0] if scope.get("client") else "unknown"
        headers = Headers(scope=scope)
        debug = settings.log_level == "DEBUG"

        logger.info(
            f"API Request | {method} {path} | "
            f"client_ip={client_ip} | request_id={request_id}"
        )

        if scope.get("query_string"):
            logger.debug(f"Query string | request_id={request_id} | query={scope['query_string'].decode('utf-8')}")

        if debug and method in ("POST", "PUT", "PATCH"):
            request_chunks = []

            async def receive_logged() -> Message:
                message = await receive()
                if message["type"] == "http.request":
                    request_chunks.append(message.get("body", b""))
                    if not message.get("more_body", False) and any(request_chunks):
                        logger.debug(
                            f"Request body | request_id={request_id} | "
                            f"content_type={headers.get('content-type', 'unknown')} | "
                            f"body={_format_body(b''.join(request_chunks))}"
                        )
                return message

            app_receive = receive_logged
        else:
            app_receive = receive

        start_time = time.time()
        status_code = 500
        response_chunks = []

        async def send_with_logging(message: Message) -> None:
            nonlocal status_code

            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers_list = list(message.get("headers", []))
                headers_list.append((b"x-request-id", request_id.encode()))
                headers_list.append((b"x-process-time", f"{time.time() - start_time:.3f}".encode()))
                message["headers"] = headers_list

            elif message["type"] == "http.response.body":
                if debug:
                    response_chunks.append(message.get("body", b""))

                if not message.get("more_body", False):
                    duration = time.time() - start_time
                    logger.info(
                        f"API Response | {method} {path} | "
                        f"status={status_code} | duration={duration:.3f}s | "
                        f"request_id={request_id}"
                    )
                    if debug and any(response_chunks):
                        logger.debug(
                            f"Response body | request_id={request_id} | status={status_code} | "
                            f"body={_format_body(b''.join(response_chunks))}"
                        )

            await send(message)

        try:
            await self.app(scope, app_receive, send_with_logging)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"API Error | {method} {path} | "
                f"error={type(e).__name__} | message={str(e)} | "
                f"duration={duration:.3f}s | request_id={request_id}"
            )
            raise
