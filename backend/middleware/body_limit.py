"""Request body size limit

Pure ASGI middleware: rejects requests whose declared Content-Length is over
the limit before the route runs, and stops reading chunked bodies as soon as
they cross it.
"""
from fastapi import HTTPException, status
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from backend.core.exceptions import PayloadTooLargeException
from backend.middleware.error_handler import api_error_response
from backend.utils.logger import get_logger

logger = get_logger(__name__)


class BodySizeLimitMiddleware:
    """Reject request bodies larger than `max_body_bytes`"""

    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_body_bytes:
            logger.warning(f"Rejected request body | path={scope['path']} | content_length={declared}")
            response = api_error_response(PayloadTooLargeException(self.max_body_bytes))
            await response(scope, receive, send)
            return

        received = 0
        response_started = False

        async def send_tracking(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        async def receive_limited() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    # Raised while a route reads its body: the app's HTTP
                    # exception handler turns it into a 413 response
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail=f"Request body exceeds {self.max_body_bytes} bytes"
                    )
            return message

        try:
            await self.app(scope, receive_limited, send_tracking)
        except HTTPException as exc:
            # Only reached when a middleware read the body outside the routes
            if response_started or exc.status_code != status.HTTP_413_REQUEST_ENTITY_TOO_LARGE:
                raise
            logger.warning(f"Rejected streamed request body | path={scope['path']} | received={received}")
            await api_error_response(PayloadTooLargeException(self.max_body_bytes))(scope, receive, send)
