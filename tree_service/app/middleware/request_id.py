"""Request ID middleware for per-request tracking.

The ID comes from the ``X-Request-ID`` header or is generated as a UUID4.
It is stored on ``request.state.request_id``, put into the logging context
together with the method and path, and echoed in the response header.
Error responses carry the same ID as ``request_id`` next to ``event_id``.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from starlette.datastructures import Headers, MutableHeaders

from tree_service.infra.logging.context import clear_log_context, set_log_context

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send


class RequestIDMiddleware:
    """Pure ASGI middleware; install it outermost.

    Usage:
        app = FastAPI()
        app.add_middleware(RequestIDMiddleware)

        @app.get("/")
        async def root(request: Request):
            return {"request_id": request.state.request_id}
    """

    header_name = "x-request-id"

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(self.header_name) or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id
        set_log_context(request_id=request_id, method=scope["method"], path=scope["path"])

        async def send_with_header(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message).append(self.header_name, request_id)
            await send(message)

        try:
            await self.app(scope, receive, send_with_header)
        finally:
            clear_log_context()
