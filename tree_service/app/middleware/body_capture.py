"""Request body capture middleware.

Keeps a bounded copy of JSON request bodies in ``scope["state"]`` so the
exception journal can record what the client sent. Exception handlers must
not read the body themselves: by the time they run, the route has already
consumed the receive channel.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

STATE_KEY = "request_body"


class RequestBodyCaptureMiddleware:
    """Copy the first ``max_bytes`` of JSON request bodies into request state.

    Pure ASGI middleware: the receive channel is wrapped, never drained, so
    streaming to the route is unchanged.

    Usage:
        app.add_middleware(RequestBodyCaptureMiddleware, max_bytes=65536)

        # later, in an exception handler
        raw = getattr(request.state, "request_body", None)
    """

    def __init__(self, app: ASGIApp, max_bytes: int = 64 * 1024) -> None:
        """Initialize middleware.

        Args:
            app: ASGI application.
            max_bytes: Largest prefix of the body to keep.
        """
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self._is_json(scope) or self.max_bytes <= 0:
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        captured = bytearray()

        async def capturing_receive() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                room = self.max_bytes - len(captured)
                if room > 0:
                    captured.extend(message.get("body", b"")[:room])
                    state[STATE_KEY] = bytes(captured)
            return message

        await self.app(scope, capturing_receive, send)

    @staticmethod
    def _is_json(scope: Scope) -> bool:
        for name, value in scope.get("headers", []):
            if name == b"content-type":
                return b"json" in value.lower()
        return False
