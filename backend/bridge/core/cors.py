from typing import Sequence

from starlette.datastructures import MutableHeaders
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
ALLOW_HEADERS = ["Content-Type", "Authorization", "X-Requested-With"]


class OpenCORSMiddleware(CORSMiddleware):
    """
    Starlette's CORS middleware, made unconditional.

    Cross-origin headers go on every response, whether or not the request
    carried an Origin header, and every OPTIONS request is answered with an
    empty 200 before routing.
    """

    def __init__(
        self,
        app: ASGIApp,
        allow_methods: Sequence[str] = ALLOW_METHODS,
        allow_headers: Sequence[str] = ALLOW_HEADERS,
        max_age: int = 600,
    ) -> None:
        super().__init__(
            app,
            allow_origins=["*"],
            allow_methods=allow_methods,
            allow_headers=allow_headers,
            max_age=max_age,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if scope["method"] == "OPTIONS":
            response = Response(status_code=200, headers=self.preflight_headers)
            await response(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.update(self.preflight_headers)
            await send(message)

        await self.app(scope, receive, send_with_cors)
