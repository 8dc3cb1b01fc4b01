"""
Подмена HTTP-метода для HTML-форм: POST с полем _method=PUT|PATCH|DELETE
обрабатывается как соответствующий метод.
"""
from urllib.parse import parse_qs

from starlette.types import ASGIApp, Message, Receive, Scope, Send

OVERRIDABLE_METHODS = {"PUT", "PATCH", "DELETE"}
FORM_CONTENT_TYPE = b"application/x-www-form-urlencoded"


class MethodOverrideMiddleware:

    def __init__(self, app: ASGIApp, param: str = "_method"):
        self.app = app
        self.param = param

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] != "POST":
            await self.app(scope, receive, send)
            return

        method = self._from_query(scope)
        if method is None and self._is_urlencoded(scope):
            body = await self._read_body(receive)
            method = self._first(parse_qs(body.decode("latin-1")).get(self.param))
            receive = self._replay(body, receive)

        if method and method.upper() in OVERRIDABLE_METHODS:
            scope = dict(scope, method=method.upper())

        await self.app(scope, receive, send)

    def _from_query(self, scope: Scope):
        query = scope.get("query_string", b"").decode("latin-1")
        return self._first(parse_qs(query).get(self.param))

    @staticmethod
    def _first(values):
        return values[0] if values else None

    @staticmethod
    def _is_urlencoded(scope: Scope) -> bool:
        for name, value in scope.get("headers", []):
            if name == b"content-type":
                return value.split(b";")[0].strip().lower() == FORM_CONTENT_TYPE
        return False

    @staticmethod
    async def _read_body(receive: Receive) -> bytes:
        chunks = []
        while True:
            message = await receive()
            if message["type"] != "http.request":
                break
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break
        return b"".join(chunks)

    @staticmethod
    def _replay(body: bytes, receive: Receive) -> Receive:
        sent = False

        async def replay() -> Message:
            nonlocal sent
            if not sent:
                sent = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        return replay
