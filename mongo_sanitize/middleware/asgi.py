"""ASGI adapter that runs the middleware pipeline ahead of the application."""

from __future__ import annotations

import json
from typing import Any

import structlog
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from mongo_sanitize.middleware.pipeline import MiddlewarePipeline, RequestContext
from mongo_sanitize.request import SanitizableRequest

logger = structlog.get_logger()

STATE_KEY = "mongo_sanitize"


async def _read_body(receive: Receive) -> bytes:
    chunks: list[bytes] = []
    more_body = True
    while more_body:
        message = await receive()
        if message["type"] != "http.request":
            break
        chunks.append(message.get("body", b""))
        more_body = message.get("more_body", False)
    return b"".join(chunks)


def _parse_json_body(scope: Scope, raw_body: bytes) -> Any:
    """Parse a JSON body; anything else is passed through unparsed."""
    if not raw_body:
        return None
    content_type = Headers(scope=scope).get("content-type", "")
    if "json" not in content_type.split(";")[0].lower():
        return None
    try:
        return json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.debug("request_body_not_json", path=scope.get("path", ""))
        return None


def _replay(body: bytes, receive: Receive) -> Receive:
    sent = False

    async def replay() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class PipelineMiddleware:
    """Run a :class:`MiddlewarePipeline` over each HTTP request.

    The buffered body and query string are exposed as a
    :class:`SanitizableRequest`; after the pipeline runs, the (possibly
    rewritten) query string and body are forwarded to the app. The request
    view stays reachable from handlers as ``request.state.mongo_sanitize``.
    """

    def __init__(self, app: ASGIApp, pipeline: MiddlewarePipeline) -> None:
        self.app = app
        self.pipeline = pipeline

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        raw_body = await _read_body(receive)
        request = SanitizableRequest(scope, _parse_json_body(scope, raw_body), raw_body)
        scope.setdefault("state", {})[STATE_KEY] = request
        context = RequestContext(path=request.path, method=request.method)

        response = await self.pipeline.process_request(request, context)
        if response is not None:
            await response(scope, receive, send)
            return

        body = request.encoded_body()
        if request.body_changed:
            MutableHeaders(scope=scope)["content-length"] = str(len(body))
        await self.app(scope, _replay(body, receive), send)
