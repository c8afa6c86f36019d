"""Mongo sanitizer middleware: neutralizes NoSQL-injection input before handlers run."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from starlette.responses import Response

from mongo_sanitize.config.options import SanitizeOptions, resolve_options
from mongo_sanitize.middleware.pipeline import Middleware, RequestContext
from mongo_sanitize.request import SanitizableRequest, handle_request
from mongo_sanitize.route_filter import clean_url, should_skip


class MongoSanitizer(Middleware):
    """Sanitize configured request sections (``body`` and ``query`` by default).

    Modes:
      - auto: every request that is not on a skip route is sanitized
      - manual: requests pass through untouched; ``request.sanitize(**overrides)``
        is attached so a handler can sanitize on demand

    In manual mode sanitization happens after Starlette has parsed the
    request, so ``request.query_params``, ``request.json()`` and the endpoint's
    own parameters keep the raw values. Handlers read sanitized data from the
    view at ``request.state.mongo_sanitize`` (``.body``, ``.query``,
    ``.params``) after calling ``.sanitize()``.

    Options are resolved in the constructor, so invalid configuration raises
    :class:`~mongo_sanitize.errors.ConfigurationError` at startup. The
    middleware never short-circuits the pipeline.
    """

    def __init__(self, options: Mapping[str, Any] | SanitizeOptions | None = None, /, **overrides: Any) -> None:
        self.options = resolve_options(options, **overrides)

    def apply(self, request: Any) -> None:
        """Run the skip check and the configured mode against *request*."""
        options = self.options
        diagnostics = options.diagnostics
        method = getattr(request, "method", "")
        diagnostics.emit("trace", "MIDDLEWARE", "incoming_request", url=getattr(request, "url", None), method=method)

        path = getattr(request, "path", None) or getattr(request, "url", None)
        if should_skip(options.skip_routes, path):
            if diagnostics.log_skipped_routes:
                diagnostics.emit("info", "SKIP", "route_skipped", method=method, path=clean_url(path))
            return

        if options.mode == "auto":
            diagnostics.emit("trace", "MIDDLEWARE", "auto_mode_sanitizing")
            handle_request(request, options)
            return

        diagnostics.emit("trace", "MIDDLEWARE", "manual_mode_exposing_sanitize")

        def sanitize(overrides: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
            handle_request(request, options.merge(overrides, **kwargs))

        request.sanitize = sanitize

    async def process_request(self, request: SanitizableRequest, context: RequestContext) -> Response | None:
        self.apply(request)
        if self.options.mode == "manual" and hasattr(request, "sanitize"):
            context.extra["sanitize"] = request.sanitize
        return None


def create(options: Mapping[str, Any] | SanitizeOptions | None = None, /, **overrides: Any) -> MongoSanitizer:
    """Build a sanitizer middleware from *options*; raises on invalid configuration."""
    return MongoSanitizer(options, **overrides)
