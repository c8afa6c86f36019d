"""Route-parameter sanitization, usable outside the request pipeline."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from starlette.requests import Request

from mongo_sanitize.config.options import SanitizeOptions, resolve_options
from mongo_sanitize.request import SanitizableRequest, handle_request
from mongo_sanitize.route_filter import should_skip
from mongo_sanitize.sanitizer import sanitize_string

ParamHandler = Callable[..., Any]


def param_handler(options: Mapping[str, Any] | SanitizeOptions | None = None, /, **overrides: Any) -> ParamHandler:
    """Return ``handler(request, value, name)`` that sanitizes one route parameter.

    The sanitized string is stored back into ``request.params`` (or Starlette's
    ``request.path_params``) and returned. Non-string values are left alone.
    """
    opts = resolve_options(options, **overrides)

    def handler(request: Any, value: Any, name: str | None = None) -> Any:
        params = getattr(request, "params", None)
        if params is None:
            params = getattr(request, "path_params", None)
        if not name or params is None or not isinstance(value, str):
            return value
        before = params.get(name)
        params[name] = sanitize_string(value, opts, True)
        opts.diagnostics.emit("debug", "PARAM", "param_sanitized", name=name, before=before, after=params[name])
        return params[name]

    return handler


def param_dependency(
    name: str, options: Mapping[str, Any] | SanitizeOptions | None = None, /, **overrides: Any
) -> Callable[[Request], Any]:
    """FastAPI dependency sanitizing path parameter *name*.

    Usage: ``user_id: str = Depends(param_dependency("user_id"))``
    """
    handler = param_handler(options, **overrides)

    async def dependency(request: Request) -> Any:
        return handler(request, request.path_params.get(name), name)

    return dependency


def path_params_dependency(
    options: Mapping[str, Any] | SanitizeOptions | None = None, /, **overrides: Any
) -> Callable[[Request], Any]:
    """FastAPI dependency sanitizing every path parameter of the matched route.

    Path parameters only exist once the router has matched, which is after the
    ASGI pipeline ran, so the ``params`` section is handled here instead.
    Register it app-wide with ``FastAPI(dependencies=[Depends(...)])``; it
    must run before the endpoint's own parameters are resolved. Skip routes
    and manual mode are honored the same way as in the pipeline.
    """
    opts = resolve_options(options, **overrides).merge(sanitize_objects=("params",))

    async def dependency(request: Request) -> None:
        if opts.mode != "auto" or should_skip(opts.skip_routes, request.scope.get("path")):
            return
        handle_request(SanitizableRequest(request.scope), opts)

    return dependency
