"""Route-parameter sanitizer tests."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request

from mongo_sanitize import param_dependency, param_handler, path_params_dependency
from mongo_sanitize.errors import ConfigurationError


class TestParamHandler:
    def test_sanitizes_and_stores(self):
        handler = param_handler()
        request = SimpleNamespace(params={"id": "$oid.x"})

        assert handler(request, "$oid.x", "id") == "oidx"
        assert request.params == {"id": "oidx"}

    def test_non_string_untouched(self):
        handler = param_handler()
        request = SimpleNamespace(params={"id": 5})

        assert handler(request, 5, "id") == 5
        assert request.params == {"id": 5}

    def test_missing_name_untouched(self):
        handler = param_handler()
        request = SimpleNamespace(params={"id": "$x"})

        assert handler(request, "$x", None) == "$x"
        assert request.params == {"id": "$x"}

    def test_treated_as_value(self):
        handler = param_handler(string_options={"max_length": 2})
        request = SimpleNamespace(params={})

        assert handler(request, "abcdef", "slug") == "ab"

    def test_email_kept(self):
        handler = param_handler()
        request = SimpleNamespace(params={})

        assert handler(request, "bob.smith@example.com", "email") == "bob.smith@example.com"

    def test_starlette_path_params(self):
        scope = {"type": "http", "method": "GET", "path": "/u/a.b", "headers": [], "path_params": {"id": "a.b"}}
        request = Request(scope)

        handler = param_handler()
        handler(request, request.path_params["id"], "id")

        assert request.path_params["id"] == "ab"
        assert scope["path_params"]["id"] == "ab"

    def test_invalid_options(self):
        with pytest.raises(ConfigurationError):
            param_handler(replace_with=None)


def test_fastapi_dependency():
    app = FastAPI()

    @app.get("/users/{user_id}")
    async def get_user(request: Request, user_id: str = Depends(param_dependency("user_id"))):
        return {"user_id": user_id, "path_param": request.path_params["user_id"]}

    with TestClient(app) as client:
        resp = client.get("/users/a.b")

    assert resp.status_code == 200
    assert resp.json() == {"user_id": "ab", "path_param": "ab"}


def _items_app(**options):
    app = FastAPI(dependencies=[Depends(path_params_dependency(**options))])

    @app.get("/items/{item_id}")
    async def get_item(item_id: str):
        return {"item_id": item_id}

    return app


class TestPathParamsDependency:
    def test_endpoint_receives_sanitized_params(self):
        with TestClient(_items_app()) as client:
            resp = client.get("/items/$ne.x")
        assert resp.json() == {"item_id": "nex"}

    def test_skip_route_untouched(self):
        with TestClient(_items_app(skip_routes=["/items/$ne.x"])) as client:
            resp = client.get("/items/$ne.x")
        assert resp.json() == {"item_id": "$ne.x"}

    def test_manual_mode_untouched(self):
        with TestClient(_items_app(mode="manual")) as client:
            resp = client.get("/items/$ne.x")
        assert resp.json() == {"item_id": "$ne.x"}

    def test_invalid_options(self):
        with pytest.raises(ConfigurationError):
            path_params_dependency(mode="sideways")
