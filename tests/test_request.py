"""Request view and adapter write-back tests."""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from mongo_sanitize.config.options import resolve_options
from mongo_sanitize.request import SanitizableRequest, handle_request


def _scope(query_string: bytes = b"", path: str = "/api/users") -> dict:
    return {"type": "http", "method": "GET", "path": path, "query_string": query_string, "headers": []}


class TestSanitizableRequest:
    def test_query_parsing(self):
        request = SanitizableRequest(_scope(b"a=1&b=2&b=3"))
        assert request.query == {"a": "1", "b": ["2", "3"]}

    def test_query_is_read_only(self):
        request = SanitizableRequest(_scope(b"a=1"))
        with pytest.raises(AttributeError):
            request.query = {}

    def test_replace_query_rewrites_scope(self):
        scope = _scope(b"a=1")
        request = SanitizableRequest(scope)
        request.replace_query({"a": "x", "b": ["1", "2"]})
        assert scope["query_string"] == b"a=x&b=1&b=2"
        assert request.query == {"a": "x", "b": ["1", "2"]}

    def test_url_includes_query(self):
        assert SanitizableRequest(_scope(b"a=1")).url == "/api/users?a=1"
        assert SanitizableRequest(_scope()).url == "/api/users"

    def test_params_from_scope(self):
        scope = _scope()
        scope["path_params"] = {"id": "42"}
        assert SanitizableRequest(scope).params == {"id": "42"}

    def test_params_write_through_to_scope(self):
        scope = _scope()
        request = SanitizableRequest(scope)
        request.params = {"id": "7"}
        assert scope["path_params"] == {"id": "7"}

        scope["path_params"] = {"id": "$x"}
        assert request.params == {"id": "$x"}

    def test_unchanged_body_forwarded_raw(self):
        raw = b'{"a":   1}'
        request = SanitizableRequest(_scope(), {"a": 1}, raw)
        assert not request.body_changed
        assert request.encoded_body() == raw

    def test_replaced_body_reencoded(self):
        request = SanitizableRequest(_scope(), {"$a": 1}, b'{"$a": 1}')
        request.body = {"a": 1}
        assert request.body_changed
        assert json.loads(request.encoded_body()) == {"a": 1}


class TestHandleRequest:
    def test_sanitizes_body_and_query(self, make_request):
        request = make_request({"$where": "1==1", "name": "Bob.Smith"}, query_string=b"user%5B%24ne%5D=x&name=a.b")
        handle_request(request, resolve_options())
        assert request.body == {"where": "1==1", "name": "BobSmith"}
        assert request.query == {"userne": "x", "name": "ab"}
        assert request.scope["query_string"] == b"userne=x&name=ab"

    def test_original_body_not_mutated(self, make_request):
        body = {"$a": {"$b": 1}}
        request = make_request(body)
        handle_request(request, resolve_options())
        assert body == {"$a": {"$b": 1}}
        assert request.body == {"a": {"b": 1}}

    def test_array_body_keeps_shape(self, make_request):
        request = make_request([{"$gt": 1}, "a.b"])
        handle_request(request, resolve_options())
        assert request.body == [{"gt": 1}, "ab"]

    def test_empty_sections_skipped(self, make_request):
        request = make_request(None)
        handle_request(request, resolve_options())
        assert request.body is None
        assert not request.body_changed
        assert request.scope["query_string"] == b""

    def test_only_configured_sections(self, make_request):
        request = make_request({"$a": 1}, query_string=b"b.c=1")
        handle_request(request, resolve_options(sanitize_objects=["query"]))
        assert request.body == {"$a": 1}
        assert request.query == {"bc": "1"}

    def test_params_section(self):
        scope = _scope()
        scope["path_params"] = {"id": "$oid"}
        request = SanitizableRequest(scope)
        params = scope["path_params"]
        handle_request(request, resolve_options(sanitize_objects=["params"]))
        assert request.params == {"id": "oid"}
        assert scope["path_params"] is params
        assert params == {"id": "oid"}

    def test_custom_sanitizer_overrides(self, make_request):
        seen = {}

        def custom(data, options):
            seen["data"] = data
            seen["options"] = options
            return {"custom": True}

        opts = resolve_options(custom_sanitizer=custom)
        request = make_request({"$a": 1})
        handle_request(request, opts)
        assert request.body == {"custom": True}
        assert seen["data"] == {"$a": 1}
        assert seen["options"] is opts

    def test_plain_object_host(self):
        request = SimpleNamespace(body={"$a": "b.c"}, query={"x.y": "1"}, url="/x")
        handle_request(request, resolve_options())
        assert request.body == {"a": "bc"}
        assert request.query == {"xy": "1"}

    def test_read_only_section_without_replacement_left_alone(self):
        class ReadOnly:
            url = "/x"

            @property
            def body(self):
                return {"$a": 1}

        request = ReadOnly()
        handle_request(request, resolve_options())
        assert request.body == {"$a": 1}
