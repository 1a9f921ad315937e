"""Tests for waypoint.context — status/body rules and response headers."""

import pytest

from waypoint.context import Context
from waypoint.errors import HTTPError
from waypoint.http.headers import Headers


class TestStatus:
    def test_defaults_to_404(self) -> None:
        ctx = Context("get", "/")
        assert ctx.status == 404
        assert ctx.body is None
        assert ctx.method == "GET"

    def test_body_sets_200(self) -> None:
        ctx = Context("GET", "/")
        ctx.body = "hello"
        assert ctx.status == 200

    def test_none_body_sets_204(self) -> None:
        ctx = Context("GET", "/")
        ctx.body = None
        assert ctx.status == 204

    def test_explicit_status_kept(self) -> None:
        ctx = Context("GET", "/")
        ctx.status = 201
        ctx.body = {"id": 1}
        assert ctx.status == 201

    def test_body_reassignment_keeps_200(self) -> None:
        ctx = Context("GET", "/")
        ctx.body = "wor"
        ctx.body += "ld"
        assert ctx.status == 200
        assert ctx.body == "world"


class TestHeaders:
    def test_set_and_get_case_insensitive(self) -> None:
        ctx = Context("GET", "/")
        ctx.set("X-Trace", "abc")
        assert ctx.get_header("x-trace") == "abc"

    def test_set_replaces(self) -> None:
        ctx = Context("GET", "/")
        ctx.set("Allow", "GET")
        ctx.set("allow", "GET, PUT")
        assert list(ctx.response_headers) == [("allow", "GET, PUT")]

    def test_append_keeps_both(self) -> None:
        ctx = Context("GET", "/")
        ctx.response_headers.append("Set-Cookie", "a=1")
        ctx.response_headers.append("Set-Cookie", "b=2")
        assert len(ctx.response_headers) == 2

    def test_request_headers(self) -> None:
        headers = Headers(((b"Content-Type", b"text/plain"), (b"accept", b"a"), (b"Accept", b"b")))
        ctx = Context("GET", "/", headers=headers)
        assert ctx.headers["content-type"] == "text/plain"
        assert ctx.headers.get_list("accept") == ["a", "b"]
        assert "ACCEPT" in ctx.headers
        assert ctx.headers.get("missing") is None
        assert len(ctx.headers) == 2

    def test_request_header_names_lower_cased(self) -> None:
        headers = Headers([(b"X-Request-Id", b"1"), (b"x-request-id", b"2")])
        assert list(headers) == ["x-request-id"]
        assert headers["X-REQUEST-ID"] == "1"
        assert headers.get_list("missing") == []
        assert headers.get("missing", "none") == "none"
        with pytest.raises(KeyError):
            headers["missing"]


class TestThrow:
    def test_raises_http_error(self) -> None:
        ctx = Context("GET", "/")
        with pytest.raises(HTTPError) as exc_info:
            ctx.throw(403, "nope", [("X-Reason", "policy")])
        assert exc_info.value.status == 403
        assert exc_info.value.detail == "nope"
        assert exc_info.value.headers == (("X-Reason", "policy"),)
