"""Tests for the response sink and the transport adapter."""

from __future__ import annotations

import json

import httpx

from recce import ResponseRecorder, transport_handler
from recce.serializer import format_headers


class TestResponseRecorder:
    def test_defaults_to_200(self):
        sink = ResponseRecorder()
        sink.write(b"hello")

        response = sink.result()

        assert response.status_code == 200
        assert response.content == b"hello"

    def test_result_without_writes(self):
        response = ResponseRecorder().result()

        assert response.status_code == 200
        assert response.content == b""

    def test_first_status_wins(self):
        sink = ResponseRecorder()
        sink.write_header(201)
        sink.write_header(500)

        assert sink.result().status_code == 201

    def test_str_is_utf8(self):
        sink = ResponseRecorder()

        written = sink.write("café")

        assert written == 5
        assert sink.result().content == "café".encode()

    def test_headers_are_snapshotted_at_status(self):
        sink = ResponseRecorder()
        sink.headers["Content-Type"] = "application/json"
        sink.write_header(404)
        sink.headers["X-Late"] = "ignored"

        response = sink.result()

        assert response.headers["Content-Type"] == "application/json"
        assert "X-Late" not in response.headers

    def test_result_is_bound_to_request(self):
        request = httpx.Request("GET", "/tasks")
        response = ResponseRecorder().result(request=request)

        assert response.request is request


class TestTransportHandler:
    def test_runs_mock_transport(self):
        seen: list[httpx.Request] = []

        def app(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                201,
                headers={"Content-Type": "application/json", "X-Id": "7"},
                json={"echo": json.loads(request.content)},
            )

        handler = transport_handler(httpx.MockTransport(app), base_url="http://api.test")
        request = httpx.Request("POST", "/tasks?x=1", content=b'{"title":"a"}')
        sink = ResponseRecorder()

        handler(sink, request)
        response = sink.result(request=request)

        assert str(seen[0].url) == "http://api.test/tasks?x=1"
        assert seen[0].content == b'{"title":"a"}'
        assert request.url == httpx.URL("/tasks?x=1")
        assert response.status_code == 201
        assert response.headers["X-Id"] == "7"
        assert response.json() == {"echo": {"title": "a"}}

    def test_absolute_url_is_passed_through(self):
        seen: list[httpx.Request] = []

        def app(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        request = httpx.Request("GET", "http://other.test/health")
        sink = ResponseRecorder()

        transport_handler(httpx.MockTransport(app))(sink, request)

        assert seen[0] is request
        assert sink.result().status_code == 204


class TestSentHeaders:
    def test_excludes_framing_headers(self):
        sink = ResponseRecorder()
        sink.headers["Content-Type"] = "text/plain"
        sink.write(b"hello")

        assert "Content-Length" in sink.result().headers
        assert format_headers(sink.sent_headers) == "Content-Type: text/plain\n"

    def test_before_status_is_written(self):
        sink = ResponseRecorder()
        sink.headers["X-Early"] = "1"

        assert sink.sent_headers["X-Early"] == "1"

    def test_is_a_copy(self):
        sink = ResponseRecorder()
        sink.write_header(204)

        sink.sent_headers["X-Mutated"] = "1"

        assert "X-Mutated" not in sink.sent_headers
