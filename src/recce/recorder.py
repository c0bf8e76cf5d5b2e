"""Record one HTTP exchange with an in-process handler.

Example:
    reporter = CollectingReporter()
    with Recorder.start(1, "create task", reporter, with_group("tasks/create")) as rec:
        rec.attach("POST", "/tasks", b'{"title": "Test Task"}')
        rec.set_header("Content-Type", "application/json")
        response = rec.send(handler)
        assert response.status_code == 200
    # recordings/tasks/create/sc1.rest and sc1.resp now exist
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

import httpx

from recce.config import Option, RecceSettings, RecorderConfig, resolve_config
from recce.errors import (
    BodyCaptureError,
    ErrorContext,
    RecceError,
    RequestConstructionError,
    ScenarioAborted,
)
from recce.paths import request_filename, response_filename, scenario_dir, write_scenario_file
from recce.reporting import Reporter
from recce.serializer import format_request, format_response
from recce.sink import Handler, ResponseRecorder

logger = logging.getLogger(__name__)

# RFC 9110 token characters
_METHOD_PATTERN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


@dataclass(frozen=True)
class ScenarioContext:
    """Identity of a recorded scenario and where its failures go."""

    sequence: int
    name: str
    reporter: Reporter


class Recorder:
    """Captures a single request/response pair and writes it to disk.

    A recorder is single-shot: attach one request, send it once, finish.
    """

    def __init__(self, scenario: ScenarioContext, config: RecorderConfig) -> None:
        self.scenario = scenario
        self.config = config
        self._request: httpx.Request | None = None
        self._response: httpx.Response | None = None
        # Headers the caller and the handler set; httpx adds framing headers
        # such as Content-Length and Host to the live objects.
        self._request_headers = httpx.Headers()
        self._response_headers = httpx.Headers()
        self._request_has_body = False
        self._request_body = b""
        self._response_body: bytes | None = None
        self._finished = False

    @classmethod
    def start(
        cls,
        sequence: int,
        name: str,
        reporter: Reporter,
        *options: Option,
        settings: RecceSettings | None = None,
    ) -> Recorder:
        """Begin recording scenario number ``sequence`` with a descriptive name."""
        config = resolve_config(*options, settings=settings)
        return cls(ScenarioContext(sequence=sequence, name=name, reporter=reporter), config)

    @property
    def request(self) -> httpx.Request | None:
        return self._request

    @property
    def response(self) -> httpx.Response | None:
        return self._response

    @property
    def request_body(self) -> bytes | None:
        """Captured request body, or None when the request has no body."""
        return self._request_body if self._request_has_body else None

    @property
    def response_body(self) -> bytes | None:
        return self._response_body

    @property
    def request_headers(self) -> httpx.Headers:
        """Headers written to the ``.rest`` file."""
        return self._request_headers

    @property
    def response_headers(self) -> httpx.Headers:
        """Headers written to the ``.resp`` file."""
        return self._response_headers

    @property
    def output_path(self) -> Path:
        return scenario_dir(self.config.output_dir, self.config.group)

    @property
    def finished(self) -> bool:
        return self._finished

    def attach(
        self,
        method: str,
        url: str | httpx.URL,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Request:
        """Build the request to record.

        Args:
            method: HTTP method. Empty means GET.
            url: Target URL, usually a path such as ``/tasks``.
            body: None, bytes, str, or a binary file-like or iterable of bytes.
            headers: Initial request headers.
        """
        if self._request is not None:
            self._abort("a request is already attached; a recorder records one exchange")

        try:
            request = _build_request(method, url, body, headers)
        except RequestConstructionError as e:
            e.context.sequence = self.scenario.sequence
            e.context.group = self.config.group
            self._abort(str(e))

        self._request = request
        self._request_headers = httpx.Headers(headers)
        self._request_has_body = body is not None
        return request

    def set_header(self, key: str, value: str) -> None:
        """Set a header on the attached request, replacing existing values."""
        if self._request is None:
            self._abort("no request attached; call attach() before set_header()")
        self._request.headers[key] = value
        self._request_headers[key] = value

    def send(self, handler: Handler) -> httpx.Response:
        """Run the attached request through ``handler`` and capture both bodies.

        Both body streams are replaced after capture, so the handler and the
        caller can still read them. Capture failures abort the test.
        """
        if self._request is None:
            self._abort("no request attached; call attach() before send()")
        if self._response is not None:
            self._abort("send() already called; a recorder records one exchange")

        request = self._request
        if self._request_has_body:
            self._request_body = self._capture(request, "request")
            if "Transfer-Encoding" in request.headers:
                # the captured body has a known length
                del request.headers["Transfer-Encoding"]
                request.headers["Content-Length"] = str(len(self._request_body))

        sink = ResponseRecorder()
        logger.debug("Sending %s %s to handler", request.method, request.url)
        handler(sink, request)

        response = sink.result(request=request)
        self._response = response
        self._response_headers = sink.sent_headers
        self._response_body = self._capture(response, "response")
        return response

    def finish(self) -> None:
        """Write the scenario files and close the response.

        Failures are reported without stopping, so every step runs. Calling
        finish again does nothing.
        """
        if self._finished:
            return
        self._finished = True

        self._run_step(self._write_request_file)
        self._run_step(self._write_response_file)
        if self._response is not None:
            try:
                self._response.close()
            except (RuntimeError, httpx.StreamError) as e:
                self._report(f"error closing response body: {e}")

    def __enter__(self) -> Recorder:
        return self

    def __exit__(self, *args: Any) -> None:
        self.finish()

    @property
    def _reporter(self) -> Reporter:
        return self.scenario.reporter

    def _error_context(self) -> ErrorContext:
        return ErrorContext(sequence=self.scenario.sequence, group=self.config.group)

    def _abort(self, message: str) -> NoReturn:
        self._reporter.fail_now(message)
        # fail_now must not return; stop here if a reporter does
        raise ScenarioAborted(message)

    def _capture(self, message: httpx.Request | httpx.Response, kind: str) -> bytes:
        try:
            data = message.read()
        except (OSError, httpx.HTTPError, httpx.StreamError) as e:
            error = BodyCaptureError(
                f"error reading {kind} body: {e}",
                context=self._error_context(),
                cause=e,
            )
            self._abort(str(error))

        message.stream = httpx.ByteStream(data)
        logger.debug("Captured %d byte %s body", len(data), kind)
        return data

    def _run_step(self, step: Callable[[], Path]) -> None:
        try:
            path = step()
        except RecceError as e:
            self._report(str(e))
        else:
            logger.info(
                "Recorded scenario %d (%s) to %s",
                self.scenario.sequence,
                self.config.group,
                path,
            )

    def _report(self, message: str) -> None:
        self._reporter.fail(message)

    def _write_request_file(self) -> Path:
        if self._request is None:
            raise RecceError("no request attached; nothing to record", context=self._error_context())
        content = format_request(
            self.scenario,
            self.config,
            self._request,
            self.request_body,
            headers=self._request_headers,
        )
        return write_scenario_file(self.output_path, request_filename(self.scenario.sequence), content)

    def _write_response_file(self) -> Path:
        if self._request is None or self._response is None:
            raise RecceError("no response captured; call send() before finish()", context=self._error_context())
        content = format_response(
            self._request,
            self._response,
            self._response_body,
            headers=self._response_headers,
        )
        return write_scenario_file(self.output_path, response_filename(self.scenario.sequence), content)


def _build_request(
    method: str,
    url: str | httpx.URL,
    body: Any,
    headers: Mapping[str, str] | None,
) -> httpx.Request:
    method = method or "GET"
    if not _METHOD_PATTERN.fullmatch(method):
        raise RequestConstructionError(f"invalid method {method!r}", method=method)
    try:
        return httpx.Request(method, url, content=body, headers=headers)
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise RequestConstructionError(
            f"error creating request {method} {url}: {e}",
            cause=e,
            url=str(url),
        ) from e


def start(
    sequence: int,
    name: str,
    reporter: Reporter,
    *options: Option,
    settings: RecceSettings | None = None,
) -> Recorder:
    """Shortcut for ``Recorder.start``."""
    return Recorder.start(sequence, name, reporter, *options, settings=settings)


__all__ = ["Recorder", "ScenarioContext", "start"]
