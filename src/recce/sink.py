"""Response sink handed to in-process handlers.

A handler is any callable with the signature ``handler(sink, request)``. It
sets headers on ``sink.headers``, optionally calls ``sink.write_header`` and
writes the body with ``sink.write``. The recorder then turns the sink into an
``httpx.Response`` with ``sink.result()``.

Example:
    def health(sink: ResponseRecorder, request: httpx.Request) -> None:
        sink.headers["Content-Type"] = "application/json"
        sink.write(b'{"status": "ok"}')
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx

logger = logging.getLogger(__name__)


class ResponseRecorder:
    """Collects the status, headers and body a handler produces."""

    def __init__(self) -> None:
        self.headers = httpx.Headers()
        self.status_code: int | None = None
        self.body = bytearray()
        self._sent_headers: httpx.Headers | None = None

    @property
    def wrote_header(self) -> bool:
        return self.status_code is not None

    def write_header(self, status_code: int) -> None:
        """Set the status code. Only the first call has any effect."""
        if self.wrote_header:
            logger.debug("Ignoring superfluous write_header(%d)", status_code)
            return
        self.status_code = status_code
        # Headers changed after this point are not part of the response.
        self._sent_headers = httpx.Headers(self.headers.raw)

    @property
    def sent_headers(self) -> httpx.Headers:
        """Headers as they were when the status was written.

        Unlike ``result().headers`` this holds no Content-Length unless the
        handler set one.
        """
        return httpx.Headers(self._sent_headers.raw if self._sent_headers is not None else self.headers.raw)

    def write(self, data: bytes | str) -> int:
        """Append to the body, writing a 200 status first if none was set."""
        if not self.wrote_header:
            self.write_header(200)
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.body.extend(data)
        return len(data)

    def result(self, request: httpx.Request | None = None) -> httpx.Response:
        """Build the response the handler produced."""
        if not self.wrote_header:
            self.write_header(200)
        return httpx.Response(
            status_code=self.status_code,
            headers=self._sent_headers,
            content=bytes(self.body),
            request=request,
        )


Handler = Callable[[ResponseRecorder, httpx.Request], None]


def transport_handler(
    transport: httpx.BaseTransport,
    base_url: str = "http://testserver",
) -> Handler:
    """Adapt an httpx transport to the handler contract.

    Useful for running WSGI applications in-process through
    ``httpx.WSGITransport``, or canned responses through
    ``httpx.MockTransport``. Relative request URLs are resolved against
    ``base_url`` for the transport call only; the recorded request keeps
    its original URL.
    """
    base = httpx.URL(base_url)

    def handler(sink: ResponseRecorder, request: httpx.Request) -> None:
        outgoing = request
        if request.url.is_relative_url:
            outgoing = httpx.Request(
                request.method,
                base.join(request.url),
                headers=request.headers,
                content=request.read(),
            )

        logger.debug("Dispatching %s %s through %s", outgoing.method, outgoing.url, type(transport).__name__)
        response = transport.handle_request(outgoing)
        try:
            body = response.read()
        finally:
            response.close()

        raw_headers = response.headers.raw
        if "Content-Encoding" in response.headers:
            # read() decoded the body, so the framing headers no longer apply
            raw_headers = [
                (key, value)
                for key, value in raw_headers
                if key.lower() not in (b"content-encoding", b"content-length")
            ]
        sink.headers = httpx.Headers(sink.headers.raw + raw_headers)
        sink.write_header(response.status_code)
        sink.write(body)

    return handler


__all__ = ["Handler", "ResponseRecorder", "transport_handler"]
