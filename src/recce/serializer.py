"""Render captured exchanges as REST-client scenario files.

``format_request`` produces the ``.rest`` file, which the REST Client
extensions for VS Code and GoLand can replay. ``format_response`` produces
the ``.resp`` file, a plain-text record of what the handler returned.

Bodies are emitted byte-for-byte. Bytes that are not valid UTF-8 are carried
through the returned string as surrogate escapes and restored on write.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from recce.config import RecorderConfig
    from recce.recorder import ScenarioContext

# HTTP version shown for requests built in-process.
REQUEST_PROTOCOL = "HTTP/1.1"

JSON_CONTENT_TYPE = "application/json"

REQUEST_BANNER = (
    "// Automatically generated. Do not edit.\n"
    "// To reproduce this request, install REST client extension for VS Code or Goland"
    ' and run the "Send Request" command.\n'
    "// File generated at {timestamp}\n"
    "// ------------------------------------------------------------\n"
    "\n"
)

RESPONSE_BANNER = (
    "// Automatically generated. Do not edit.\n"
    "// File generated at {timestamp}\n"
    "// ------------------------------------------------------------\n"
)

# English month names, independent of the process locale.
_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def format_timestamp(moment: datetime) -> str:
    """Format as ``DD Month YYYY HH:MM:SS``."""
    return f"{moment:%d} {_MONTHS[moment.month - 1]} {moment:%Y %H:%M:%S}"


def is_json_content_type(headers: httpx.Headers) -> bool:
    """Check whether the primary MIME type is application/json."""
    content_type = headers.get("Content-Type", "")
    mime_type = content_type.split(";")[0]
    return mime_type.strip() == JSON_CONTENT_TYPE


_JSON_WHITESPACE = " \t\r\n"


def pretty_print_body(body: bytes, as_json: bool) -> bytes:
    """Re-indent a JSON body with two spaces, or return it unchanged.

    Only whitespace between tokens changes: numbers, strings and escapes are
    copied exactly as written, and trailing whitespace is kept. Bodies that
    fail to parse are returned as they are.
    """
    if not as_json:
        return body
    try:
        text = body.decode("utf-8")
        json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return body

    value = text.strip(_JSON_WHITESPACE)
    trailing = text[len(text.rstrip(_JSON_WHITESPACE)) :]
    return (_indent(value) + trailing).encode("utf-8")


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON.
    raise ValueError(f"invalid JSON constant {name}")


def _indent(value: str, indent: str = "  ") -> str:
    """Lay out a valid JSON document one member per line."""
    out: list[str] = []
    depth = 0
    in_string = False
    escaped = False
    # set after an opening bracket until we know whether it is empty
    pending_open = False

    def newline() -> None:
        out.append("\n" + indent * depth)

    for char in value:
        if in_string:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char in _JSON_WHITESPACE:
            continue

        if pending_open:
            pending_open = False
            if char in "]}":
                out.append(char)
                continue
            depth += 1
            newline()

        if char in "{[":
            out.append(char)
            pending_open = True
        elif char in "]}":
            depth -= 1
            newline()
            out.append(char)
        elif char == ",":
            out.append(char)
            newline()
        elif char == ":":
            out.append(": ")
        else:
            if char == '"':
                in_string = True
            out.append(char)

    return "".join(out)


def _decode(body: bytes) -> str:
    return body.decode("utf-8", errors="surrogateescape")


def format_headers(headers: httpx.Headers) -> str:
    """One ``Key: Value`` line per header value, in stored order."""
    encoding = headers.encoding
    return "".join(
        f"{key.decode(encoding)}: {value.decode(encoding)}\n" for key, value in headers.raw
    )


def format_request(
    scenario: ScenarioContext,
    config: RecorderConfig,
    request: httpx.Request,
    body: bytes | None,
    generated_at: datetime | None = None,
    headers: httpx.Headers | None = None,
) -> str:
    """Render the ``.rest`` file for a scenario.

    Args:
        scenario: Sequence number and name of the scenario.
        config: Supplies the group and the displayed host and port.
        request: The request that was sent.
        body: Captured request body, or None when the request had none.
        generated_at: Banner timestamp. Defaults to now.
        headers: Headers to write. Defaults to ``request.headers``, which
            includes the framing headers httpx adds.
    """
    timestamp = format_timestamp(generated_at or datetime.now())
    target = request.url.raw_path.decode("ascii")

    parts = [
        REQUEST_BANNER.format(timestamp=timestamp),
        f"// SCENARIO {scenario.sequence} ({config.group})\n",
        f"// Name: {scenario.name}\n",
        f"{request.method} {config.host}:{config.port}{target} {REQUEST_PROTOCOL}\n",
        format_headers(request.headers if headers is None else headers),
    ]

    if body is not None:
        parts.append("\n")
        parts.append(_decode(pretty_print_body(body, is_json_content_type(request.headers))))

    return "".join(parts)


def format_response(
    request: httpx.Request,
    response: httpx.Response,
    body: bytes | None,
    generated_at: datetime | None = None,
    headers: httpx.Headers | None = None,
) -> str:
    """Render the ``.resp`` file for a scenario.

    Whether the body is pretty-printed depends on the *request's*
    Content-Type, not the response's.
    """
    timestamp = format_timestamp(generated_at or datetime.now())
    status = f"{response.status_code} {response.reason_phrase}".rstrip()

    parts = [
        RESPONSE_BANNER.format(timestamp=timestamp),
        f"{request.method} {request.url} {REQUEST_PROTOCOL}\n\n",
        f"{response.http_version} {status}\n",
        format_headers(response.headers if headers is None else headers),
        "\n",
    ]

    if body is not None:
        parts.append(_decode(pretty_print_body(body, is_json_content_type(request.headers))))

    return "".join(parts)


__all__ = [
    "format_headers",
    "format_request",
    "format_response",
    "format_timestamp",
    "is_json_content_type",
    "pretty_print_body",
]
