"""recce - record in-process HTTP exchanges as REST Client scenario files.

Quick Start:
    from recce import CollectingReporter, Recorder, with_group

    reporter = CollectingReporter()
    with Recorder.start(1, "create task", reporter, with_group("tasks/create")) as rec:
        rec.attach("POST", "/tasks", b'{"title": "Test Task"}')
        rec.set_header("Content-Type", "application/json")
        response = rec.send(handler)

    # recordings/tasks/create/sc1.rest and sc1.resp
"""

from __future__ import annotations

from recce.config import (
    Option,
    RecceSettings,
    RecorderConfig,
    load_settings,
    resolve_config,
    with_group,
    with_host,
    with_output_directory,
    with_port,
    with_prefix,
)
from recce.errors import (
    BodyCaptureError,
    ConfigLoadError,
    ErrorCode,
    ErrorContext,
    OutputError,
    RecceError,
    RequestConstructionError,
    ScenarioAborted,
)
from recce.recorder import Recorder, ScenarioContext, start
from recce.reporting import CollectingReporter, PytestReporter, Reporter
from recce.serializer import format_request, format_response, pretty_print_body
from recce.sink import Handler, ResponseRecorder, transport_handler

__version__ = "0.1.0"

__all__ = [
    # Recording
    "Recorder",
    "ScenarioContext",
    "start",
    # Configuration
    "Option",
    "RecceSettings",
    "RecorderConfig",
    "load_settings",
    "resolve_config",
    "with_group",
    "with_host",
    "with_output_directory",
    "with_port",
    "with_prefix",
    # Handlers
    "Handler",
    "ResponseRecorder",
    "transport_handler",
    # Reporting
    "CollectingReporter",
    "PytestReporter",
    "Reporter",
    # Serialization
    "format_request",
    "format_response",
    "pretty_print_body",
    # Errors
    "BodyCaptureError",
    "ConfigLoadError",
    "ErrorCode",
    "ErrorContext",
    "OutputError",
    "RecceError",
    "RequestConstructionError",
    "ScenarioAborted",
]
