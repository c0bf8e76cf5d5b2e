"""pytest plugin: recorder fixtures bound to the running test.

Registered through the ``pytest11`` entry point, so installing recce is
enough. Example:

    def test_create_task(recce):
        rec = recce(1, "create task", with_group("tasks/create"))
        rec.attach("POST", "/tasks", b'{"title": "Test Task"}')
        response = rec.send(handler)
        assert response.status_code == 200
        # files are written when the test tears down
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

import pytest

from recce.config import Option, load_settings
from recce.recorder import Recorder
from recce.reporting import PytestReporter

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("recce", "REST scenario recording")
    group.addoption(
        "--recce-config",
        action="store",
        default=None,
        help="YAML file with recorder defaults (host, port, group, output_dir, prefix).",
    )


@pytest.fixture
def recce_reporter() -> Iterator[PytestReporter]:
    """Reporter that fails the test at teardown if recording went wrong."""
    reporter = PytestReporter()
    yield reporter
    reporter.check()


@pytest.fixture
def recce(
    request: pytest.FixtureRequest, recce_reporter: PytestReporter
) -> Iterator[Callable[..., Recorder]]:
    """Factory for recorders; every recorder it creates is finished at teardown."""
    settings = load_settings(request.config.getoption("--recce-config", default=None))
    recorders: list[Recorder] = []

    def start(sequence: int, name: str, *options: Option) -> Recorder:
        recorder = Recorder.start(sequence, name, recce_reporter, *options, settings=settings)
        recorders.append(recorder)
        return recorder

    yield start

    for recorder in recorders:
        recorder.finish()
    logger.debug("Finished %d recorder(s) for %s", len(recorders), request.node.nodeid)
