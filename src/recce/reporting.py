"""Failure reporting for recorders.

A recorder never raises output errors at the caller. It hands them to a
reporter, which either records them and lets the test continue (``fail``) or
stops the test on the spot (``fail_now``).
"""

from __future__ import annotations

import logging
from typing import NoReturn, Protocol, runtime_checkable

import pytest

from recce.errors import ScenarioAborted

logger = logging.getLogger(__name__)


@runtime_checkable
class Reporter(Protocol):
    """Test-failure reporting capability."""

    def fail(self, message: str) -> None:
        """Record a failure and continue."""
        ...

    def fail_now(self, message: str) -> NoReturn:
        """Record a failure and abort the current test."""
        ...


class CollectingReporter:
    """Reporter for plain Python callers.

    Non-fatal failures accumulate in ``failures``; ``fail_now`` raises
    ScenarioAborted.
    """

    def __init__(self) -> None:
        self.failures: list[str] = []

    @property
    def failed(self) -> bool:
        return bool(self.failures)

    def fail(self, message: str) -> None:
        logger.warning("Recording failure: %s", message)
        self.failures.append(message)

    def fail_now(self, message: str) -> NoReturn:
        logger.error("Recording aborted: %s", message)
        self.failures.append(message)
        raise ScenarioAborted(message)

    def raise_for_failures(self) -> None:
        """Raise AssertionError listing every recorded failure, if any."""
        if self.failures:
            raise AssertionError(_summarize(self.failures))


class PytestReporter(CollectingReporter):
    """Reporter bound to the running pytest test."""

    def fail_now(self, message: str) -> NoReturn:
        logger.error("Recording aborted: %s", message)
        self.failures.append(message)
        pytest.fail(message)

    def check(self) -> None:
        """Fail the current test if any non-fatal failure was recorded."""
        if self.failures:
            pytest.fail(_summarize(self.failures))


def _summarize(failures: list[str]) -> str:
    lines = [f"{len(failures)} recording failure(s):"]
    lines.extend(f"  - {failure}" for failure in failures)
    return "\n".join(lines)


__all__ = ["CollectingReporter", "PytestReporter", "Reporter"]
