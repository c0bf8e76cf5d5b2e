"""Output locations for recorded scenarios."""

from __future__ import annotations

import logging
from pathlib import Path

from recce.errors import ErrorContext, OutputError

logger = logging.getLogger(__name__)

REQUEST_SUFFIX = ".rest"
RESPONSE_SUFFIX = ".resp"


def scenario_dir(output_dir: str | Path, group: str) -> Path:
    """Join each ``/``-separated segment of ``group`` under ``output_dir``.

    Empty segments are skipped, so an empty group resolves to the root.
    """
    segments = [segment for segment in group.split("/") if segment]
    return Path(output_dir).joinpath(*segments)


def request_filename(sequence: int) -> str:
    return f"sc{sequence}{REQUEST_SUFFIX}"


def response_filename(sequence: int) -> str:
    return f"sc{sequence}{RESPONSE_SUFFIX}"


def ensure_dir(directory: Path) -> None:
    """Create ``directory`` and its parents if they are missing."""
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputError(
            f"error creating directories: {e}",
            context=ErrorContext(path=str(directory)),
            cause=e,
        ) from e


def write_scenario_file(directory: Path, filename: str, content: str) -> Path:
    """Create ``directory`` if needed and overwrite ``filename`` in it."""
    ensure_dir(directory)
    path = directory / filename
    try:
        # surrogateescape restores body bytes that were not valid UTF-8
        with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
            f.write(content)
    except (OSError, UnicodeError) as e:
        raise OutputError(
            f"error writing to file: {e}",
            context=ErrorContext(path=str(path)),
            cause=e,
        ) from e

    logger.debug("Wrote %s (%d chars)", path, len(content))
    return path


__all__ = [
    "REQUEST_SUFFIX",
    "RESPONSE_SUFFIX",
    "ensure_dir",
    "request_filename",
    "response_filename",
    "scenario_dir",
    "write_scenario_file",
]
